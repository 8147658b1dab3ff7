"""
Conversion issues for anyvault.

None of these ever reach a caller of the core: they are raised by low-level
helpers and caught at the component seams, where the offending value, leaf or
node degrades to a visible literal or is skipped.
"""


class ConversionIssue(Exception):
    """Base class for per-record conversion problems."""


class UnresolvedReference(ConversionIssue):
    """An identifier has no registry entry."""

    def __init__(self, ref: str, registry: str = ""):
        self.ref = ref
        self.registry = registry
        where = f" in {registry}" if registry else ""
        super().__init__(f"Unresolved reference {ref!r}{where}")


class UnparseableValue(ConversionIssue):
    """A date or number could not be parsed."""

    def __init__(self, value, kind: str = "value"):
        self.value = value
        self.kind = kind
        super().__init__(f"Unparseable {kind}: {value!r}")


class UnaddressableProperty(ConversionIssue):
    """No filter address can be formed for a property key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cannot address property {key!r}")


class MalformedViewSpec(ConversionIssue):
    """A view or filter node is missing required fields."""
