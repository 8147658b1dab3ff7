"""Building blocks for filter expressions in the target query language."""

import json
from typing import Any, List, Optional, Sequence

from ..coerce import as_string, format_number
from ..models import CompiledFilter


def render_literal(value: Any) -> str:
    """Render a resolved value as an expression literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    text = as_string(value)
    if text:
        return json.dumps(text, ensure_ascii=False)
    encoded = json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    return json.dumps(encoded, ensure_ascii=False)


def literal_list(value: Any) -> Optional[List[str]]:
    """Literals for a list-shaped value, or None when the value is a scalar."""
    if isinstance(value, (list, tuple)):
        return [render_literal(item) for item in value]
    return None


def negate(expr: str) -> str:
    return f"!({expr})"


def _contains(address: str, literal: str) -> str:
    return f"list({address}).contains({literal})"


def contains_any(address: str, literals: Sequence[str]) -> str:
    """True when the property holds any of the literals; `false` for none."""
    if not literals:
        return "false"
    parts = [_contains(address, literal) for literal in literals]
    if len(parts) == 1:
        return parts[0]
    return "(" + " || ".join(parts) + ")"


def contains_all(address: str, literals: Sequence[str]) -> str:
    """True when the property holds every literal; `true` for none."""
    if not literals:
        return "true"
    parts = [_contains(address, literal) for literal in literals]
    if len(parts) == 1:
        return parts[0]
    return "(" + " && ".join(parts) + ")"


def equals_or_contains(address: str, literal: str) -> str:
    """Scalar equality or list membership, whichever shape the property has."""
    return f"({address} == {literal} || {contains_any(address, [literal])})"


def is_empty(address: str) -> str:
    return f'({address} == null || {address} == "")'


def and_filters(left: Optional[CompiledFilter], right: Optional[CompiledFilter]) -> Optional[CompiledFilter]:
    """Conjoin two optional filters; absence on either side is neutral."""
    if left is None:
        return right
    if right is None:
        return left
    return CompiledFilter(op="and", items=[left, right])
