"""Data models for anyvault."""

from .relations import (
    ExportObject,
    LinkTarget,
    OptionRecord,
    RelationDefinition,
    TypeDefinition,
    ValueFormat,
)
from .views import (
    CompiledFilter,
    CompiledGroup,
    CompiledSort,
    CompiledView,
    FilterBranch,
    FilterLeaf,
    FilterNode,
    SortTerm,
    ViewColumn,
    ViewSpec,
)

__all__ = [
    "ExportObject",
    "LinkTarget",
    "OptionRecord",
    "RelationDefinition",
    "TypeDefinition",
    "ValueFormat",
    "CompiledFilter",
    "CompiledGroup",
    "CompiledSort",
    "CompiledView",
    "FilterBranch",
    "FilterLeaf",
    "FilterNode",
    "SortTerm",
    "ViewColumn",
    "ViewSpec",
]
