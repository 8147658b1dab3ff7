"""
View models for anyvault.

Source-side view specifications (as parsed from dataview blocks) and the
compiled, target-side view representation handed to the base-file writer.
"""

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ViewKind = Literal["table", "list", "cards", "kanban"]


class FilterLeaf(BaseModel):
    """A single filter condition on one property."""

    model_config = ConfigDict(frozen=True)

    property_key: str = Field(
        ...,
        description="Raw relation key or id the condition applies to"
    )

    condition: str = Field(
        ...,
        description="Source condition name, e.g. 'Equal' or 'NotIn'"
    )

    value: Any = Field(
        default=None,
        description="Raw comparison value as found in the source"
    )

    format: str = Field(
        default="",
        description="Lower-cased source format hint, e.g. 'date' or 'status'"
    )

    include_time: bool = False
    quick_option: str = ""


class FilterBranch(BaseModel):
    """
    A conjunction or disjunction of filter nodes.

    Source NOT branches are normalised away during parsing, so only `and` and
    `or` appear here.
    """

    model_config = ConfigDict(frozen=True)

    operator: Literal["and", "or"]
    children: List["FilterNode"] = Field(default_factory=list)


FilterNode = Union[FilterBranch, FilterLeaf]

FilterBranch.model_rebuild()


class SortTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    property_key: str
    direction: str = ""
    empty_placement: str = ""
    include_time: bool = False
    collate: bool = True
    custom_order: List[Any] = Field(
        default_factory=list,
        description="Raw ids in the order the source specified"
    )


class ViewColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    property_key: str
    visible: bool = True


class ViewSpec(BaseModel):
    """A saved view: filters, sorts, grouping and visible columns."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    kind: ViewKind = "table"
    name: str = "View"
    page_limit: int = 0
    columns: List[ViewColumn] = Field(default_factory=list)
    sort_terms: List[SortTerm] = Field(default_factory=list)
    filter_tree: Optional[FilterNode] = None
    group_key: str = ""


class CompiledFilter(BaseModel):
    """
    A node in the compiled filter tree: either a single expression string or an
    `and`/`or` group of child nodes.
    """

    model_config = ConfigDict(frozen=True)

    expr: str = ""
    op: str = ""
    items: List["CompiledFilter"] = Field(default_factory=list)

    @property
    def is_expression(self) -> bool:
        return bool(self.expr.strip())

    def to_data(self) -> Any:
        """Plain data for YAML serialisation."""
        if self.is_expression:
            return self.expr
        if not self.items:
            return "true"
        return {self.op: [item.to_data() for item in self.items]}


CompiledFilter.model_rebuild()


class CompiledSort(BaseModel):
    model_config = ConfigDict(frozen=True)

    property: str
    direction: str = ""
    empty_placement: str = ""
    include_time: bool = False
    collate: bool = True
    custom_order: List[str] = Field(default_factory=list)


class CompiledGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    property: str
    direction: str = "ASC"


class CompiledView(BaseModel):
    """A view translated into the target query language."""

    model_config = ConfigDict(frozen=True)

    kind: ViewKind = "table"
    name: str = "View"
    page_limit: int = 0
    columns: List[str] = Field(default_factory=list)
    filters: Optional[CompiledFilter] = None
    sort: List[CompiledSort] = Field(default_factory=list)
    group_by: Optional[CompiledGroup] = None
    local_card_order: str = ""
