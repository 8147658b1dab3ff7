"""
View compilation.

Translates parsed dataview views into the target query-file representation:
a boolean filter-expression tree, sort and grouping directives and the visible
column order. Literals are rendered through the value resolver and properties
are addressed through the property path resolver, so compiled filters compare
against the same display values that appear in front matter.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..coerce import as_string
from ..errors import UnparseableValue
from ..models import (
    CompiledFilter,
    CompiledGroup,
    CompiledSort,
    CompiledView,
    ExportObject,
    FilterLeaf,
    FilterNode,
    SortTerm,
    ViewSpec,
)
from ..properties import PropertyPathResolver
from ..registry import ExportContext
from ..values import ValueResolver, display_string, parse_timestamp
from .dates import date_window
from .expressions import (
    and_filters,
    contains_all,
    contains_any,
    equals_or_contains,
    is_empty,
    literal_list,
    negate,
    render_literal,
)
from .parser import parse_dataview, parse_object_orders


PROVENANCE_KEY = "createdInContext"
TYPE_KEY = "type"
RANGE_CONDITION = "AndRange"

COMPARISON_OPERATORS = {
    "Greater": ">",
    "Less": "<",
    "GreaterOrEqual": ">=",
    "LessOrEqual": "<=",
}

DATETIME_LITERAL_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_LITERAL_FORMAT = "%Y-%m-%d"


class QueryCompiler:
    """
    Compiles views against the registries of one conversion run.

    Args:
        context: Registries and settings for the current run
        now: Evaluation time for relative date filters; defaults to the
            context clock at compile time
    """

    def __init__(self, context: ExportContext, now: Optional[datetime] = None):
        self.context = context
        self.paths = PropertyPathResolver(context.relations, context.settings)
        self.values = ValueResolver(context, self.paths)
        self._now = now

    def now(self) -> datetime:
        return self._now if self._now is not None else self.context.now()

    # Views

    def compile_object_views(self, obj: ExportObject) -> List[CompiledView]:
        """Compile every view the object's dataview blocks define."""
        compiled = []
        for dataview in obj.owned_dataviews():
            for view in parse_dataview(dataview, self.context.settings.enable_kanban):
                compiled.append(self.compile_view(view, owner=obj, dataview=dataview))
        logging.debug(f"Compiled {len(compiled)} views for {obj.id}")
        return compiled

    def compile_view(self, view: ViewSpec, owner: Optional[ExportObject] = None,
                     dataview: Optional[Dict[str, Any]] = None) -> CompiledView:
        """
        Compile one view.

        Args:
            view: The parsed view
            owner: The object holding the view; collections and typed sets
                restrict the view to their members
            dataview: The raw dataview payload, used for manual card order
        """
        sort = self.compile_sorts(view.sort_terms)
        filters = self.compile_node(view.filter_tree) if view.filter_tree is not None else None
        if owner is not None:
            filters = and_filters(filters, self.collection_filter(owner))
            filters = and_filters(filters, self.member_type_filter(owner))

        local_card_order = ""
        if dataview is not None and self.context.settings.enable_kanban:
            local_card_order = self.local_card_order(view, dataview)

        return CompiledView(
            kind=view.kind,
            name=view.name,
            page_limit=view.page_limit,
            columns=self.compile_columns(view),
            filters=filters,
            sort=sort,
            group_by=self.compile_group(view),
            local_card_order=local_card_order,
        )

    def compile_columns(self, view: ViewSpec) -> List[str]:
        columns: List[str] = []
        for column in view.columns:
            if not column.visible:
                continue
            address = self.paths.filter_address(column.property_key)
            if address and address not in columns:
                columns.append(address)
        return columns

    def compile_sorts(self, terms: List[SortTerm]) -> List[CompiledSort]:
        compiled = []
        for term in terms:
            address = self.paths.filter_address(term.property_key)
            if not address:
                continue
            custom_order = [
                display_string(self.values.resolve(term.property_key, item, link_as_reference=False))
                for item in term.custom_order
            ]
            compiled.append(CompiledSort(
                property=address,
                direction=term.direction.upper(),
                empty_placement=term.empty_placement.upper(),
                include_time=term.include_time,
                collate=term.collate,
                custom_order=custom_order,
            ))
        return compiled

    def compile_group(self, view: ViewSpec) -> Optional[CompiledGroup]:
        if not view.group_key:
            return None
        address = self.paths.filter_address(view.group_key)
        if not address:
            return None
        direction = "ASC"
        if view.sort_terms:
            first = view.sort_terms[0]
            if first.direction.strip() and self.paths.filter_address(first.property_key) == address:
                direction = first.direction.strip().upper()
        return CompiledGroup(property=address, direction=direction)

    # Filter tree

    def compile_node(self, node: FilterNode) -> Optional[CompiledFilter]:
        """
        Compile a filter node; returns None when nothing remains to filter on.
        """
        if isinstance(node, FilterLeaf):
            expr = self.compile_leaf(node)
            return CompiledFilter(expr=expr) if expr.strip() else None

        items = [item for item in (self.compile_node(child) for child in node.children) if item is not None]
        if not items:
            return None
        return CompiledFilter(op=node.operator, items=items)

    def compile_leaf(self, leaf: FilterLeaf) -> str:
        """Compile one condition to an expression string; empty means no filter."""
        address = self.paths.filter_address(leaf.property_key)
        if not address:
            return ""

        condition = leaf.condition
        value = leaf.value
        is_date = self.is_date_leaf(leaf)
        if is_date and (leaf.quick_option or not leaf.include_time):
            condition, value = self.window_condition(condition, value, leaf.quick_option)

        if condition == RANGE_CONDITION:
            start, end = value
            lower = self._comparison(address, start, ">=", True, leaf.include_time)
            upper = self._comparison(address, end, "<=", True, leaf.include_time)
            return f"({lower} && {upper})"

        operator = COMPARISON_OPERATORS.get(condition)
        if operator is not None:
            compared = value if is_date else self._resolve(leaf, value)
            return self._comparison(address, compared, operator, is_date, leaf.include_time)

        return self._membership(condition, address, self._resolve(leaf, value))

    def is_date_leaf(self, leaf: FilterLeaf) -> bool:
        relation = self.context.relations.get(leaf.property_key)
        if relation is not None and relation.is_date:
            return True
        return leaf.format == "date"

    def window_condition(self, condition: str, value: Any, quick_option: str) -> Tuple[str, Any]:
        """
        Rewrite a date condition against the quick option's window.

        Equality becomes a range over the whole window; one-sided comparisons
        keep only the bound they need.
        """
        start, end = date_window(quick_option, value, self.now())
        if condition in ("Equal", "In"):
            return RANGE_CONDITION, (start, end)
        if condition in ("Less", "GreaterOrEqual"):
            return condition, start
        if condition in ("Greater", "LessOrEqual"):
            return condition, end
        return condition, value

    def _resolve(self, leaf: FilterLeaf, value: Any) -> Any:
        return self.values.resolve(leaf.property_key, value, link_as_reference=False)

    @staticmethod
    def _comparison(address: str, value: Any, operator: str, is_date: bool, include_time: bool) -> str:
        if is_date:
            moment = value if isinstance(value, datetime) else None
            if moment is None:
                try:
                    moment = parse_timestamp(value)
                except UnparseableValue:
                    moment = None
            if moment is not None:
                fmt = DATETIME_LITERAL_FORMAT if include_time else DATE_LITERAL_FORMAT
                return f'date({address}) {operator} date("{moment.strftime(fmt)}")'
            text = as_string(value)
            if text:
                return f"date({address}) {operator} date({render_literal(text)})"
        return f"{address} {operator} {render_literal(value)}"

    @staticmethod
    def _membership(condition: str, address: str, resolved: Any) -> str:
        literals = literal_list(resolved)
        literal = render_literal(resolved)
        scalar_set = literals if literals is not None else [literal]

        if condition == "Equal":
            return contains_any(address, literals) if literals is not None else f"{address} == {literal}"
        if condition == "NotEqual":
            return negate(contains_any(address, literals)) if literals is not None else f"{address} != {literal}"
        if condition in ("Like", "NotLike"):
            if not as_string(resolved).strip():
                return ""
            expr = f"({address}.toString().contains({literal}))"
            return expr if condition == "Like" else negate(expr)
        if condition == "In":
            return contains_any(address, scalar_set)
        if condition == "NotIn":
            return negate(contains_any(address, scalar_set))
        if condition == "AllIn":
            return contains_all(address, scalar_set)
        if condition == "NotAllIn":
            return negate(contains_all(address, scalar_set))
        if condition in ("ExactIn", "NotExactIn"):
            if literals is not None:
                expr = f"({contains_all(address, literals)} && list({address}).length == {len(literals)})"
            else:
                expr = f"({address} == {literal})"
            return expr if condition == "ExactIn" else negate(expr)
        if condition == "Empty":
            return is_empty(address)
        if condition == "NotEmpty":
            return negate(is_empty(address))
        if condition == "Exists":
            return f"{address} != null"

        logging.debug(f"Unsupported filter condition {condition!r} on {address}")
        return ""

    # Scoping

    def collection_filter(self, owner: ExportObject) -> Optional[CompiledFilter]:
        """Collections only show objects that were created inside them."""
        if not owner.is_collection:
            return None
        address = self.paths.filter_address(PROVENANCE_KEY)
        if not address:
            return None
        return CompiledFilter(expr=equals_or_contains(address, render_literal(owner.id)))

    def member_type_filter(self, owner: ExportObject) -> Optional[CompiledFilter]:
        """Sets restricted to object types only show objects of those types."""
        member_types = owner.member_types
        if not member_types:
            return None
        address = self.paths.filter_address(TYPE_KEY)
        if not address:
            return None

        resolved = self.values.resolve(TYPE_KEY, member_types, is_list=True, link_as_reference=False)
        literals = literal_list(resolved)
        if not literals:
            return CompiledFilter(expr=equals_or_contains(address, render_literal(resolved)))

        scalar_parts = " || ".join(f"{address} == {literal}" for literal in literals)
        return CompiledFilter(expr=f"(({scalar_parts}) || {contains_any(address, literals)})")

    # Kanban

    def local_card_order(self, view: ViewSpec, dataview: Dict[str, Any]) -> str:
        """
        Manual card order of a grouped view as a JSON object string mapping
        group names to document paths.
        """
        if not view.id or not view.group_key:
            return ""
        groups: Dict[str, List[str]] = {}
        for group_id, object_ids in parse_object_orders(dataview).get(view.id, []):
            name = self.group_name(view.group_key, group_id)
            if not name:
                continue
            cards = []
            for object_id in object_ids:
                target = self.context.link_target(object_id)
                if target is not None and target.path:
                    cards.append(target.path)
            if cards:
                groups[name] = cards
        if not groups:
            return ""
        return json.dumps(groups, ensure_ascii=False, separators=(",", ":"))

    def group_name(self, group_key: str, group_id: str) -> str:
        resolved = self.values.resolve(group_key, group_id, link_as_reference=False)
        name = display_string(resolved).strip()
        if name:
            return name
        return (self.context.option_label(group_id) or self.context.display_name(group_id) or group_id).strip()


def compile_view(view: ViewSpec, context: ExportContext, now: Optional[datetime] = None,
                 owner: Optional[ExportObject] = None) -> CompiledView:
    """Compile a single view against the run's registries."""
    return QueryCompiler(context, now).compile_view(view, owner=owner)


def compile_object_views(obj: ExportObject, context: ExportContext,
                         now: Optional[datetime] = None) -> List[CompiledView]:
    """Compile all views owned by an object, with collection and type scoping."""
    return QueryCompiler(context, now).compile_object_views(obj)
