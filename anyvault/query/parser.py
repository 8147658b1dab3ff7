"""
Dataview parsing.

Converts the raw dataview payloads found in exported objects into ViewSpec
models. Source NOT branches are normalised here: the source already pushes
negation down to its leaves, so a NOT over one child is that child and a NOT
over several children is their conjunction.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..coerce import as_bool, as_int, as_list, as_string, as_string_list, map_get
from ..errors import MalformedViewSpec
from ..models import FilterBranch, FilterLeaf, FilterNode, SortTerm, ViewColumn, ViewSpec


KIND_ALIASES = {
    "gallery": "cards",
    "list": "list",
    "table": "table",
    "grid": "table",
}

KANBAN_KINDS = ("kanban", "board")

ObjectOrder = Tuple[str, List[str]]


def normalize_kind(raw_kind: str, enable_kanban: bool = True) -> str:
    """Map a source view type onto a target view kind."""
    kind = (raw_kind or "").strip().lower()
    if not kind:
        return "table"
    if kind in KANBAN_KINDS:
        return "kanban" if enable_kanban else "table"
    return KIND_ALIASES.get(kind, "table")


def _text(raw: Dict[str, Any], *keys: str) -> str:
    return as_string(map_get(raw, *keys)).strip()


def parse_filter_leaf(raw: Dict[str, Any]) -> FilterLeaf:
    """
    Parse a single filter condition.

    Raises:
        MalformedViewSpec: If the relation key or condition is missing
    """
    key = _text(raw, "RelationKey", "relationKey")
    condition = _text(raw, "condition", "Condition")
    if not key or not condition:
        raise MalformedViewSpec(f"Filter without relation key or condition: {raw!r}")
    return FilterLeaf(
        property_key=key,
        condition=condition,
        value=map_get(raw, "value", "Value"),
        format=_text(raw, "format", "Format").lower(),
        include_time=as_bool(map_get(raw, "includeTime", "IncludeTime")),
        quick_option=_text(raw, "quickOption", "QuickOption"),
    )


def _parse_children(nested: List[Any]) -> List[FilterNode]:
    children = []
    for item in nested:
        if not isinstance(item, dict):
            continue
        node = parse_filter_node(item)
        if node is not None:
            children.append(node)
    return children


def parse_filter_node(raw: Dict[str, Any]) -> Optional[FilterNode]:
    """
    Parse a filter node; malformed nodes are logged and skipped.

    Returns:
        A FilterLeaf or FilterBranch, or None when nothing usable remains
    """
    operator = _text(raw, "operator", "Operator").lower()
    nested = as_list(map_get(raw, "nestedFilters", "NestedFilters"))

    if operator in ("and", "or"):
        children = _parse_children(nested)
        if not children:
            return None
        return FilterBranch(operator=operator, children=children)

    if operator == "no" and nested:
        children = _parse_children(nested)
        if len(children) == 1:
            return children[0]
        if len(children) > 1:
            return FilterBranch(operator="and", children=children)

    try:
        return parse_filter_leaf(raw)
    except MalformedViewSpec as e:
        logging.warning(f"Skipping filter node: {e}")
        return None


def parse_sort_term(raw: Dict[str, Any]) -> SortTerm:
    key = _text(raw, "RelationKey", "relationKey")
    if not key:
        raise MalformedViewSpec(f"Sort without relation key: {raw!r}")
    return SortTerm(
        property_key=key,
        direction=_text(raw, "type", "Type"),
        empty_placement=_text(raw, "emptyPlacement", "EmptyPlacement"),
        include_time=as_bool(map_get(raw, "includeTime", "IncludeTime")),
        collate=not as_bool(map_get(raw, "noCollate", "NoCollate")),
        custom_order=as_list(map_get(raw, "customOrder", "CustomOrder")),
    )


def parse_columns(raw_relations: List[Any]) -> List[ViewColumn]:
    columns = []
    for item in raw_relations:
        if not isinstance(item, dict):
            continue
        key = _text(item, "key", "Key")
        if not key:
            continue
        visible = True
        for flag in ("isVisible", "IsVisible"):
            if flag in item:
                visible = as_bool(item[flag])
                break
        columns.append(ViewColumn(property_key=key, visible=visible))
    return columns


def parse_view(raw: Any, enable_kanban: bool = True) -> ViewSpec:
    """
    Parse one view of a dataview.

    Raises:
        MalformedViewSpec: If the view is not a mapping
    """
    if not isinstance(raw, dict):
        raise MalformedViewSpec(f"View is not a mapping: {raw!r}")

    view_id = _text(raw, "id", "Id")
    name = _text(raw, "name", "Name") or view_id or "View"

    sort_terms = []
    for item in as_list(map_get(raw, "sorts", "Sorts")):
        if not isinstance(item, dict):
            continue
        try:
            sort_terms.append(parse_sort_term(item))
        except MalformedViewSpec as e:
            logging.warning(f"Skipping sort in view {name!r}: {e}")

    filters = _parse_children(as_list(map_get(raw, "filters", "Filters")))
    filter_tree: Optional[FilterNode] = None
    if len(filters) == 1:
        filter_tree = filters[0]
    elif filters:
        filter_tree = FilterBranch(operator="and", children=filters)

    return ViewSpec(
        id=view_id,
        kind=normalize_kind(_text(raw, "type", "Type"), enable_kanban),
        name=name,
        page_limit=max(as_int(map_get(raw, "pageLimit", "PageLimit")), 0),
        columns=parse_columns(as_list(map_get(raw, "relations", "Relations"))),
        sort_terms=sort_terms,
        filter_tree=filter_tree,
        group_key=_text(raw, "groupRelationKey", "GroupRelationKey"),
    )


def parse_dataview(dataview: Dict[str, Any], enable_kanban: bool = True) -> List[ViewSpec]:
    """Parse every view of a dataview payload, skipping malformed ones."""
    views = []
    for raw_view in as_list(map_get(dataview, "views", "Views")):
        try:
            views.append(parse_view(raw_view, enable_kanban))
        except MalformedViewSpec as e:
            logging.warning(f"Skipping view: {e}")
    return views


def parse_object_orders(dataview: Dict[str, Any]) -> Dict[str, List[ObjectOrder]]:
    """
    Manual card order per view: view id -> [(group id, object ids)].

    The empty group and entries without a view or group id are skipped.
    """
    orders: Dict[str, List[ObjectOrder]] = {}
    for item in as_list(map_get(dataview, "objectOrders", "ObjectOrders")):
        if not isinstance(item, dict):
            continue
        view_id = _text(item, "viewId", "ViewId")
        group_id = _text(item, "groupId", "GroupId")
        if not view_id or not group_id or group_id == "empty":
            continue
        object_ids = as_string_list(map_get(item, "objectIds", "ObjectIds"))
        orders.setdefault(view_id, []).append((group_id, object_ids))
    return orders
