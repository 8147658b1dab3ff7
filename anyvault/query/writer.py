"""Serialises compiled views into the target query-file (base) format."""

from typing import Any, Dict, List

import yaml

from ..models import CompiledView


def view_to_data(view: CompiledView) -> Dict[str, Any]:
    """Plain data for one compiled view, in the order the format expects."""
    data: Dict[str, Any] = {"type": view.kind, "name": view.name}
    if view.page_limit > 0:
        data["limit"] = view.page_limit
    if view.group_by is not None:
        data["groupBy"] = {
            "property": view.group_by.property,
            "direction": view.group_by.direction,
        }
    if view.filters is not None:
        data["filters"] = view.filters.to_data()
    order = list(view.columns) or _sort_order(view)
    if order:
        data["order"] = order
    if view.sort:
        sorts = []
        for sort in view.sort:
            entry: Dict[str, Any] = {"property": sort.property, "direction": sort.direction}
            if sort.custom_order:
                entry["customOrder"] = list(sort.custom_order)
            sorts.append(entry)
        data["sort"] = sorts
    if view.local_card_order.strip():
        data["localCardOrder"] = view.local_card_order
    return data


def _sort_order(view: CompiledView) -> List[str]:
    """Sorted properties, used as the column order when no column is visible."""
    order: List[str] = []
    for sort in view.sort:
        if sort.property and sort.property not in order:
            order.append(sort.property)
    return order


def render_base_file(views: List[CompiledView]) -> str:
    """
    Render compiled views as base-file YAML.

    Returns an empty string when there is nothing to write.
    """
    if not views:
        return ""
    payload = {"views": [view_to_data(view) for view in views]}
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True, default_flow_style=False, width=4096)
