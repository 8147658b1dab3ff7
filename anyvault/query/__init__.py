"""Dataview parsing and compilation into query files."""

from .compiler import QueryCompiler, compile_object_views, compile_view
from .dates import date_window
from .parser import parse_dataview, parse_filter_node, parse_view
from .writer import render_base_file

__all__ = [
    "QueryCompiler",
    "compile_object_views",
    "compile_view",
    "date_window",
    "parse_dataview",
    "parse_filter_node",
    "parse_view",
    "render_base_file",
]
