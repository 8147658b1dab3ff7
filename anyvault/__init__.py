"""
anyvault: converts a typed knowledge-base export into a note vault.

Resolves relation-typed property values into front matter and compiles saved
dataviews into query files.
"""

__version__ = "0.1.0"
__author__ = "anyvault Project"

# Import main components
from .models import CompiledView, ExportObject, LinkTarget, OptionRecord, RelationDefinition, ValueFormat
from .registry import ExportContext, PropertySettings, RelationRegistry
from .properties import PropertyPathResolver
from .values import ValueResolver
from .frontmatter import FrontmatterBuilder, render_frontmatter
from .query import QueryCompiler, compile_object_views, compile_view, render_base_file

__all__ = [
    "CompiledView",
    "ExportObject",
    "LinkTarget",
    "OptionRecord",
    "RelationDefinition",
    "ValueFormat",
    "ExportContext",
    "PropertySettings",
    "RelationRegistry",
    "PropertyPathResolver",
    "ValueResolver",
    "FrontmatterBuilder",
    "render_frontmatter",
    "QueryCompiler",
    "compile_object_views",
    "compile_view",
    "render_base_file",
]
