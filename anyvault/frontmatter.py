"""
Front matter resolution for exported documents.

Builds the ordered key/value pairs of a document's front matter from an
object's details and renders them as YAML.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .coerce import as_string
from .models import ExportObject, RelationDefinition
from .paths import link_basename, shortest_path_target
from .properties import ExternalNameTable, PropertyPathResolver
from .registry import ExportContext
from .values import ValueResolver


OBJECT_ID_KEY = "anytype_id"
TAGS_KEY = "tags"
ICON_KEY = "icon"
BANNER_KEY = "banner"
ICON_PROPERTY_KEYS = ("iconemoji", "iconimage")

_TAG_ALLOWED = re.compile(r"[\w-]")


def sanitize_tag(raw: str) -> str:
    """
    Reduce a label to the vault's tag grammar.

    Nested tags keep their '/' separators; links are left untouched.
    """
    raw = (raw or "").strip()
    if not raw:
        return ""
    if raw.startswith("[[") and raw.endswith("]]"):
        return raw

    parts = [_sanitize_tag_part(part) for part in raw.split("/")]
    tag = "/".join(part for part in parts if part)
    if not tag:
        return ""
    if tag.replace("/", "").isdigit():
        tag = "y" + tag
    return tag


def _sanitize_tag_part(part: str) -> str:
    chars: List[str] = []
    last_hyphen = False
    for ch in part.strip():
        if _TAG_ALLOWED.match(ch):
            chars.append(ch)
            last_hyphen = ch == "-"
        elif chars and not last_hyphen:
            chars.append("-")
            last_hyphen = True
    return "".join(chars).strip("-")


def sanitize_tag_value(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_tag(value)
    if isinstance(value, list):
        tags = (sanitize_tag(item) for item in value if isinstance(item, str))
        return [tag for tag in tags if tag]
    return value


def is_icon_property(raw_key: str, relation: Optional[RelationDefinition]) -> bool:
    if raw_key.strip().lower() in ICON_PROPERTY_KEYS:
        return True
    return relation is not None and relation.key.strip().lower() in ICON_PROPERTY_KEYS


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


class FrontmatterBuilder:
    """
    Resolves an object's details into ordered front-matter pairs.

    Args:
        context: Registries and settings for the current run
    """

    def __init__(self, context: ExportContext):
        self.context = context
        self.paths = PropertyPathResolver(context.relations, context.settings)
        self.values = ValueResolver(context, self.paths)

    def build(self, obj: ExportObject, source_path: str = "") -> List[Tuple[str, Any]]:
        """
        Build the front-matter pairs for one object.

        Args:
            obj: The exported object
            source_path: Vault path of the document being written

        Returns:
            List of (name, value) pairs in output order
        """
        settings = self.context.settings
        pairs: List[Tuple[str, Any]] = []
        names = ExternalNameTable()

        if settings.include_object_id and not self.paths.is_excluded(OBJECT_ID_KEY):
            pairs.append((names.claim(OBJECT_ID_KEY, OBJECT_ID_KEY), obj.id))

        if settings.pretty_property_icon:
            icon = self.icon_value(obj, source_path)
            if icon is not None:
                pairs.append((names.claim(ICON_KEY, ICON_KEY), icon))

        keys, listed_by_type, date_by_type = self._ordered_keys(obj)
        for key in keys:
            relation = self.context.relations.get(key)
            if settings.pretty_property_icon and is_icon_property(key, relation):
                continue
            if not self.paths.should_include(key, relation, listed_by_type=key in listed_by_type):
                continue

            value = self.values.resolve(
                key,
                obj.details[key],
                source_path=source_path,
                date_hint=key in date_by_type,
            )
            name = self.paths.external_name(key, relation)
            if name == TAGS_KEY:
                value = sanitize_tag_value(value)
            if settings.exclude_empty and is_empty_value(value):
                continue
            pairs.append((names.claim(name, key), value))

        banner = self.banner_value(obj)
        if banner and BANNER_KEY not in names:
            pairs.append((names.claim(BANNER_KEY, BANNER_KEY), banner))

        logging.debug(f"Resolved {len(pairs)} front matter properties for {obj.id}")
        return pairs

    def banner_value(self, obj: ExportObject) -> str:
        """The cover image as a `[[file name]]` link, or empty when there is none."""
        cover_id = as_string(obj.details.get("coverId")).strip()
        if not cover_id:
            return ""
        path = (self.context.files.get(cover_id) or "").strip()
        if not path:
            return ""
        name = link_basename(path)
        return f"[[{name}]]" if name else ""

    def icon_value(self, obj: ExportObject, source_path: str) -> Optional[str]:
        """Icon image path (or raw file id), else the icon emoji."""
        image_id = as_string(obj.details.get("iconImage")).strip()
        if image_id:
            path = (self.context.files.get(image_id) or "").strip()
            return shortest_path_target(source_path, path) if path else image_id
        emoji = as_string(obj.details.get("iconEmoji")).strip()
        return emoji or None

    def _ordered_keys(self, obj: ExportObject):
        """Type-listed keys first, in type order, then the rest alphabetically."""
        ordered: List[str] = []
        listed_by_type = set()
        date_by_type = set()

        type_def = self.context.types.get(obj.type_id) if obj.type_id else None
        if type_def is not None:
            for ref in [*type_def.visible_refs(), *type_def.hidden]:
                key = self._detail_key_for_ref(ref, obj.details)
                if not key:
                    continue
                listed_by_type.add(key)
                relation = self.context.relations.get(ref.strip())
                if relation is not None and relation.is_date:
                    date_by_type.add(key)
                if key not in ordered:
                    ordered.append(key)

        for key in sorted(obj.details):
            if key and key not in ordered:
                ordered.append(key)
        return ordered, listed_by_type, date_by_type

    def _detail_key_for_ref(self, ref: str, details: Dict[str, Any]) -> str:
        """Map a type's relation reference (key or id) to the key used in details."""
        ref = (ref or "").strip()
        if not ref:
            return ""
        if ref in details:
            return ref
        relation = self.context.relations.get(ref)
        if relation is None:
            return ""
        for candidate in (relation.key, relation.id):
            if candidate and candidate in details:
                return candidate
        return ""


def render_frontmatter(pairs: List[Tuple[str, Any]]) -> str:
    """
    Render front-matter pairs as a fenced YAML block.

    Pairs that would land on a name already written are renamed with a
    numeric suffix rather than overwriting the earlier value.
    """
    names = ExternalNameTable()
    data: Dict[str, Any] = {}
    for key, value in pairs:
        key = (key or "").strip() or "field"
        data[names.claim(key, key)] = value
    if not data:
        return "---\n---\n\n"
    body = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{body}---\n\n"


def resolve_frontmatter(obj: ExportObject, context: ExportContext, source_path: str = "") -> str:
    """Convenience wrapper: build and render an object's front matter."""
    return render_frontmatter(FrontmatterBuilder(context).build(obj, source_path))
