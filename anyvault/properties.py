"""
Property naming and addressing.

Decides the externally visible name of a raw property key, the address used
for it inside compiled filter expressions, and whether it is exported at all.
"""

import json
import logging
import re
from typing import List, Optional

from .errors import UnaddressableProperty
from .models import RelationDefinition
from .registry import PropertySettings, RelationRegistry, normalize_property_key


IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
OPAQUE_HEX_PATTERN = re.compile(r"^[0-9a-f]{16,}$")
OPAQUE_CID_PATTERN = re.compile(r"^bafy[a-z2-7]{16,}$")

DOCUMENT_ATTRIBUTES = {
    "name": "file.name",
    "createdDate": "file.ctime",
    "addedDate": "file.ctime",
    "lastModifiedDate": "file.mtime",
    "modifiedDate": "file.mtime",
    "changedDate": "file.mtime",
}

PROPERTY_NAMESPACE = "note"


def is_opaque_key(key: str) -> bool:
    """True for generated ids: long lowercase hex or base32 CIDs."""
    return bool(OPAQUE_HEX_PATTERN.match(key) or OPAQUE_CID_PATTERN.match(key))


def property_candidates(raw_key: str, relation: Optional[RelationDefinition]) -> List[str]:
    """Names a user may have used to refer to a property in settings."""
    candidates = [raw_key] if raw_key else []
    if relation is not None:
        if relation.key and relation.key != raw_key:
            candidates.append(relation.key)
        if relation.display_name:
            candidates.append(relation.display_name)
    return candidates


def _matches(key_set, raw_key: str, relation: Optional[RelationDefinition]) -> bool:
    return any(normalize_property_key(c) in key_set for c in property_candidates(raw_key, relation))


class PropertyPathResolver:
    """
    Resolves raw property keys to external names and filter addresses.
    """

    def __init__(self, relations: RelationRegistry, settings: Optional[PropertySettings] = None):
        self.relations = relations
        self.settings = settings or PropertySettings()

    def external_name(self, raw_key: str, relation: Optional[RelationDefinition] = None) -> str:
        """
        The front-matter name of a property.

        Generated relation keys are replaced by the relation's display name;
        human-chosen keys are kept as they are.
        """
        raw_key = (raw_key or "").strip()
        if not raw_key:
            return ""
        if relation is None:
            relation = self.relations.get(raw_key)

        if self.settings.picture_to_cover and self._is_picture(raw_key, relation):
            return "cover"
        if self._is_tag(raw_key, relation):
            return "tags"
        if relation is None or not relation.display_name:
            return raw_key
        if raw_key != relation.key or is_opaque_key(raw_key):
            return relation.display_name
        return raw_key

    def filter_address(self, raw_key: str, relation: Optional[RelationDefinition] = None) -> str:
        """
        The address of a property inside a filter expression.

        Returns an empty string when no address can be formed.
        """
        try:
            return self.require_filter_address(raw_key, relation)
        except UnaddressableProperty as e:
            logging.warning(f"{e}; dropping it from the view")
            return ""

    def require_filter_address(self, raw_key: str, relation: Optional[RelationDefinition] = None) -> str:
        raw_key = (raw_key or "").strip()
        if not raw_key:
            raise UnaddressableProperty(raw_key)
        attribute = DOCUMENT_ATTRIBUTES.get(raw_key)
        if attribute:
            return attribute

        name = self.external_name(raw_key, relation)
        if not name:
            raise UnaddressableProperty(raw_key)
        if IDENTIFIER_PATTERN.match(name):
            return f"{PROPERTY_NAMESPACE}.{name}"
        return f"{PROPERTY_NAMESPACE}[{json.dumps(name, ensure_ascii=False)}]"

    def should_include(self, raw_key: str, relation: Optional[RelationDefinition] = None,
                       listed_by_type: bool = False) -> bool:
        """Whether a property belongs in a document's front matter."""
        settings = self.settings
        if relation is None:
            relation = self.relations.get(raw_key)

        if _matches(settings.force_include, raw_key, relation):
            return True
        if _matches(settings.exclude, raw_key, relation):
            return False
        if raw_key in settings.hidden_keys:
            return False
        if relation is not None and relation.key in settings.hidden_keys:
            return False
        if not settings.include_dynamic:
            if raw_key in settings.dynamic_keys:
                return False
            if relation is not None and relation.key in settings.dynamic_keys:
                return False
        if not settings.include_archived and not listed_by_type and self._is_unnamed(raw_key, relation):
            return False
        return True

    def is_excluded(self, raw_key: str, relation: Optional[RelationDefinition] = None) -> bool:
        """True when the user excluded the property by key or name."""
        if relation is None:
            relation = self.relations.get(raw_key)
        return _matches(self.settings.exclude, raw_key, relation)

    def links_as_note(self, raw_key: str, relation: Optional[RelationDefinition] = None) -> bool:
        if relation is None:
            relation = self.relations.get(raw_key)
        return _matches(self.settings.link_as_note, raw_key, relation)

    @staticmethod
    def _is_unnamed(raw_key: str, relation: Optional[RelationDefinition]) -> bool:
        if relation is not None:
            return not relation.display_name.strip()
        return is_opaque_key(raw_key)

    @staticmethod
    def _is_tag(raw_key: str, relation: Optional[RelationDefinition]) -> bool:
        if normalize_property_key(raw_key) == "tag":
            return True
        if relation is None:
            return False
        return "tag" in (normalize_property_key(relation.key), normalize_property_key(relation.display_name))

    @staticmethod
    def _is_picture(raw_key: str, relation: Optional[RelationDefinition]) -> bool:
        if normalize_property_key(raw_key) == "picture":
            return True
        return relation is not None and normalize_property_key(relation.key) == "picture"


class ExternalNameTable:
    """
    Tracks the names already emitted for one document.

    A name that was already taken falls back to the property's raw key, and
    then to the raw key with a numeric suffix, so a colliding property is
    always renamed rather than dropped.
    """

    def __init__(self, reserved: Optional[List[str]] = None):
        self._used = set(reserved or [])

    def claim(self, name: str, raw_key: str) -> str:
        if name in self._used:
            fallback = raw_key or name
            suffix = 2
            candidate = fallback
            while candidate in self._used:
                candidate = f"{fallback}_{suffix}"
                suffix += 1
            logging.debug(f"Property name {name!r} already used; writing {candidate!r} instead")
            name = candidate
        self._used.add(name)
        return name

    def __contains__(self, name: object) -> bool:
        return name in self._used
