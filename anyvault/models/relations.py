"""
Relation and object models for anyvault.

This module defines the typed records the exporter hands to the core: relation
definitions, relation options, link targets, types and exported objects.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..paths import relative_path_target


QUERY_FILE_DIR = "bases/"
QUERY_FILE_SUFFIX = ".base"
COLLECTION_LAYOUT = 14


class ValueFormat(str, Enum):
    """The value-format tag carried by a relation definition."""

    PLAIN_TEXT = "PlainText"
    NUMBER = "Number"
    DATE = "Date"
    STATUS = "Status"
    TAG = "Tag"
    OBJECT_REF = "ObjectRef"
    FILE = "File"
    OTHER = "Other"

    @classmethod
    def from_code(cls, code: Any) -> "ValueFormat":
        """Map the source's numeric relation format to a ValueFormat."""
        if isinstance(code, ValueFormat):
            return code
        try:
            number = int(code)
        except (TypeError, ValueError):
            return cls.OTHER
        return _FORMAT_CODES.get(number, cls.OTHER)


_FORMAT_CODES = {
    0: ValueFormat.PLAIN_TEXT,
    1: ValueFormat.PLAIN_TEXT,
    2: ValueFormat.NUMBER,
    3: ValueFormat.TAG,
    4: ValueFormat.DATE,
    5: ValueFormat.FILE,
    11: ValueFormat.STATUS,
    100: ValueFormat.OBJECT_REF,
}


class RelationDefinition(BaseModel):
    """
    A typed property definition.

    A definition is registered under both its opaque `key` and its `id`, so
    either form resolves to the same record.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default="",
        description="The relation object's identifier"
    )

    key: str = Field(
        default="",
        description="The canonical relation key used in object details"
    )

    display_name: str = Field(
        default="",
        description="Human readable relation name"
    )

    value_format: ValueFormat = Field(
        default=ValueFormat.OTHER,
        description="How values of this relation are interpreted"
    )

    max_count: int = Field(
        default=0,
        description="Maximum number of values; 0 means unbounded"
    )

    @property
    def is_date(self) -> bool:
        return self.value_format == ValueFormat.DATE


class OptionRecord(BaseModel):
    """One allowed value of a Status or Tag relation."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""


class LinkTarget(BaseModel):
    """
    The vault path of the document (or query file) that represents an entity.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(
        ...,
        description="Vault-relative path of the target file"
    )

    is_query_file: bool = Field(
        default=False,
        description="True when the target is a query file rather than a document"
    )

    @classmethod
    def from_path(cls, path: str) -> "LinkTarget":
        path = path.strip().replace("\\", "/")
        is_query = path.startswith(QUERY_FILE_DIR) or path.endswith(QUERY_FILE_SUFFIX)
        return cls(path=path, is_query_file=is_query)

    def wiki_target(self, source_path: str = "") -> str:
        """Path to use inside a link written from `source_path`."""
        if self.is_query_file:
            return self.path
        return relative_path_target(source_path, self.path)

    def reference(self, source_path: str = "") -> str:
        return f"[[{self.wiki_target(source_path)}]]"

    def embed(self, source_path: str = "") -> str:
        return f"![[{self.wiki_target(source_path)}]]"


class TypeDefinition(BaseModel):
    """An object type and the relations it surfaces, in display order."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    featured: List[str] = Field(default_factory=list)
    recommended: List[str] = Field(default_factory=list)
    hidden: List[str] = Field(default_factory=list)

    def visible_refs(self) -> List[str]:
        return [*self.featured, *self.recommended]


class ExportObject(BaseModel):
    """
    A single exported record: its details map and any dataview blocks it owns.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        description="Object identifier"
    )

    name: str = Field(
        default="",
        description="Object display name"
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw property values keyed by relation key or id"
    )

    dataviews: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Raw dataview block payloads, as decoded from JSON"
    )

    @property
    def type_id(self) -> str:
        value = self.details.get("type")
        if isinstance(value, list):
            value = value[0] if value else ""
        return value if isinstance(value, str) else ""

    @property
    def is_collection(self) -> bool:
        if any(dataview.get("isCollection") is True for dataview in self.dataviews):
            return True
        layout = self.details.get("layout")
        return isinstance(layout, (int, float)) and int(layout) == COLLECTION_LAYOUT

    @property
    def member_types(self) -> List[str]:
        value = self.details.get("setOf")
        if isinstance(value, str):
            return [value] if value else []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str) and item]
        return []

    def owned_dataviews(self) -> List[Dict[str, Any]]:
        """Dataview payloads that query on behalf of this object."""
        owned = []
        for dataview in self.dataviews:
            target = dataview.get("targetObjectId", dataview.get("TargetObjectId", ""))
            target = target.strip() if isinstance(target, str) else ""
            if target and target != self.id:
                continue
            owned.append(dataview)
        return owned
