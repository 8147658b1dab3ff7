"""
Lookup registries shared by the value resolver and the query compiler.

All registries are built once per conversion run from the full object set and
are only read afterwards.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import LinkTarget, OptionRecord, RelationDefinition, TypeDefinition


DYNAMIC_PROPERTY_KEYS: FrozenSet[str] = frozenset({
    "addedDate",
    "backlinks",
    "fileBackupStatus",
    "fileIndexingStatus",
    "fileSyncStatus",
    "lastMessageDate",
    "lastModifiedBy",
    "lastModifiedDate",
    "lastOpenedBy",
    "lastOpenedDate",
    "lastUsedDate",
    "links",
    "mentions",
    "revision",
    "syncDate",
    "syncError",
    "syncStatus",
})

HIDDEN_PROPERTY_KEYS: FrozenSet[str] = frozenset({
    "creator",
    "coverX",
    "coverY",
    "coverType",
    "coverScale",
    "coverId",
    "oldAnytypeID",
    "origin",
    "createdDate",
    "featuredRelations",
    "id",
    "importType",
    "internalFlags",
    "layout",
    "layoutAlign",
    "resolvedLayout",
    "snippet",
    "name",
    "restrictions",
    "sourceObject",
    "spaceId",
    "anytype_id",
    "anytype_template_id",
    "anytype_target_type_id",
    "anytype_target_type",
    "sourceFilePath",
})


def normalize_property_key(key: str) -> str:
    return (key or "").strip().lower()


def _key_set(keys: Iterable[str]) -> FrozenSet[str]:
    return frozenset(k for k in (normalize_property_key(key) for key in keys) if k)


class RelationRegistry:
    """
    Relation definitions addressable by either their key or their id.

    Both forms are backed by one map, populated under each form when a
    definition is registered.
    """

    def __init__(self, definitions: Iterable[RelationDefinition] = ()):
        self._by_ref: Dict[str, RelationDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: RelationDefinition) -> None:
        if not definition.key and not definition.id:
            logging.debug("Skipping relation definition without key or id")
            return
        if definition.key:
            self._by_ref[definition.key] = definition
        if definition.id:
            self._by_ref[definition.id] = definition

    def get(self, ref: str) -> Optional[RelationDefinition]:
        if not ref:
            return None
        return self._by_ref.get(ref)

    def __contains__(self, ref: object) -> bool:
        return isinstance(ref, str) and ref in self._by_ref

    def __len__(self) -> int:
        return len(self._by_ref)

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_ref)


class PropertySettings(BaseModel):
    """Per-run property policy. Key sets are matched case-insensitively."""

    model_config = ConfigDict(frozen=True)

    exclude: FrozenSet[str] = Field(default_factory=frozenset)
    force_include: FrozenSet[str] = Field(default_factory=frozenset)
    link_as_note: FrozenSet[str] = Field(default_factory=frozenset)
    exclude_empty: bool = False
    include_dynamic: bool = False
    include_archived: bool = False
    include_object_id: bool = True
    picture_to_cover: bool = True
    enable_kanban: bool = True
    pretty_property_icon: bool = False
    hidden_keys: FrozenSet[str] = HIDDEN_PROPERTY_KEYS
    dynamic_keys: FrozenSet[str] = DYNAMIC_PROPERTY_KEYS

    @classmethod
    def build(cls, exclude: Iterable[str] = (), force_include: Iterable[str] = (),
              link_as_note: Iterable[str] = (), **kwargs) -> "PropertySettings":
        return cls(
            exclude=_key_set(exclude),
            force_include=_key_set(force_include),
            link_as_note=_key_set(link_as_note),
            **kwargs,
        )

    @classmethod
    def from_config(cls, manager) -> "PropertySettings":
        """Build settings from a ConfigManager's `export` section."""
        return cls.build(
            exclude=manager.get_list("export.exclude_properties"),
            force_include=manager.get_list("export.force_include_properties"),
            link_as_note=manager.get_list("export.link_as_note_properties"),
            exclude_empty=bool(manager.get("export.exclude_empty_properties", False)),
            include_dynamic=bool(manager.get("export.include_dynamic_properties", False)),
            include_archived=bool(manager.get("export.include_archived_properties", False)),
            include_object_id=bool(manager.get("export.include_object_id", True)),
            picture_to_cover=bool(manager.get("export.picture_to_cover", True)),
            enable_kanban=bool(manager.get("export.enable_bases_kanban", True)),
            pretty_property_icon=bool(manager.get("export.pretty_property_icon", False)),
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExportContext:
    """
    Everything the core reads during one conversion run.

    Args:
        relations: Relation definitions, keyed by key and id
        options: Option id -> option record
        names: Any entity id -> display name
        links: Entity id -> vault path of its document or query file
        files: File object id -> vault path of the copied file
        types: Type id -> type definition
        settings: Property policy for the run
        clock: Returns the evaluation time for relative date filters
    """

    def __init__(self,
                 relations: Optional[RelationRegistry] = None,
                 options: Optional[Mapping[str, OptionRecord]] = None,
                 names: Optional[Mapping[str, str]] = None,
                 links: Optional[Mapping[str, LinkTarget]] = None,
                 files: Optional[Mapping[str, str]] = None,
                 types: Optional[Mapping[str, TypeDefinition]] = None,
                 settings: Optional[PropertySettings] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.relations = relations if relations is not None else RelationRegistry()
        self.options: Mapping[str, OptionRecord] = dict(options or {})
        self.names: Mapping[str, str] = dict(names or {})
        self.links: Mapping[str, LinkTarget] = dict(links or {})
        self.files: Mapping[str, str] = dict(files or {})
        self.types: Mapping[str, TypeDefinition] = dict(types or {})
        self.settings = settings or PropertySettings()
        self.clock = clock or _utc_now

    @classmethod
    def from_records(cls,
                     relations: Iterable[RelationDefinition] = (),
                     options: Iterable[OptionRecord] = (),
                     names: Optional[Mapping[str, str]] = None,
                     links: Optional[Mapping[str, str]] = None,
                     files: Optional[Mapping[str, str]] = None,
                     types: Iterable[TypeDefinition] = (),
                     settings: Optional[PropertySettings] = None,
                     clock: Optional[Callable[[], datetime]] = None) -> "ExportContext":
        """Build a context from plain record lists and path maps."""
        context = cls(
            relations=RelationRegistry(relations),
            options={option.id: option for option in options if option.id},
            names=names,
            links={
                entity_id: LinkTarget.from_path(path)
                for entity_id, path in (links or {}).items()
                if path and path.strip()
            },
            files=files,
            types={type_def.id: type_def for type_def in types if type_def.id},
            settings=settings,
            clock=clock,
        )
        logging.info(
            f"Built export context: {len(context.relations)} relation refs, "
            f"{len(context.options)} options, {len(context.links)} link targets"
        )
        return context

    def option_label(self, option_id: str) -> str:
        option = self.options.get(option_id)
        return option.display_name if option else ""

    def display_name(self, entity_id: str) -> str:
        return (self.names.get(entity_id) or "").strip()

    def link_target(self, entity_id: str) -> Optional[LinkTarget]:
        return self.links.get(entity_id)

    def now(self) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)
