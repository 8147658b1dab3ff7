"""Shared registries for the anyvault test suite."""

from datetime import datetime, timezone

from anyvault.models import OptionRecord, RelationDefinition, TypeDefinition, ValueFormat
from anyvault.registry import ExportContext, PropertySettings


FIXED_NOW = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)

TASK_TYPE_KEY = "65edf2aa8efc1e005b0cb9d2"


def sample_relations():
    return [
        RelationDefinition(id="rel-status", key="status", display_name="Status", value_format=ValueFormat.STATUS),
        RelationDefinition(id="rel-task-type", key=TASK_TYPE_KEY, display_name="Task Type", value_format=ValueFormat.TAG),
        RelationDefinition(id="rel-due", key="dueDate", display_name="Due Date", value_format=ValueFormat.DATE),
        RelationDefinition(id="rel-assignee", key="assignee", display_name="Assignee", value_format=ValueFormat.OBJECT_REF),
        RelationDefinition(id="rel-files", key="attachments", display_name="Attachments", value_format=ValueFormat.FILE),
        RelationDefinition(id="rel-tag", key="tag", display_name="Tag", value_format=ValueFormat.TAG),
        RelationDefinition(id="rel-tags", key="tags", display_name="Tags", value_format=ValueFormat.TAG),
        RelationDefinition(id="rel-estimate", key="estimate", display_name="Estimate", value_format=ValueFormat.NUMBER),
        RelationDefinition(id="rel-type", key="type", display_name="Object type", value_format=ValueFormat.OBJECT_REF),
    ]


def sample_options():
    return [
        OptionRecord(id="opt-a", display_name="A"),
        OptionRecord(id="opt-status-doing", display_name="Doing"),
        OptionRecord(id="opt-focus", display_name="Focus"),
        OptionRecord(id="opt-t1", display_name="Deep Work!"),
    ]


def make_context(names=None, links=None, files=None, types=(), settings=None, clock=None):
    return ExportContext.from_records(
        relations=sample_relations(),
        options=sample_options(),
        names=names or {},
        links=links or {},
        files=files or {},
        types=types,
        settings=settings or PropertySettings(),
        clock=clock or (lambda: FIXED_NOW),
    )


def task_type():
    return TypeDefinition(id="type-task", name="Task", featured=["rel-status"], recommended=["dueDate"])
