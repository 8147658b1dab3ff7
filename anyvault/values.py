"""
Relation-typed value resolution.

Turns a raw property value into its display form (link, label, date string or
file path) according to the relation's value format. Resolution never fails:
anything that cannot be resolved stays visible as its raw literal.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from .coerce import as_string, as_string_list, is_list_value
from .errors import UnparseableValue, UnresolvedReference
from .models import ValueFormat
from .paths import relative_path_target
from .properties import PropertyPathResolver
from .registry import ExportContext


MILLISECONDS_THRESHOLD = 1_000_000_000_000
DATE_FORMAT = "%Y-%m-%d"
INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")


def _epoch_seconds(number: int) -> int:
    if abs(number) > MILLISECONDS_THRESHOLD:
        # Truncate toward zero, like the source's integer division.
        return -(-number // 1000) if number < 0 else number // 1000
    return number


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an epoch (seconds or milliseconds), RFC 3339 or YYYY-MM-DD value.

    Returns an aware UTC datetime.

    Raises:
        UnparseableValue: If the value is not a recognisable timestamp
    """
    if isinstance(value, bool):
        raise UnparseableValue(value, "timestamp")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(_epoch_seconds(int(value)), tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise UnparseableValue(value, "timestamp") from e
    if not isinstance(value, str) or not value.strip():
        raise UnparseableValue(value, "timestamp")

    text = value.strip()
    if INTEGER_PATTERN.match(text):
        return parse_timestamp(int(text))

    try:
        return datetime.strptime(text, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        pass

    if "T" in text or "t" in text:
        iso_text = text[:-1] + "+00:00" if text[-1] in "Zz" else text
        try:
            parsed = datetime.fromisoformat(iso_text)
        except ValueError as e:
            raise UnparseableValue(value, "timestamp") from e
        if parsed.tzinfo is not None:
            return parsed.astimezone(timezone.utc)

    raise UnparseableValue(value, "timestamp")


def format_date_value(value: Any) -> Any:
    """Render a timestamp as YYYY-MM-DD (UTC); unparseable input is returned as is."""
    if isinstance(value, str) and not value.strip():
        return value
    try:
        return parse_timestamp(value).strftime(DATE_FORMAT)
    except UnparseableValue as e:
        logging.debug(f"{e}; keeping raw value")
        return value


def collapse(values: List[str], is_list: bool) -> Any:
    """A single resolved item stored as a scalar stays a scalar."""
    if not is_list and len(values) == 1:
        return values[0]
    return values


def display_string(value: Any) -> str:
    """A resolved value as one string, e.g. for sort orders and group names."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        if len(value) == 1:
            return as_string(value[0])
        return json.dumps(list(value), ensure_ascii=False, separators=(",", ":"))
    text = as_string(value)
    if text:
        return text
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


class ValueResolver:
    """
    Resolves raw property values against the run's registries.

    Args:
        context: Registries and settings for the current run
    """

    def __init__(self, context: ExportContext, paths: Optional[PropertyPathResolver] = None):
        self.context = context
        self.paths = paths or PropertyPathResolver(context.relations, context.settings)

    def resolve(self, raw_key: str, raw_value: Any, is_list: Optional[bool] = None,
                source_path: str = "", date_hint: bool = False,
                link_as_reference: Optional[bool] = None) -> Any:
        """
        Convert a raw value into its display form.

        Args:
            raw_key: Property key or relation id the value is stored under
            raw_value: The value as decoded from the source record
            is_list: Whether the source stored a sequence; inferred when omitted
            source_path: Vault path of the document the value is written into
            date_hint: Treat the value as a date even if the relation is not one
            link_as_reference: Prefer document links over option labels for
                Status/Tag values; defaults to the run's link-as-note settings

        Returns:
            A scalar or a list of display strings, or the raw value unchanged
        """
        relation = self.context.relations.get(raw_key)
        if is_list is None:
            is_list = is_list_value(raw_value)
        value_format = relation.value_format if relation is not None else ValueFormat.OTHER

        if value_format == ValueFormat.OBJECT_REF:
            return self._resolve_object_refs(raw_value, is_list, source_path)
        if value_format in (ValueFormat.STATUS, ValueFormat.TAG):
            if link_as_reference is None:
                link_as_reference = self.paths.links_as_note(raw_key, relation)
            return self._resolve_options(raw_value, is_list, source_path, link_as_reference)
        if value_format == ValueFormat.FILE:
            return self._resolve_files(raw_value, is_list, source_path)
        if value_format == ValueFormat.DATE or date_hint:
            return format_date_value(raw_value)
        return raw_value

    @staticmethod
    def _ids(raw_value: Any) -> List[str]:
        ids = as_string_list(raw_value)
        if not ids and not is_list_value(raw_value):
            text = as_string(raw_value)
            if text:
                ids = [text]
        return ids

    def _resolve_object_refs(self, raw_value: Any, is_list: bool, source_path: str) -> Any:
        ids = self._ids(raw_value)
        if not ids:
            return raw_value
        out = []
        for object_id in ids:
            target = self.context.link_target(object_id)
            if target is not None:
                out.append(target.reference(source_path))
                continue
            name = self.context.display_name(object_id)
            if name:
                out.append(name)
                continue
            logging.debug(f"{UnresolvedReference(object_id, 'links')}; keeping raw id")
            out.append(object_id)
        return collapse(out, is_list)

    def _resolve_options(self, raw_value: Any, is_list: bool, source_path: str,
                         link_as_reference: bool) -> Any:
        ids = self._ids(raw_value)
        if not ids:
            return raw_value
        out = []
        for option_id in ids:
            if link_as_reference:
                target = self.context.link_target(option_id)
                if target is not None:
                    out.append(target.reference(source_path))
                    continue
            label = self.context.option_label(option_id) or self.context.display_name(option_id)
            if label:
                out.append(label)
                continue
            logging.debug(f"{UnresolvedReference(option_id, 'options')}; keeping raw id")
            out.append(option_id)
        return collapse(out, is_list)

    def _resolve_files(self, raw_value: Any, is_list: bool, source_path: str) -> Any:
        out = []
        for file_id in as_string_list(raw_value):
            path = self.context.files.get(file_id)
            if path:
                out.append(relative_path_target(source_path, path))
            else:
                logging.debug(f"{UnresolvedReference(file_id, 'files')}; keeping raw id")
                out.append(file_id)
        if not out:
            return raw_value
        return collapse(out, is_list)
