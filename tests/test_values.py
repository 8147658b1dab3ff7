"""
Unit tests for relation-typed value resolution.
"""

import unittest
from datetime import datetime, timezone

from anyvault.errors import UnparseableValue
from anyvault.registry import PropertySettings
from anyvault.values import ValueResolver, display_string, format_date_value, parse_timestamp

from tests.helpers import make_context


SOURCE = "notes/Task.md"


class TestParseTimestamp(unittest.TestCase):
    """Test the accepted timestamp forms."""

    def test_epoch_seconds_and_milliseconds(self):
        expected = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)
        self.assertEqual(parse_timestamp(1710496800), expected)
        self.assertEqual(parse_timestamp(1710496800000), expected)
        self.assertEqual(parse_timestamp(1710496800.0), expected)
        self.assertEqual(parse_timestamp("1710496800"), expected)

    def test_calendar_date_and_rfc3339(self):
        self.assertEqual(parse_timestamp("2024-03-15"), datetime(2024, 3, 15, tzinfo=timezone.utc))
        self.assertEqual(
            parse_timestamp("2024-03-15T23:30:00-02:00"),
            datetime(2024, 3, 16, 1, 30, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_timestamp("2024-03-15T08:00:00Z"),
            datetime(2024, 3, 15, 8, 0, tzinfo=timezone.utc),
        )

    def test_rejects_garbage(self):
        for value in ("next tuesday", "", None, True, {"a": 1}):
            with self.assertRaises(UnparseableValue):
                parse_timestamp(value)

    def test_format_date_value_keeps_unparseable_input(self):
        self.assertEqual(format_date_value(1710496800), "2024-03-15")
        self.assertEqual(format_date_value("soon"), "soon")
        self.assertEqual(format_date_value(""), "")


class TestValueResolver(unittest.TestCase):
    """Test value resolution per relation format."""

    def setUp(self):
        self.context = make_context(
            names={"opt-x": "Done", "person-2": "Bob"},
            links={"person-1": "notes/People/Alice.md"},
            files={"file-1": "files/report.pdf"},
        )
        self.resolver = ValueResolver(self.context)

    def test_status_option_label(self):
        self.assertEqual(self.resolver.resolve("status", "opt-status-doing"), "Doing")
        self.assertEqual(self.resolver.resolve("rel-status", ["opt-status-doing"]), ["Doing"])

    def test_status_falls_back_to_object_name(self):
        """Test an id missing from the option table resolves through names."""
        self.assertEqual(self.resolver.resolve("status", ["opt-x"], True), ["Done"])

    def test_unresolved_ids_stay_visible(self):
        self.assertEqual(self.resolver.resolve("status", "opt-missing"), "opt-missing")
        self.assertEqual(self.resolver.resolve("tag", ["opt-a", "opt-nope"]), ["A", "opt-nope"])

    def test_object_refs(self):
        """Test links, then names, then raw ids."""
        resolved = self.resolver.resolve("assignee", ["person-1", "person-2", "obj-3"], source_path=SOURCE)
        self.assertEqual(resolved, ["[[People/Alice.md]]", "Bob", "obj-3"])

    def test_single_object_ref_stays_scalar(self):
        resolved = self.resolver.resolve("assignee", "person-1", source_path=SOURCE)
        self.assertEqual(resolved, "[[People/Alice.md]]")

    def test_list_shape_is_preserved(self):
        resolved = self.resolver.resolve("assignee", ["person-2"])
        self.assertEqual(resolved, ["Bob"])

    def test_files_are_relative_to_document(self):
        self.assertEqual(
            self.resolver.resolve("attachments", ["file-1"], source_path=SOURCE),
            ["../files/report.pdf"],
        )
        self.assertEqual(self.resolver.resolve("attachments", "file-1"), "files/report.pdf")
        self.assertEqual(self.resolver.resolve("attachments", "file-9"), "file-9")

    def test_dates(self):
        self.assertEqual(self.resolver.resolve("dueDate", 1710496800), "2024-03-15")
        self.assertEqual(self.resolver.resolve("dueDate", 1710496800000), "2024-03-15")
        self.assertEqual(self.resolver.resolve("dueDate", "2024-03-15T23:30:00-02:00"), "2024-03-16")
        self.assertEqual(self.resolver.resolve("dueDate", "whenever"), "whenever")

    def test_date_hint_for_untyped_property(self):
        self.assertEqual(self.resolver.resolve("reviewed", 1710496800, date_hint=True), "2024-03-15")
        self.assertEqual(self.resolver.resolve("reviewed", 1710496800), 1710496800)

    def test_other_formats_pass_through(self):
        self.assertEqual(self.resolver.resolve("estimate", 3), 3)
        self.assertEqual(self.resolver.resolve("mood", "happy"), "happy")
        self.assertEqual(self.resolver.resolve("tag", []), [])

    def test_link_as_note_prefers_documents(self):
        context = make_context(
            links={"opt-status-doing": "notes/Doing.md"},
            settings=PropertySettings.build(link_as_note=["Status"]),
        )
        resolver = ValueResolver(context)

        self.assertEqual(resolver.resolve("status", "opt-status-doing", source_path=SOURCE), "[[Doing.md]]")
        self.assertEqual(
            resolver.resolve("status", "opt-status-doing", link_as_reference=False),
            "Doing",
        )


class TestDisplayString(unittest.TestCase):

    def test_display_string(self):
        self.assertEqual(display_string("Doing"), "Doing")
        self.assertEqual(display_string(["Doing"]), "Doing")
        self.assertEqual(display_string(["A", "B"]), '["A","B"]')
        self.assertEqual(display_string(3.0), "3")


if __name__ == '__main__':
    unittest.main()
