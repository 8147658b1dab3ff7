"""
Unit tests for front matter resolution and rendering.
"""

import unittest

import yaml

from anyvault.frontmatter import (
    FrontmatterBuilder,
    render_frontmatter,
    resolve_frontmatter,
    sanitize_tag,
)
from anyvault.models import ExportObject, RelationDefinition, ValueFormat
from anyvault.registry import ExportContext, PropertySettings

from tests.helpers import TASK_TYPE_KEY, make_context, task_type


SOURCE = "notes/Task One.md"


def task_object(**extra):
    details = {
        "type": "type-task",
        "name": "Task One",
        "status": "opt-status-doing",
        "dueDate": 1710496800,
        TASK_TYPE_KEY: ["opt-t1"],
        "tag": ["opt-t1", "opt-year"],
        "assignee": "person-1",
        "spaceId": "space-1",
        "backlinks": ["obj-9"],
        "estimate": 3,
    }
    details.update(extra)
    return ExportObject(id="task-1", name="Task One", details=details)


class TestSanitizeTag(unittest.TestCase):
    """Test reduction of labels to the tag grammar."""

    def test_punctuation_and_spaces(self):
        self.assertEqual(sanitize_tag("Deep Work!"), "Deep-Work")
        self.assertEqual(sanitize_tag("  a  b  "), "a-b")

    def test_numeric_tags_get_prefix(self):
        self.assertEqual(sanitize_tag("2024"), "y2024")

    def test_nested_tags_and_links(self):
        self.assertEqual(sanitize_tag("area/home office"), "area/home-office")
        self.assertEqual(sanitize_tag("[[Focus.md]]"), "[[Focus.md]]")
        self.assertEqual(sanitize_tag("!!!"), "")


class TestFrontmatterBuilder(unittest.TestCase):
    """Test ordering, filtering and value resolution of front matter."""

    def setUp(self):
        self.context = make_context(
            names={"opt-year": "2024", "type-task": "Task"},
            links={"person-1": "notes/People/Alice.md"},
            types=[task_type()],
        )

    def test_ordering_and_values(self):
        pairs = FrontmatterBuilder(self.context).build(task_object(), SOURCE)

        self.assertEqual(
            [name for name, _ in pairs],
            ["anytype_id", "status", "dueDate", "Task Type", "assignee", "estimate", "tags", "type"],
        )
        values = dict(pairs)
        self.assertEqual(values["anytype_id"], "task-1")
        self.assertEqual(values["status"], "Doing")
        self.assertEqual(values["dueDate"], "2024-03-15")
        self.assertEqual(values["Task Type"], ["Deep Work!"])
        self.assertEqual(values["assignee"], "[[People/Alice.md]]")
        self.assertEqual(values["tags"], ["Deep-Work", "y2024"])
        self.assertEqual(values["type"], "Task")

    def test_hidden_and_dynamic_properties_are_skipped(self):
        names = [name for name, _ in FrontmatterBuilder(self.context).build(task_object(), SOURCE)]

        self.assertNotIn("name", names)
        self.assertNotIn("spaceId", names)
        self.assertNotIn("backlinks", names)

    def test_object_id_can_be_disabled(self):
        context = make_context(types=[task_type()], settings=PropertySettings(include_object_id=False))
        names = [name for name, _ in FrontmatterBuilder(context).build(task_object(), SOURCE)]

        self.assertNotIn("anytype_id", names)

    def test_exclude_empty(self):
        obj = task_object(notes="", links_to=[])
        keep = dict(FrontmatterBuilder(self.context).build(obj, SOURCE))
        self.assertEqual(keep["notes"], "")

        context = make_context(types=[task_type()], settings=PropertySettings(exclude_empty=True))
        dropped = dict(FrontmatterBuilder(context).build(obj, SOURCE))
        self.assertNotIn("notes", dropped)
        self.assertNotIn("links_to", dropped)
        self.assertEqual(dropped["estimate"], 3)

    def test_type_listed_date_gets_date_formatting(self):
        """Test a date relation named by the type formats an untyped detail key."""
        context = make_context(types=[task_type()])
        obj = ExportObject(id="task-2", details={"type": "type-task", "rel-due": 1710496800})

        values = dict(FrontmatterBuilder(context).build(obj, SOURCE))
        self.assertEqual(values["Due Date"], "2024-03-15")


    def test_colliding_names_keep_every_value(self):
        """Test a display name that equals another property's raw key."""
        context = ExportContext.from_records(
            relations=[RelationDefinition(id="Arel", key="arel", display_name="Status", value_format=ValueFormat.PLAIN_TEXT)],
            settings=PropertySettings(include_object_id=False),
        )
        obj = ExportObject(id="obj-1", details={"Arel": "x", "Status": "y"})

        pairs = FrontmatterBuilder(context).build(obj)
        self.assertEqual(pairs, [("Status", "x"), ("Status_2", "y")])

        body = render_frontmatter(pairs)[len("---\n"):-len("---\n\n")]
        self.assertEqual(yaml.safe_load(body), {"Status": "x", "Status_2": "y"})

    def test_cover_banner(self):
        context = make_context(files={"file-cover": "files/images/cover.png"}, types=[task_type()])
        pairs = FrontmatterBuilder(context).build(task_object(coverId="file-cover"), SOURCE)

        self.assertEqual(pairs[-1], ("banner", "[[cover.png]]"))
        self.assertNotIn("coverId", dict(pairs))

    def test_banner_needs_a_known_file(self):
        pairs = FrontmatterBuilder(self.context).build(task_object(coverId="file-missing"), SOURCE)
        self.assertNotIn("banner", dict(pairs))

    def test_icon_from_image_or_emoji(self):
        settings = PropertySettings(pretty_property_icon=True, include_object_id=False)
        context = make_context(files={"file-icon": "files/icon.png"}, settings=settings)

        image = ExportObject(id="o1", details={"iconImage": "file-icon", "iconEmoji": "x", "estimate": 3})
        self.assertEqual(
            FrontmatterBuilder(context).build(image, SOURCE),
            [("icon", "files/icon.png"), ("estimate", 3)],
        )

        emoji = ExportObject(id="o2", details={"iconEmoji": "\u2615"})
        self.assertEqual(FrontmatterBuilder(context).build(emoji, SOURCE), [("icon", "\u2615")])

    def test_icon_properties_are_plain_without_icon_setting(self):
        context = make_context(settings=PropertySettings(include_object_id=False))
        obj = ExportObject(id="o1", details={"iconEmoji": "x"})

        self.assertEqual(FrontmatterBuilder(context).build(obj, SOURCE), [("iconEmoji", "x")])


class TestRenderFrontmatter(unittest.TestCase):

    def test_render_is_fenced_yaml(self):
        text = render_frontmatter([("status", "Doing"), ("tags", ["a", "b"])])

        self.assertTrue(text.startswith("---\n"))
        self.assertTrue(text.endswith("---\n\n"))
        body = text[len("---\n"):-len("---\n\n")]
        self.assertEqual(yaml.safe_load(body), {"status": "Doing", "tags": ["a", "b"]})

    def test_render_keeps_order(self):
        text = render_frontmatter([("zeta", 1), ("alpha", 2)])
        self.assertLess(text.index("zeta"), text.index("alpha"))

    def test_render_never_overwrites_duplicate_names(self):
        text = render_frontmatter([("a", 1), ("a", 2), ("a_2", 3)])
        body = text[len("---\n"):-len("---\n\n")]

        self.assertEqual(yaml.safe_load(body), {"a": 1, "a_2": 2, "a_2_2": 3})

    def test_render_empty(self):
        self.assertEqual(render_frontmatter([]), "---\n---\n\n")

    def test_resolve_frontmatter(self):
        context = make_context(names={"type-task": "Task"}, types=[task_type()])
        text = resolve_frontmatter(task_object(), context, SOURCE)

        self.assertIn("anytype_id: task-1", text)
        self.assertIn("status: Doing", text)


if __name__ == '__main__':
    unittest.main()
