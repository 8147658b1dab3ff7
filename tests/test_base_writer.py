"""
Unit tests for base-file serialisation.
"""

import unittest

import yaml

from anyvault.models import CompiledFilter, CompiledGroup, CompiledSort, CompiledView
from anyvault.query.writer import render_base_file, view_to_data


class TestBaseWriter(unittest.TestCase):
    """Test the YAML written for compiled views."""

    def full_view(self):
        return CompiledView(
            kind="kanban",
            name="Board",
            page_limit=25,
            columns=["file.name", "note.status"],
            filters=CompiledFilter(op="and", items=[
                CompiledFilter(expr='note.status != "Done"'),
                CompiledFilter(op="or", items=[
                    CompiledFilter(expr="note.estimate > 3"),
                    CompiledFilter(expr='(note.mood.toString().contains("calm"))'),
                ]),
            ]),
            sort=[
                CompiledSort(property="note.status", direction="CUSTOM", custom_order=["Doing", "A"]),
                CompiledSort(property="file.name", direction="ASC"),
            ],
            group_by=CompiledGroup(property="note.status", direction="DESC"),
            local_card_order='{"A":["notes/Task One.md"]}',
        )

    def test_view_data_key_order(self):
        data = view_to_data(self.full_view())
        self.assertEqual(
            list(data),
            ["type", "name", "limit", "groupBy", "filters", "order", "sort", "localCardOrder"],
        )

    def test_round_trip_through_yaml(self):
        loaded = yaml.safe_load(render_base_file([self.full_view()]))
        view = loaded["views"][0]

        self.assertEqual(view["type"], "kanban")
        self.assertEqual(view["limit"], 25)
        self.assertEqual(view["groupBy"], {"property": "note.status", "direction": "DESC"})
        self.assertEqual(view["filters"], {"and": [
            'note.status != "Done"',
            {"or": ["note.estimate > 3", '(note.mood.toString().contains("calm"))']},
        ]})
        self.assertEqual(view["order"], ["file.name", "note.status"])
        self.assertEqual(view["sort"][0], {"property": "note.status", "direction": "CUSTOM", "customOrder": ["Doing", "A"]})
        self.assertNotIn("customOrder", view["sort"][1])
        self.assertEqual(view["localCardOrder"], '{"A":["notes/Task One.md"]}')

    def test_minimal_view_omits_optional_keys(self):
        data = view_to_data(CompiledView(name="All"))
        self.assertEqual(data, {"type": "table", "name": "All"})

    def test_sort_properties_stand_in_for_missing_columns(self):
        view = CompiledView(sort=[
            CompiledSort(property="note.status", direction="ASC"),
            CompiledSort(property="file.name", direction="DESC"),
            CompiledSort(property="note.status", direction="DESC"),
        ])
        self.assertEqual(view_to_data(view)["order"], ["note.status", "file.name"])

    def test_visible_columns_win_over_sort_order(self):
        view = CompiledView(columns=["file.name"], sort=[CompiledSort(property="note.status", direction="ASC")])
        self.assertEqual(view_to_data(view)["order"], ["file.name"])

    def test_empty_group_filter_is_true(self):
        self.assertEqual(CompiledFilter(op="and").to_data(), "true")

    def test_no_views_renders_nothing(self):
        self.assertEqual(render_base_file([]), "")


if __name__ == '__main__':
    unittest.main()
