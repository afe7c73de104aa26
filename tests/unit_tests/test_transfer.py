"""
Unit tests for export and import.
"""

import json
import os
import tempfile
import unittest

from config import ClonerConfig
from errors import ConfigurationError
from fakes import FakeProvider, make_assistant
from retry import RetryOptions
from transfer import AssistantImporter, export_assistants, load_export


class TestExportImport(unittest.TestCase):
    """Test export_assistants, load_export and AssistantImporter."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmpdir = tempfile.TemporaryDirectory()
        self.source = FakeProvider(
            "src",
            [
                make_assistant("asst_a", "Alpha", metadata={"team": "sales"}),
                make_assistant("asst_b", "Beta", vector_store_ids=("vs_1",)),
            ],
        )
        self.destination = FakeProvider("dst")

    def tearDown(self):
        self.tmpdir.cleanup()

    def _importer(self, **overrides) -> AssistantImporter:
        config = ClonerConfig(dst_api_key="sk-dst", **overrides)
        return AssistantImporter(
            config,
            destination=self.destination,
            retry_options=RetryOptions(max_retries=0),
        )

    def test_export_then_load(self):
        """An export file round-trips through load_export."""
        path = export_assistants(
            self.source, self.tmpdir.name, source={"org_id": "org-a", "project_id": None}
        )

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["source"]["org_id"], "org-a")
        self.assertEqual(len(data["assistants"]), 2)

        snapshots = load_export(path)
        self.assertEqual([s.id for s in snapshots], ["asst_a", "asst_b"])
        self.assertEqual(snapshots[1].vector_store_ids, ("vs_1",))

    def test_load_invalid_file(self):
        """Files without an assistants list are rejected."""
        path = os.path.join(self.tmpdir.name, "bad.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"items": []}, f)

        with self.assertRaises(ConfigurationError):
            load_export(path)
        with self.assertRaises(ConfigurationError):
            load_export(os.path.join(self.tmpdir.name, "missing.json"))

    def test_import_creates_then_updates(self):
        """Imports are stamped with imported_from and are idempotent."""
        snapshots = self.source.list_assistants()

        first = self._importer().run(snapshots)
        second = self._importer().run(snapshots)

        self.assertTrue(all(o.operations["assistant"] == "created" for o in first))
        self.assertTrue(all(o.operations["assistant"] == "updated" for o in second))
        copy = self.destination.get_assistant(first[0].dst_id)
        self.assertEqual(copy.metadata["imported_from"], "asst_a")
        self.assertIn("imported_at", copy.metadata)
        self.assertEqual(copy.metadata["team"], "sales")
        self.assertIsNone(copy.tool_resources)

    def test_import_failure_is_isolated(self):
        """A failing import does not stop the others."""
        self.destination.fail_names.add("Beta")

        outcomes = {o.src_id: o for o in self._importer().run(self.source.list_assistants())}

        self.assertEqual(outcomes["asst_a"].status, "success")
        self.assertEqual(outcomes["asst_b"].status, "failed")
        self.assertEqual(outcomes["asst_b"].operations["assistant"], "failed")

    def test_import_dry_run(self):
        """Dry-run imports write nothing."""
        outcomes = self._importer(dry_run=True).run(self.source.list_assistants())

        self.assertEqual(self.destination.writes, [])
        self.assertTrue(all(o.status == "skipped" for o in outcomes))


if __name__ == "__main__":
    unittest.main()
