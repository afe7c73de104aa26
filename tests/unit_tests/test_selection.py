"""
Unit tests for assistant selection.
"""

import unittest

from errors import ConfigurationError
from fakes import make_assistant
from selection import check_selection_params, select_assistants


class TestSelectAssistants(unittest.TestCase):
    """Test select_assistants filtering."""

    def setUp(self):
        """Set up test fixtures."""
        self.assistants = [
            make_assistant("a", "MyBot"),
            make_assistant("b", "other"),
            make_assistant("c", "BOTx"),
        ]

    def test_all_returns_everything(self):
        """Mode 'all' keeps the full list."""
        selected = select_assistants(self.assistants, "all")
        self.assertEqual([a.id for a in selected], ["a", "b", "c"])

    def test_by_id_keeps_input_order(self):
        """Mode 'by_id' keeps members in their original order."""
        selected = select_assistants(self.assistants, "by_id", ids={"c", "a"})
        self.assertEqual([a.id for a in selected], ["a", "c"])

    def test_by_id_ignores_unknown_ids(self):
        """Ids absent from the source are ignored."""
        selected = select_assistants(self.assistants, "by_id", ids=["zzz", "b"])
        self.assertEqual([a.id for a in selected], ["b"])

    def test_by_name_is_case_insensitive_substring(self):
        """Mode 'by_name' matches anywhere in the name, ignoring case."""
        selected = select_assistants(self.assistants, "by_name", name_prefix="Bot")
        self.assertEqual([a.name for a in selected], ["MyBot", "BOTx"])

    def test_unknown_mode(self):
        """An unknown mode is a configuration error."""
        with self.assertRaises(ConfigurationError):
            select_assistants(self.assistants, "by_tag")


class TestCheckSelectionParams(unittest.TestCase):
    """Test selection parameter validation."""

    def test_valid_params(self):
        """Complete parameters pass."""
        check_selection_params("all")
        check_selection_params("by_id", ids=["a"])
        check_selection_params("by_name", name_prefix="Bot")

    def test_by_id_requires_ids(self):
        """by_id without ids fails."""
        with self.assertRaises(ConfigurationError):
            check_selection_params("by_id", ids=[])
        with self.assertRaises(ConfigurationError):
            check_selection_params("by_id")

    def test_by_name_requires_prefix(self):
        """by_name without a prefix fails."""
        with self.assertRaises(ConfigurationError):
            check_selection_params("by_name", name_prefix="")

    def test_invalid_mode(self):
        """Unknown modes fail."""
        with self.assertRaises(ConfigurationError):
            check_selection_params("everything")


if __name__ == "__main__":
    unittest.main()
