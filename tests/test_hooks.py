"""Tests for the todo mirror and statusline hooks."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tasksidebar import hooks
from tasksidebar.models import AssistantTodo
from tasksidebar.store import SidebarStore


class HookTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.store = SidebarStore(self.root / "data", self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class SyncTodosTests(HookTestCase):
    def test_todo_write_payload_is_mirrored(self) -> None:
        payload = {
            "tool_name": "TodoWrite",
            "tool_input": {
                "todos": [
                    {"content": "write tests", "status": "completed"},
                    {"content": "bogus", "status": "unknown"},
                    {"content": "ship", "status": "pending"},
                ]
            },
        }
        self.assertTrue(hooks.sync_todos(json.dumps(payload), self.store))
        self.assertEqual(
            self.store.get_todos(),
            [AssistantTodo("write tests", "completed"), AssistantTodo("ship", "pending")],
        )

    def test_other_tools_and_bad_payloads_are_ignored(self) -> None:
        self.assertFalse(hooks.sync_todos(json.dumps({"tool_name": "Bash", "tool_input": {}}), self.store))
        self.assertFalse(hooks.sync_todos("", self.store))
        self.assertFalse(hooks.sync_todos("{oops", self.store))
        self.assertFalse(hooks.sync_todos(json.dumps({"tool_name": "TodoWrite", "tool_input": {}}), self.store))
        self.assertFalse((self.store.root / "claude-todos.json").exists())


class StatuslineTests(HookTestCase):
    def test_metrics_are_derived_from_payload(self) -> None:
        project = self.root / "my-repo"
        project.mkdir()
        payload = {
            "context_window": {
                "context_window_size": 100_000,
                "current_usage": {
                    "input_tokens": 10_000,
                    "cache_creation_input_tokens": 5_000,
                    "cache_read_input_tokens": 20_000,
                    "output_tokens": 1_000,
                },
            },
            "cost": {"total_cost_usd": 1.234, "total_duration_ms": 185_000},
            "model": {"display_name": "Opus"},
            "workspace": {"project_dir": str(project)},
        }
        with mock.patch("tasksidebar.hooks.git_branch", return_value="main") as branch_mock:
            line = hooks.ingest_statusline(json.dumps(payload), self.store)

        branch_mock.assert_called_once_with(project)
        snapshot = self.store.get_statusline()
        assert snapshot is not None
        self.assertEqual(snapshot.context_tokens, 36_000)
        self.assertEqual(snapshot.context_percent, 36)
        self.assertEqual(snapshot.context_size, 100_000)
        self.assertEqual(snapshot.duration_min, 3)
        self.assertEqual((snapshot.repo, snapshot.branch, snapshot.model), ("my-repo", "main", "Opus"))
        self.assertEqual(line, "Opus | ctx 36% | $1.23 | 3m")

    def test_missing_fields_use_defaults(self) -> None:
        hooks.ingest_statusline("{}", self.store)
        snapshot = self.store.get_statusline()
        assert snapshot is not None
        self.assertEqual(snapshot.context_size, 200_000)
        self.assertEqual(snapshot.context_percent, 0)
        self.assertEqual(snapshot.model, "Unknown")
        self.assertEqual((snapshot.repo, snapshot.branch), ("", ""))

    def test_malformed_payload_writes_nothing(self) -> None:
        self.assertEqual(hooks.ingest_statusline("not json", self.store), "")
        self.assertIsNone(self.store.get_statusline())


if __name__ == "__main__":
    unittest.main()
