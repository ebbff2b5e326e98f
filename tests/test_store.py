"""Persistence gateway tests against a real temporary data directory.

Covers atomic document writes, corrupt-document fallback, and the
activate/complete/return moves that must never show a task twice.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from tasksidebar.models import AssistantTodo, StatuslineSnapshot
from tasksidebar.project import project_hash
from tasksidebar.store import SidebarStore, read_json_document, write_json_document


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.cwd = Path("/work/project")
        self.store = SidebarStore(self.root, self.cwd, done_limit=3)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class DocumentIOTests(StoreTestCase):
    def test_missing_and_corrupt_documents_read_as_default(self) -> None:
        path = self.root / "broken.json"
        self.assertEqual(read_json_document(path, []), [])
        path.write_text("{not json", encoding="utf-8")
        self.assertEqual(read_json_document(path, []), [])

    def test_write_is_atomic_and_leaves_no_temp_files(self) -> None:
        path = self.root / "nested" / "doc.json"
        write_json_document(path, {"a": 1})
        self.assertEqual(json.loads(path.read_text(encoding="utf-8")), {"a": 1})
        self.assertEqual(sorted(p.name for p in path.parent.iterdir()), ["doc.json"])

    def test_corrupt_queue_reads_as_empty(self) -> None:
        self.store.project_dir.mkdir(parents=True)
        (self.store.project_dir / "tasks.json").write_text("[{]", encoding="utf-8")
        self.assertEqual(self.store.get_queue(), [])


class QueueTests(StoreTestCase):
    def test_project_scope_is_hash_of_cwd(self) -> None:
        self.assertEqual(self.store.project_dir, self.root / "projects" / project_hash(self.cwd))
        self.assertEqual(len(project_hash(self.cwd)), 12)

    def test_add_task_assigns_unique_ids_and_records_mapping(self) -> None:
        first = self.store.add_task("one")
        second = self.store.add_task("two")
        self.assertNotEqual(first.id, second.id)
        self.assertEqual([t.content for t in self.store.get_queue()], ["one", "two"])
        mapping = json.loads((self.root / "projects" / "mapping.json").read_text(encoding="utf-8"))
        self.assertEqual(mapping, {self.store.project_key: str(self.cwd)})

    def test_add_tasks_writes_all_entries(self) -> None:
        added = self.store.add_tasks(["a", "b", "c"])
        self.assertEqual(len({task.id for task in added}), 3)
        self.assertEqual([t.content for t in self.store.get_queue()], ["a", "b", "c"])

    def test_update_remove_and_clarify(self) -> None:
        task = self.store.add_task("draft")
        self.assertTrue(self.store.update_task(task.id, "final"))
        self.assertTrue(self.store.mark_clarified(task.id, "plans/final.md"))
        stored = self.store.get_queue()[0]
        self.assertEqual((stored.content, stored.clarified, stored.plan_path), ("final", True, "plans/final.md"))
        self.assertTrue(self.store.remove_task(task.id))
        self.assertFalse(self.store.remove_task(task.id))
        self.assertFalse(self.store.update_task("missing", "x"))
        self.assertFalse(self.store.mark_clarified("missing", None))


class LifecycleTests(StoreTestCase):
    def test_activate_moves_task_out_of_queue(self) -> None:
        task = self.store.add_task("ship it")
        active = self.store.activate_task(task.id)
        assert active is not None
        self.assertEqual(active.id, task.id)
        snapshot = self.store.load_snapshot()
        self.assertEqual(snapshot.queue, [])
        self.assertEqual(snapshot.active, active)

    def test_snapshot_hides_queue_entry_already_active(self) -> None:
        task = self.store.add_task("half-moved")
        queue = self.store.get_queue()
        self.store.activate_task(task.id)
        # Simulate a reader landing between the two writes of activate_task.
        self.store.set_queue(queue)
        snapshot = self.store.load_snapshot()
        self.assertEqual(snapshot.queue, [])
        assert snapshot.active is not None
        self.assertEqual(snapshot.active.id, task.id)

    def test_complete_active_pushes_to_done_and_history(self) -> None:
        task = self.store.add_task("line one\nline two")
        self.store.activate_task(task.id)
        done = self.store.complete_active_task()
        assert done is not None
        self.assertIsNone(self.store.get_active())
        self.assertEqual([entry.id for entry in self.store.get_done()], [task.id])
        history = self.store.history_path.read_text(encoding="utf-8")
        self.assertTrue(history.endswith(" | line one line two\n"))
        self.assertIsNone(self.store.complete_active_task())

    def test_done_list_is_capped_newest_first(self) -> None:
        for idx in range(5):
            task = self.store.add_task(f"task {idx}")
            self.store.activate_task(task.id)
            self.store.complete_active_task()
        self.assertEqual([entry.content for entry in self.store.get_done()], ["task 4", "task 3", "task 2"])

    def test_clear_active_skips_review(self) -> None:
        task = self.store.add_task("abandon")
        self.store.activate_task(task.id)
        cleared = self.store.clear_active_task()
        assert cleared is not None
        self.assertIsNone(self.store.get_active())
        self.assertEqual(self.store.get_done(), [])
        self.assertIn("abandon", self.store.history_path.read_text(encoding="utf-8"))

    def test_return_to_active_reverses_completion(self) -> None:
        task = self.store.add_task("not really done")
        self.store.activate_task(task.id)
        self.store.complete_active_task()
        active = self.store.return_to_active(task.id)
        assert active is not None
        self.assertEqual(active.id, task.id)
        self.assertEqual(self.store.get_done(), [])
        self.assertIsNone(self.store.return_to_active("missing"))

    def test_remove_from_done(self) -> None:
        task = self.store.add_task("reviewed")
        self.store.activate_task(task.id)
        self.store.complete_active_task()
        self.assertTrue(self.store.remove_from_done(task.id))
        self.assertFalse(self.store.remove_from_done(task.id))


class GlobalMirrorTests(StoreTestCase):
    def test_todos_and_statusline_are_global(self) -> None:
        other = SidebarStore(self.root, Path("/work/other"))
        self.store.write_todos([AssistantTodo("write tests", "in_progress")])
        self.store.write_statusline(StatuslineSnapshot(context_percent=42, model="Opus"))

        self.assertEqual(other.get_todos(), [AssistantTodo("write tests", "in_progress")])
        statusline = other.get_statusline()
        assert statusline is not None
        self.assertEqual((statusline.context_percent, statusline.model), (42, "Opus"))

    def test_pane_record_round_trip(self) -> None:
        record = self.store.pane_record()
        self.assertIsNone(record.read())
        record.write("%3")
        self.assertEqual(record.read(), "%3")
        record.clear()
        self.assertIsNone(record.read())


if __name__ == "__main__":
    unittest.main()
