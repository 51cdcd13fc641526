import unittest
from datetime import timedelta

from hansoft_fakes import (
    FakeHandle,
    FakeProject,
    FakeResource,
    FakeSource,
    FakeTask,
    KeyedHandle,
    KeyedResource,
)


def _settings(**overrides):
    from tasksync.config import Settings

    return Settings(_env_file=None, source_project="tint", dry_run=False, **overrides)


def _issues():
    from tasksync.models import SourceRecord

    return [
        SourceRecord(
            id=1,
            summary="Crash in resolver",
            assignee="alice@chromium.org",
            status="Started",
            estimated_duration=timedelta(hours=1.5),
            priority="High",
            milestone="M1",
            sprint="S3",
        ),
        SourceRecord(
            id=2,
            summary="Typo in docs",
            status="Fixed",
            priority="Low",
        ),
    ]


class SyncServiceTests(unittest.TestCase):
    def setUp(self):
        self.alice = FakeResource("Alice", "alice@google.com")
        self.project = FakeProject(
            users=[self.alice],
            milestones=[FakeHandle("M1")],
            sprints=[FakeHandle("S3")],
        )
        self.source = FakeSource(_issues())

    def _run(self, **kwargs):
        from tasksync.services.sync_service import SyncService

        return SyncService(self.source, self.project, _settings(), **kwargs).run()

    def test_first_run_creates_linked_tasks(self):
        from tasksync.services.correlation import CorrelationKeyCodec

        stats = self._run()

        self.assertEqual(stats["created"], 2)
        self.assertEqual(stats["updated"], 0)
        self.assertEqual(stats["failed"], 0)
        self.assertEqual(stats["write_errors"], 0)
        codec = CorrelationKeyCodec("crbug.com/tint/")
        linked = sorted(codec.decode(task.values["hyperlink"]) for task in self.project.tasks)
        self.assertEqual(linked, [1, 2])

    def test_second_run_changes_nothing(self):
        self._run()
        writes_after_first_run = len(self.project.writes)

        stats = self._run()

        self.assertEqual(stats["in_sync"], 2)
        self.assertEqual(stats["created"], 0)
        self.assertEqual(stats["updated"], 0)
        self.assertEqual(len(self.project.writes), writes_after_first_run)
        self.assertEqual(len(self.project.tasks), 2)

    def test_changed_issue_is_updated(self):
        from tasksync.models import SourceRecord

        self._run()
        self.source.issues[0] = SourceRecord(
            id=1,
            summary="Crash in resolver (regression)",
            assignee="alice@chromium.org",
            status="Started",
            estimated_duration=timedelta(hours=1.5),
            priority="High",
            milestone="M1",
            sprint="S3",
        )

        stats = self._run()

        self.assertEqual(stats["updated"], 1)
        self.assertEqual(stats["in_sync"], 1)
        task = next(t for t in self.project.tasks if t.values["hyperlink"] == "crbug.com/tint/1")
        self.assertEqual(task.values["description"], "Crash in resolver (regression)")

    def test_unlinked_and_orphaned_tasks_are_untouched(self):
        manual = self.project.add_task(FakeTask(hyperlink="https://docs.example/plan"))
        orphan = self.project.add_task(FakeTask(hyperlink="crbug.com/tint/99", description="gone"))

        self._run()

        touched = {id(task) for task, _, _ in self.project.writes}
        self.assertNotIn(id(manual), touched)
        self.assertNotIn(id(orphan), touched)
        self.assertEqual(orphan.values["description"], "gone")

    def test_dry_run_writes_nothing(self):
        stats = self._run(dry_run=True)

        self.assertEqual(stats["created"], 2)
        self.assertEqual(self.project.tasks, [])
        self.assertEqual(self.project.writes, [])

    def test_enumeration_failure_aborts_the_run(self):
        from tasksync.exceptions import CatalogError

        for what in ("tasks", "users", "milestones", "sprints"):
            with self.subTest(collection=what):
                self.project.fail_list = {what}
                with self.assertRaises(CatalogError):
                    self._run()
                self.assertEqual(self.project.writes, [])

        self.project.fail_list = set()
        self.source.fail = True
        with self.assertRaises(CatalogError):
            self._run()

    def test_failed_creation_is_counted(self):
        self.project.fail_create = True

        stats = self._run()

        self.assertEqual(stats["failed"], 2)
        self.assertEqual(stats["created"], 0)
        self.assertEqual(len(stats["warnings"]), 2)

    def test_warnings_are_collected(self):
        self.project.add_task(FakeTask(hyperlink="crbug.com/tint/not-a-number"))
        self.project.milestones = []

        stats = self._run()

        self.assertEqual(stats["created"], 2)
        self.assertTrue(any("not-a-number" in w for w in stats["warnings"]))
        self.assertTrue(any("milestone 'M1'" in w for w in stats["warnings"]))

    def test_serialized_repository_round_trip(self):
        from tasksync.services.session_worker import SerializedTaskRepository, SessionWorker
        from tasksync.services.sync_service import SyncService

        with SessionWorker(max_pending=4) as worker:
            repository = SerializedTaskRepository(self.project, worker)
            first = SyncService(self.source, repository, _settings()).run()
            second = SyncService(self.source, repository, _settings()).run()

        self.assertEqual(first["created"], 2)
        self.assertEqual(second["in_sync"], 2)
        task = next(t for t in self.project.tasks if t.values["hyperlink"] == "crbug.com/tint/1")
        self.assertIs(task.values["assignee"], self.alice)

    def test_serialized_repository_with_keyed_handles_is_idempotent(self):
        from tasksync.services.session_worker import SerializedTaskRepository, SessionWorker
        from tasksync.services.sync_service import SyncService

        project = FakeProject(
            users=[KeyedResource(11, "Alice", "alice@google.com")],
            milestones=[KeyedHandle(21, "M1")],
            sprints=[KeyedHandle(31, "S3")],
        )

        with SessionWorker() as worker:
            repository = SerializedTaskRepository(project, worker)
            first = SyncService(self.source, repository, _settings()).run()

            # Bindings hand out a fresh object for the same store entity.
            for task in project.tasks:
                for field in ("assignee", "milestone", "sprint"):
                    value = task.values[field]
                    if isinstance(value, KeyedResource):
                        task.values[field] = KeyedResource(value.key, value.name(), value.email())
                    elif isinstance(value, KeyedHandle):
                        task.values[field] = KeyedHandle(value.key, value.name())
            writes_after_first_run = len(project.writes)

            second = SyncService(self.source, repository, _settings()).run()

        self.assertEqual(first["created"], 2)
        self.assertEqual(second["in_sync"], 2)
        self.assertEqual(second["updated"], 0)
        self.assertEqual(len(project.writes), writes_after_first_run)


if __name__ == "__main__":
    unittest.main()
