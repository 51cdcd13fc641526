import unittest
from datetime import timedelta

from hansoft_fakes import FakeHandle, FakeResource

DOMAINS = ("google.com", "chromium.org")


class DifferTests(unittest.TestCase):
    def setUp(self):
        from tasksync.services.catalog import ReferenceCatalog
        from tasksync.services.differ import Differ
        from tasksync.services.identity import IdentityResolver
        from tasksync.services.vocabulary import VocabularyTranslator

        self.alice = FakeResource("Alice", "alice@google.com")
        self.m1 = FakeHandle("M1")
        self.s3 = FakeHandle("S3")
        resolver = IdentityResolver.from_resources([self.alice], DOMAINS)
        catalog = ReferenceCatalog.from_handles([self.m1], [self.s3])
        self.differ = Differ(VocabularyTranslator(), resolver, catalog)

    def _pair(self, **source_values):
        """A source issue and a target record already in sync with it"""
        from tasksync.models import SourceRecord, TargetPriority, TargetRecord

        values = dict(
            id=42,
            summary="Crash in resolver",
            assignee="alice@chromium.org",
            status="Started",
            estimated_duration=timedelta(hours=2),
            priority="High",
            milestone="M1",
            sprint="S3",
        )
        values.update(source_values)
        source = SourceRecord(**values)
        target = TargetRecord(
            correlation_id=42,
            summary="Crash in resolver",
            assignee=self.alice,
            status="Assigned",
            estimated_duration=timedelta(hours=2),
            priority=TargetPriority.HIGH,
            milestone=self.m1,
            sprint=self.s3,
        )
        return target, source

    def test_in_sync_pair_has_no_diffs(self):
        target, source = self._pair()
        self.assertEqual(self.differ.diff(target, source), set())

    def test_each_field_is_detected(self):
        from tasksync.models import FieldTag, TargetPriority

        cases = [
            ("correlation_id", 43, FieldTag.ID),
            ("summary", "Other", FieldTag.SUMMARY),
            ("assignee", None, FieldTag.ASSIGNEE),
            ("status", "New", FieldTag.STATUS),
            ("estimated_duration", timedelta(hours=1), FieldTag.DURATION),
            ("priority", TargetPriority.LOW, FieldTag.PRIORITY),
            ("milestone", None, FieldTag.MILESTONE),
            ("sprint", FakeHandle("S4"), FieldTag.SPRINT),
        ]
        for attr, value, tag in cases:
            with self.subTest(field=attr):
                target, source = self._pair()
                setattr(target, attr, value)
                self.assertEqual(self.differ.diff(target, source), {tag})

    def test_closed_issue_ignores_assignment_fields(self):
        from tasksync.models import FieldTag

        target, source = self._pair(
            status="Fixed", assignee="", priority="Low", milestone="M9", sprint="S9"
        )
        target.status = "Resolved"

        self.assertEqual(self.differ.diff(target, source), set())

        target.summary = "stale"
        self.assertEqual(self.differ.diff(target, source), {FieldTag.SUMMARY})

    def test_duration_compares_whole_minutes(self):
        from tasksync.models import FieldTag

        target, source = self._pair(estimated_duration=timedelta(hours=0.99))
        target.estimated_duration = timedelta(minutes=59)
        self.assertEqual(self.differ.diff(target, source), set())

        target.estimated_duration = timedelta(minutes=60)
        self.assertEqual(self.differ.diff(target, source), {FieldTag.DURATION})

    def test_unknown_status_is_not_compared(self):
        target, source = self._pair(status="Archived")
        self.assertEqual(self.differ.diff(target, source), set())

    def test_unknown_priority_is_expected_as_medium(self):
        from tasksync.models import FieldTag, TargetPriority

        target, source = self._pair(priority="Urgent")
        self.assertEqual(self.differ.diff(target, source), {FieldTag.PRIORITY})

        target.priority = TargetPriority.MEDIUM
        self.assertEqual(self.differ.diff(target, source), set())

    def test_unset_milestone_and_sprint_are_not_compared(self):
        target, source = self._pair(milestone="", sprint="")
        target.milestone = FakeHandle("Anything")
        target.sprint = None

        self.assertEqual(self.differ.diff(target, source), set())

    def test_unknown_milestone_expects_none(self):
        from tasksync.models import FieldTag

        target, source = self._pair(milestone="M9")
        self.assertEqual(self.differ.diff(target, source), {FieldTag.MILESTONE})

        target.milestone = None
        self.assertEqual(self.differ.diff(target, source), set())


class WholeMinutesTests(unittest.TestCase):
    def test_truncates_toward_zero(self):
        from tasksync.services.differ import whole_minutes

        self.assertEqual(whole_minutes(timedelta(seconds=119)), 1)
        self.assertEqual(whole_minutes(timedelta(hours=0.99)), 59)
        self.assertEqual(whole_minutes(timedelta(0)), 0)


if __name__ == "__main__":
    unittest.main()
