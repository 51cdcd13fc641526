"""Field-by-field comparison of a Monorail issue and its Hansoft task"""
from datetime import timedelta
from typing import Set

from tasksync.models.records import FieldTag, SourceRecord, TargetRecord
from tasksync.services.catalog import ReferenceCatalog
from tasksync.services.identity import IdentityResolver
from tasksync.services.vocabulary import VocabularyTranslator

_MINUTE = timedelta(minutes=1)


def whole_minutes(duration: timedelta) -> int:
    return duration // _MINUTE


class Differ:
    """Computes which target fields disagree with the translated source values.

    For closed issues the assignee, priority, milestone and sprint are not
    compared. Durations are compared in whole minutes.
    """

    def __init__(
        self,
        translator: VocabularyTranslator,
        resolver: IdentityResolver,
        catalog: ReferenceCatalog,
    ):
        self.translator = translator
        self.resolver = resolver
        self.catalog = catalog

    def diff(self, target: TargetRecord, source: SourceRecord) -> Set[FieldTag]:
        diffs: Set[FieldTag] = set()
        closed = source.is_closed

        if target.correlation_id != source.id:
            diffs.add(FieldTag.ID)

        if target.summary != source.summary:
            diffs.add(FieldTag.SUMMARY)

        expected_status = self.translator.status_to_target(source.status)
        if expected_status is not None and target.status != expected_status:
            diffs.add(FieldTag.STATUS)

        if whole_minutes(target.estimated_duration) != whole_minutes(source.estimated_duration):
            diffs.add(FieldTag.DURATION)

        if closed:
            return diffs

        if target.assignee != self.resolver.resolve(source.assignee):
            diffs.add(FieldTag.ASSIGNEE)

        if target.priority != self.translator.expected_priority(source.priority):
            diffs.add(FieldTag.PRIORITY)

        # An empty name leaves the target's milestone/sprint alone.
        if source.milestone and target.milestone != self.catalog.lookup_milestone(source.milestone):
            diffs.add(FieldTag.MILESTONE)

        if source.sprint and target.sprint != self.catalog.lookup_sprint(source.sprint):
            diffs.add(FieldTag.SPRINT)

        return diffs
