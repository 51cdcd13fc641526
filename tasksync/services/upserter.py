"""Writes translated Monorail issue fields onto Hansoft tasks"""
import logging
from typing import Any, Callable, List, Optional

from tasksync.models.records import SourceRecord, TargetRecord
from tasksync.services.catalog import ReferenceCatalog
from tasksync.services.correlation import CorrelationKeyCodec
from tasksync.services.identity import IdentityResolver
from tasksync.services.vocabulary import VocabularyTranslator

logger = logging.getLogger(__name__)


class Upserter:
    """Creates missing tasks and rewrites every synced field of a task.

    All fields are written on every upsert, whatever the diff was. Each write
    may fail on its own; failures are reported and the remaining writes go on.
    Nothing is retried.
    """

    def __init__(
        self,
        repository: Any,
        codec: CorrelationKeyCodec,
        translator: VocabularyTranslator,
        resolver: IdentityResolver,
        catalog: ReferenceCatalog,
    ):
        self.repository = repository
        self.codec = codec
        self.translator = translator
        self.resolver = resolver
        self.catalog = catalog
        self.warnings: List[str] = []
        self.failed_writes = 0

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _apply_source(self, target: TargetRecord, source: SourceRecord) -> None:
        """Translate the source values into the cached target record."""
        key = self.codec.encode(source.id)

        status = self.translator.status_to_target(source.status)
        if status is not None:
            target.status = status
        else:
            self._warn(f"{key}: Don't know how to translate monorail status '{source.status}' to hansoft")

        priority = self.translator.priority_to_target(source.priority)
        if priority is not None:
            target.priority = priority
        else:
            self._warn(f"{key}: Don't know how to translate monorail priority '{source.priority}' to hansoft")
            target.priority = self.translator.DEFAULT_TARGET_PRIORITY

        if source.milestone:
            target.milestone = self.catalog.lookup_milestone(source.milestone)
            if target.milestone is None:
                self._warn(f"{key}: Hansoft does not contain milestone '{source.milestone}'")

        if source.sprint:
            target.sprint = self.catalog.lookup_sprint(source.sprint)
            if target.sprint is None:
                self._warn(f"{key}: Hansoft does not contain sprint '{source.sprint}'")

        target.correlation_id = source.id
        target.summary = source.summary
        target.assignee = self.resolver.resolve(source.assignee)
        target.estimated_duration = source.estimated_duration

        if target.assignee is None and source.assignee:
            if source.is_closed:
                logger.info(f"{key}: Closed issue assignee '{source.assignee}' has no hansoft user")
            else:
                self._warn(f"{key}: Hansoft project does not have a user with address '{source.assignee}'")

    def _write(self, key: str, field_name: str, setter: Callable[[Any], None], value: Any) -> bool:
        try:
            setter(value)
            return True
        except Exception as e:
            self._warn(f"{key}: Failed to set hansoft task {field_name}: {e}")
            return False

    def upsert(self, target: Optional[TargetRecord], source: SourceRecord) -> Optional[TargetRecord]:
        """Bring the task for ``source`` in line with it, creating the task if needed.

        Returns the updated record, or None when the task could not be created.
        """
        key = self.codec.encode(source.id)
        if target is None:
            target = TargetRecord()
        if target.task is None:
            try:
                target.task = self.repository.create_task()
            except Exception as e:
                self._warn(f"{key}: Failed to create new hansoft task: {e}")
                return None

        self._apply_source(target, source)

        task = target.task
        writes = [
            ("description", task.set_description, target.summary),
            ("hyperlink", task.set_hyperlink, key),
            ("assignee", task.set_assignee, target.assignee),
        ]
        # An untranslatable status leaves the task's own status alone.
        if self.translator.status_to_target(source.status) is not None:
            writes.append(("status", task.set_status, target.status))
        writes.append(("estimated duration", task.set_estimated_duration, target.estimated_duration))
        writes.append(("priority", task.set_priority, target.priority))
        if source.milestone:
            writes.append(("milestone", task.set_milestone, target.milestone))
        if source.sprint:
            writes.append(("sprint", task.set_sprint, target.sprint))

        failed = 0
        for field_name, setter, value in writes:
            if not self._write(key, field_name, setter, value):
                failed += 1
        if failed:
            logger.debug(f"{key}: {failed} of {len(writes)} field writes failed")
        self.failed_writes += failed
        return target
