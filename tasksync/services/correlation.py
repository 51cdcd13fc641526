"""Correlation of Monorail issues with Hansoft tasks.

A synced task stores ``<prefix><issue id>`` in its hyperlink field. That string
is the only link between the two stores; CorrelationKeyCodec owns its format.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from tasksync.exceptions import CorrelationKeyError
from tasksync.models.records import SourceRecord, TargetRecord

logger = logging.getLogger(__name__)


class CorrelationKeyCodec:
    """Formats and parses ``<prefix><decimal id>`` correlation keys"""

    _ID_RE = re.compile(r"[+-]?\d+", re.ASCII)

    def __init__(self, prefix: str):
        if not prefix:
            raise ValueError("Correlation prefix must not be empty")
        self.prefix = prefix

    def encode(self, issue_id: int) -> str:
        return f"{self.prefix}{int(issue_id)}"

    def decode(self, value: Optional[str]) -> Optional[int]:
        """Return the embedded id, or None when the value lacks the prefix.

        Raises CorrelationKeyError when the prefix is present but the remainder
        is not an integer.
        """
        if not value or not value.startswith(self.prefix):
            return None
        remainder = value[len(self.prefix):]
        if not self._ID_RE.fullmatch(remainder):
            raise CorrelationKeyError(f"Failed to parse issue ID from hyperlink '{value}'")
        return int(remainder)


class CorrelationIndex:
    """Issues and tasks keyed by the shared Monorail issue id.

    Both maps are built independently and joined on lookup. A second task
    carrying the same id replaces the first.
    """

    # (TargetRecord attribute, Task getter)
    TASK_FIELDS = (
        ("summary", "description"),
        ("assignee", "assignee"),
        ("status", "status"),
        ("estimated_duration", "estimated_duration"),
        ("priority", "priority"),
        ("milestone", "milestone"),
        ("sprint", "sprint"),
    )

    def __init__(self, codec: CorrelationKeyCodec):
        self.codec = codec
        self.source_by_id: Dict[int, SourceRecord] = {}
        self.target_by_id: Dict[int, TargetRecord] = {}
        self.warnings: List[str] = []

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def index_source_records(self, records: Iterable[SourceRecord]) -> Dict[int, SourceRecord]:
        self.source_by_id = {record.id: record for record in records}
        return self.source_by_id

    def index_target_tasks(self, tasks: Iterable[Any]) -> Dict[int, TargetRecord]:
        """Read every task whose hyperlink carries the prefix into a TargetRecord.

        Tasks without the prefix belong to someone else and are ignored. Tasks
        whose key or fields cannot be read are reported and left unlinked.
        """
        out: Dict[int, TargetRecord] = {}
        for task in tasks:
            try:
                hyperlink = task.hyperlink()
            except Exception as e:
                self._warn(f"Failed to get hansoft task hyperlink: {e}")
                continue
            try:
                issue_id = self.codec.decode(hyperlink)
            except CorrelationKeyError as e:
                self._warn(str(e))
                continue
            if issue_id is None:
                continue

            record = TargetRecord(task=task, correlation_id=issue_id)
            try:
                for attr, getter in self.TASK_FIELDS:
                    setattr(record, attr, getattr(task, getter)())
            except Exception as e:
                self._warn(f"{hyperlink}: Failed to get hansoft task {getter}: {e}")
                continue

            if issue_id in out:
                self._warn(f"{hyperlink}: More than one hansoft task links to issue {issue_id}")
            out[issue_id] = record

        self.target_by_id = out
        return out

    def source(self, issue_id: int) -> Optional[SourceRecord]:
        return self.source_by_id.get(issue_id)

    def target(self, issue_id: int) -> Optional[TargetRecord]:
        return self.target_by_id.get(issue_id)

    def link(self, issue_id: int, record: TargetRecord) -> None:
        """Remember a task created for an issue during this run."""
        record.correlation_id = issue_id
        self.target_by_id[issue_id] = record
