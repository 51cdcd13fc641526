"""Issue and task records compared by the reconciliation engine"""
import enum
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

from tasksync.models.vocabulary import SourceStatus, TargetPriority


class FieldTag(str, enum.Enum):
    """Fields that can differ between a source issue and its target task"""

    ID = "id"
    SUMMARY = "summary"
    STATUS = "status"
    ASSIGNEE = "assignee"
    DURATION = "duration"
    PRIORITY = "priority"
    MILESTONE = "milestone"
    SPRINT = "sprint"


@dataclass(frozen=True)
class SourceRecord:
    """Snapshot of a Monorail issue.

    Empty strings mean "unset" for assignee, priority, milestone and sprint.
    """

    id: int
    summary: str = ""
    assignee: str = ""
    status: str = SourceStatus.NEW
    estimated_duration: timedelta = timedelta(0)
    priority: str = ""
    milestone: str = ""
    sprint: str = ""

    @property
    def is_closed(self) -> bool:
        return SourceStatus.is_closed(self.status)


@dataclass
class TargetRecord:
    """Cached view of a Hansoft task plus the values the engine writes back.

    ``task`` is the store handle; it stays ``None`` until the task is created.
    Assignee, milestone and sprint hold opaque store handles.
    """

    task: Any = None
    correlation_id: Optional[int] = None
    summary: str = ""
    assignee: Any = None
    status: Optional[str] = None
    estimated_duration: timedelta = field(default_factory=timedelta)
    priority: TargetPriority = TargetPriority.NONE
    milestone: Any = None
    sprint: Any = None
