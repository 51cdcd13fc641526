"""Data models"""

from tasksync.models.credentials import TargetCredentials
from tasksync.models.records import FieldTag, SourceRecord, TargetRecord
from tasksync.models.vocabulary import (
    SourcePriority,
    SourceStatus,
    TargetPriority,
    TargetStatus,
)

__all__ = [
    "FieldTag",
    "SourceRecord",
    "TargetRecord",
    "TargetCredentials",
    "SourceStatus",
    "SourcePriority",
    "TargetStatus",
    "TargetPriority",
]
