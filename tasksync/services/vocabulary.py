"""Status and priority translation between Monorail and Hansoft"""
from typing import Dict, Optional

from tasksync.models.vocabulary import (
    SourcePriority,
    SourceStatus,
    TargetPriority,
    TargetStatus,
)


class VocabularyTranslator:
    """Lookup-table translation of statuses and priorities.

    The tables are not inverses of each other. Several Monorail statuses collapse
    onto one Hansoft status (Done and Fixed both become Resolved), so translating
    back yields a single fixed representative (Resolved becomes Fixed).
    """

    STATUS_TO_TARGET: Dict[str, str] = {
        SourceStatus.ACCEPTED: TargetStatus.ASSIGNED,
        SourceStatus.DONE: TargetStatus.RESOLVED,
        SourceStatus.DUPLICATE: TargetStatus.CLOSED,
        SourceStatus.FIXED: TargetStatus.RESOLVED,
        SourceStatus.INVALID: TargetStatus.CLOSED,
        SourceStatus.NEW: TargetStatus.NEW,
        SourceStatus.STARTED: TargetStatus.ASSIGNED,
        SourceStatus.VERIFIED: TargetStatus.VERIFIED,
        SourceStatus.WONT_FIX: TargetStatus.CLOSED,
    }

    STATUS_TO_SOURCE: Dict[str, str] = {
        TargetStatus.ASSIGNED: SourceStatus.ACCEPTED,
        TargetStatus.CLOSED: SourceStatus.FIXED,
        TargetStatus.NEW: SourceStatus.NEW,
        TargetStatus.RESOLVED: SourceStatus.FIXED,
        TargetStatus.VERIFIED: SourceStatus.VERIFIED,
    }

    PRIORITY_TO_TARGET: Dict[str, TargetPriority] = {
        SourcePriority.UNSET: TargetPriority.NONE,
        SourcePriority.LOW: TargetPriority.LOW,
        SourcePriority.MEDIUM: TargetPriority.MEDIUM,
        SourcePriority.HIGH: TargetPriority.HIGH,
        SourcePriority.CRITICAL: TargetPriority.VERY_HIGH,
    }

    PRIORITY_TO_SOURCE: Dict[TargetPriority, str] = {
        TargetPriority.NONE: SourcePriority.UNSET,
        TargetPriority.VERY_LOW: SourcePriority.LOW,
        TargetPriority.LOW: SourcePriority.LOW,
        TargetPriority.MEDIUM: SourcePriority.MEDIUM,
        TargetPriority.HIGH: SourcePriority.HIGH,
        TargetPriority.VERY_HIGH: SourcePriority.CRITICAL,
    }

    # Hansoft requires some priority on every task.
    DEFAULT_TARGET_PRIORITY = TargetPriority.MEDIUM

    def status_to_target(self, status: str) -> Optional[str]:
        return self.STATUS_TO_TARGET.get(status)

    def status_to_source(self, status: str) -> Optional[str]:
        return self.STATUS_TO_SOURCE.get(status)

    def priority_to_target(self, priority: str) -> Optional[TargetPriority]:
        return self.PRIORITY_TO_TARGET.get(priority)

    def priority_to_source(self, priority: int) -> Optional[str]:
        try:
            return self.PRIORITY_TO_SOURCE.get(TargetPriority(priority))
        except ValueError:
            return None

    def expected_priority(self, priority: str) -> TargetPriority:
        """Translated priority, or the medium default when the value is unknown."""
        translated = self.priority_to_target(priority)
        return self.DEFAULT_TARGET_PRIORITY if translated is None else translated
