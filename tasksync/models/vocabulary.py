"""Status and priority vocabularies of both stores"""
import enum


class SourceStatus:
    """Issue statuses known to the Monorail tracker"""

    ACCEPTED = "Accepted"
    DONE = "Done"
    DUPLICATE = "Duplicate"
    FIXED = "Fixed"
    INVALID = "Invalid"
    NEW = "New"
    STARTED = "Started"
    VERIFIED = "Verified"
    WONT_FIX = "WontFix"

    CLOSED = frozenset({DONE, DUPLICATE, FIXED, INVALID, VERIFIED, WONT_FIX})

    @classmethod
    def is_closed(cls, status: str) -> bool:
        return status in cls.CLOSED


class SourcePriority:
    """Issue priorities carried as ``Priority-<value>`` labels"""

    UNSET = ""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TargetStatus:
    """Workflow statuses of the Hansoft backlog"""

    NEW = "New"
    ASSIGNED = "Assigned"
    RESOLVED = "Resolved"
    VERIFIED = "Verified"
    CLOSED = "Closed"


class TargetPriority(enum.IntEnum):
    """Agile priority of a Hansoft task"""

    NONE = 1
    VERY_LOW = 2
    LOW = 3
    MEDIUM = 4
    HIGH = 5
    VERY_HIGH = 6
