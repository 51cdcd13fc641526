"""Contracts of the two stores the sync engine talks to.

The engine never depends on a concrete client. It consumes:

1. IssueSource: the Monorail side, returning fully materialized issues
2. TaskRepository: one Hansoft project, enumerating and creating tasks
3. Task: a single Hansoft task whose fields are read and written one at a time

Every getter and setter on a Task may raise independently. Enumeration methods
raising abort the run; per-field failures are reported and skipped.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from .models import SourceRecord, TargetPriority


class IssueSource(Protocol):
    """Protocol for reading issues from the source tracker."""

    def name(self) -> str:
        ...

    def list_issues(self) -> list[SourceRecord]:
        """Return every issue of the project.

        Pagination is handled by the implementation; the engine sees the whole
        ordered sequence.
        """
        ...


class Resource(Protocol):
    """A user of the target store."""

    def name(self) -> str:
        ...

    def email(self) -> str:
        ...


class NamedHandle(Protocol):
    """A milestone or sprint of the target store."""

    def name(self) -> str:
        ...


class Task(Protocol):
    """A task in the target project's backlog."""

    def hyperlink(self) -> str:
        """Return the hyperlink field, which carries the correlation key."""
        ...

    def description(self) -> str:
        ...

    def assignee(self) -> Optional[Resource]:
        ...

    def status(self) -> Optional[str]:
        ...

    def estimated_duration(self) -> timedelta:
        ...

    def priority(self) -> TargetPriority:
        ...

    def milestone(self) -> Optional[NamedHandle]:
        ...

    def sprint(self) -> Optional[NamedHandle]:
        ...

    def set_hyperlink(self, value: str) -> None:
        ...

    def set_description(self, value: str) -> None:
        ...

    def set_assignee(self, value: Optional[Resource]) -> None:
        ...

    def set_status(self, value: str) -> None:
        ...

    def set_estimated_duration(self, value: timedelta) -> None:
        ...

    def set_priority(self, value: TargetPriority) -> None:
        ...

    def set_milestone(self, value: Optional[NamedHandle]) -> None:
        ...

    def set_sprint(self, value: Optional[NamedHandle]) -> None:
        ...


class TaskRepository(Protocol):
    """Protocol for one project of the target store.

    Calls against a repository must all come from one thread; see
    ``tasksync.services.session_worker`` for the serializing wrapper.
    """

    def name(self) -> str:
        ...

    def list_tasks(self) -> Iterable[Task]:
        ...

    def list_users(self) -> Iterable[Resource]:
        ...

    def list_milestones(self) -> Iterable[NamedHandle]:
        ...

    def list_sprints(self) -> Iterable[NamedHandle]:
        ...

    def create_task(self) -> Task:
        """Create an empty task in the backlog and return its handle."""
        ...


class TargetSession(Protocol):
    """An open connection to the target store."""

    def projects(self) -> Iterable[TaskRepository]:
        ...

    def close(self) -> Any:
        ...
