"""Name lookup of Hansoft milestones and sprints"""
import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class ReferenceCatalog:
    """Read-only snapshot of milestone and sprint handles, keyed by display name.

    Built once per run. Duplicate names collide and the last handle wins.
    """

    def __init__(self, milestones: Dict[str, Any], sprints: Dict[str, Any]):
        self._milestones = milestones
        self._sprints = sprints

    @staticmethod
    def _index(handles: Iterable[Any], kind: str) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for handle in handles:
            name = handle.name()
            if name in out:
                logger.debug(f"Duplicate hansoft {kind} name '{name}', keeping the last one")
            out[name] = handle
        return out

    @classmethod
    def from_handles(cls, milestones: Iterable[Any], sprints: Iterable[Any]) -> "ReferenceCatalog":
        """Index handles by ``name()``. A failing name read propagates."""
        return cls(cls._index(milestones, "milestone"), cls._index(sprints, "sprint"))

    def lookup_milestone(self, name: str) -> Optional[Any]:
        if not name:
            return None
        return self._milestones.get(name)

    def lookup_sprint(self, name: str) -> Optional[Any]:
        if not name:
            return None
        return self._sprints.get(name)
