"""Issue synchronization service"""

import logging
from typing import Any, Dict, List, Optional

from tasksync.config import Settings, settings as default_settings
from tasksync.exceptions import CatalogError
from tasksync.models.records import SourceRecord, TargetRecord
from tasksync.services.catalog import ReferenceCatalog
from tasksync.services.correlation import CorrelationIndex, CorrelationKeyCodec
from tasksync.services.differ import Differ
from tasksync.services.identity import IdentityResolver
from tasksync.services.upserter import Upserter
from tasksync.services.vocabulary import VocabularyTranslator

logger = logging.getLogger(__name__)


class SyncService:
    """One reconciliation run of a Monorail project into a Hansoft project.

    Mirrors issues one way, from the source into the target. Tasks that do not
    link to a source issue are never touched. All lookup tables belong to this
    instance and are rebuilt by every ``run()``.
    """

    def __init__(
        self,
        source: Any,
        repository: Any,
        settings: Optional[Settings] = None,
        *,
        dry_run: Optional[bool] = None,
    ):
        self.source = source
        self.repository = repository
        self.settings = settings or default_settings
        self.dry_run = self.settings.dry_run if dry_run is None else dry_run
        self.codec = CorrelationKeyCodec(self.settings.resolved_correlation_prefix())
        self.translator = VocabularyTranslator()

        self.resolver: Optional[IdentityResolver] = None
        self.catalog: Optional[ReferenceCatalog] = None
        self.index: Optional[CorrelationIndex] = None
        self.differ: Optional[Differ] = None
        self.upserter: Optional[Upserter] = None

    @staticmethod
    def _new_stats() -> Dict[str, Any]:
        return {
            "created": 0,
            "updated": 0,
            "in_sync": 0,
            "failed": 0,
            "write_errors": 0,
            "warnings": [],
        }

    @staticmethod
    def _enumerate(what: str, fn) -> List[Any]:
        """Fully enumerate one collection; any failure aborts the run."""
        try:
            return list(fn())
        except Exception as e:
            raise CatalogError(f"Failed to fetch {what}: {e}") from e

    def _build_lookups(self) -> None:
        """Build the resolver and catalog from a full read of the target project."""
        users = self._enumerate("hansoft users", self.repository.list_users)
        milestones = self._enumerate("hansoft milestones", self.repository.list_milestones)
        sprints = self._enumerate("hansoft sprints", self.repository.list_sprints)

        domains = self.settings.email_domain_pair()
        try:
            self.resolver = IdentityResolver.from_resources(users, domains)
        except Exception as e:
            raise CatalogError(f"Failed to read hansoft user emails: {e}") from e
        try:
            self.catalog = ReferenceCatalog.from_handles(milestones, sprints)
        except Exception as e:
            raise CatalogError(f"Failed to read hansoft milestone or sprint names: {e}") from e

        self.differ = Differ(self.translator, self.resolver, self.catalog)
        self.upserter = Upserter(
            self.repository, self.codec, self.translator, self.resolver, self.catalog
        )

    def _build_index(self) -> None:
        self.index = CorrelationIndex(self.codec)
        tasks = self._enumerate("hansoft tasks", self.repository.list_tasks)
        self.index.index_target_tasks(tasks)
        issues = self._enumerate("monorail issues", self.source.list_issues)
        self.index.index_source_records(issues)
        logger.info(
            f"Loaded {len(self.index.source_by_id)} monorail issues and "
            f"{len(self.index.target_by_id)} linked hansoft tasks"
        )

    def run(self) -> Dict[str, Any]:
        """Reconcile every source issue into the target project.

        Raises CatalogError when either store cannot be enumerated. Everything
        else is reported in the returned stats and the run carries on.
        """
        stats = self._new_stats()
        logger.info(f"Starting sync of {self.codec.prefix}* into hansoft project")

        self._build_lookups()
        self._build_index()

        for issue_id, source in self.index.source_by_id.items():
            self._sync_issue(issue_id, source, stats)

        stats["write_errors"] = self.upserter.failed_writes
        stats["warnings"] = self.index.warnings + self.upserter.warnings
        logger.info(
            "Sync completed: "
            + ", ".join(f"{k}={v}" for k, v in stats.items() if k != "warnings")
            + f", warnings={len(stats['warnings'])}"
        )
        return stats

    def _sync_issue(self, issue_id: int, source: SourceRecord, stats: Dict[str, Any]) -> None:
        key = self.codec.encode(issue_id)
        target: Optional[TargetRecord] = self.index.target(issue_id)

        if target is not None:
            diffs = self.differ.diff(target, source)
            if not diffs:
                stats["in_sync"] += 1
                return
            changed = ", ".join(sorted(d.value for d in diffs))
            logger.info(f"Updating hansoft task {key}. Diffs: {changed}")
        else:
            logger.info(f"Creating hansoft task {key}: {source.summary}")

        if self.dry_run:
            stats["updated" if target is not None else "created"] += 1
            return

        result = self.upserter.upsert(target, source)
        if result is None:
            stats["failed"] += 1
            return
        if target is None:
            self.index.link(issue_id, result)
            stats["created"] += 1
        else:
            stats["updated"] += 1
