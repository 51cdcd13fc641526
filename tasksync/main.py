"""Command line entry point"""

import argparse
import importlib
import logging
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from tasksync.config import Settings, settings as default_settings
from tasksync.exceptions import ConfigurationError, SyncError
from tasksync.models.credentials import TargetCredentials
from tasksync.scheduler import SyncScheduler
from tasksync.services.monorail_client import MonorailClient
from tasksync.services.session_worker import SerializedTaskRepository, SessionWorker
from tasksync.services.sync_service import SyncService

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_session_factory(path: Optional[str]) -> Callable[..., Any]:
    """Resolve a ``package.module:callable`` import path"""
    if not path:
        raise ConfigurationError("TARGET_SESSION_FACTORY is not set")
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"TARGET_SESSION_FACTORY must look like 'module:callable', got '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Failed to import '{module_name}': {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigurationError(f"'{path}' is not callable")
    return factory


def find_project(session: Any, name: str) -> Any:
    """Return the session's project whose name matches case-insensitively"""
    for project in session.projects():
        if project.name().lower() == name.lower():
            return project
    raise SyncError(f"Couldn't find the {name} hansoft project")


def sync_once(settings: Settings, dry_run: Optional[bool] = None) -> Dict[str, Any]:
    """Open both stores, run one sync and close the target session"""
    credentials = TargetCredentials.load(settings.target_auth_file)
    factory = load_session_factory(settings.target_session_factory)

    client = MonorailClient(settings.monorail_host, token=settings.monorail_token)
    source = client.project(settings.source_project, estimate_field=settings.monorail_estimate_field)

    # The session is opened, used and closed on the worker thread only.
    worker = SessionWorker(max_pending=settings.session_queue_size)
    try:
        session = worker.call(factory, settings, credentials)
        try:
            project = worker.call(find_project, session, settings.target_project)
            repository = SerializedTaskRepository(project, worker)
            return SyncService(source, repository, settings, dry_run=dry_run).run()
        finally:
            worker.call(session.close)
    finally:
        worker.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mirror Monorail issues into a Hansoft project backlog",
    )
    parser.add_argument("--once", action="store_true", help="Run a single sync and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Minutes between scheduled syncs (default: SYNC_INTERVAL_MINUTES)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Log the differences without writing to Hansoft",
    )
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or default_settings
    setup_logging(settings.log_level)

    if args.once:
        try:
            sync_once(settings, dry_run=args.dry_run)
        except Exception as e:
            logger.error(f"Sync failed: {e}")
            return 1
        return 0

    interval = args.interval if args.interval is not None else settings.sync_interval_minutes
    if interval < 1:
        logger.error(f"Sync interval must be at least one minute, got {interval}")
        return 2

    scheduler = SyncScheduler(lambda: sync_once(settings, dry_run=args.dry_run))
    scheduler.start(interval)
    stop = threading.Event()
    try:
        stop.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
