"""Services"""

from tasksync.services.monorail_client import MonorailClient, MonorailProject
from tasksync.services.session_worker import SerializedTaskRepository, SessionWorker
from tasksync.services.sync_service import SyncService

__all__ = [
    "MonorailClient",
    "MonorailProject",
    "SerializedTaskRepository",
    "SessionWorker",
    "SyncService",
]
