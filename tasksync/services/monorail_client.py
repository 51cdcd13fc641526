"""Monorail v3 API client wrapper"""
import json
import logging
import math
from datetime import timedelta
from typing import Any, Dict, List, Optional

import requests

from tasksync.exceptions import SyncError
from tasksync.models.records import SourceRecord
from tasksync.models.vocabulary import SourcePriority

logger = logging.getLogger(__name__)

# pRPC prefixes JSON responses with this guard against cross-site script inclusion.
_XSSI_PREFIX = ")]}'"


class MonorailClient:
    """Wrapper for Monorail pRPC operations (JSON encoding over HTTPS)"""

    def __init__(
        self,
        host: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 60.0,
    ):
        """Initialize Monorail client.

        Authentication is the caller's business: pass a bearer token, or a
        session that already carries credentials.
        """
        self.host = host
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def call(self, service: str, method: str, request: Dict[str, Any]) -> Dict[str, Any]:
        """Invoke ``monorail.v3.<service>/<method>`` and return the decoded response."""
        url = f"https://{self.host}/prpc/monorail.v3.{service}/{method}"
        try:
            response = self.session.post(url, headers=self.headers, json=request, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"{service}.{method} failed: {e}")
            raise SyncError(f"{method} returned {e}") from e

        body = response.text
        if body.startswith(_XSSI_PREFIX):
            body = body[len(_XSSI_PREFIX):]
        try:
            return json.loads(body) if body.strip() else {}
        except ValueError as e:
            raise SyncError(f"{method} returned malformed JSON: {e}") from e

    def project(self, name: str, estimate_field: str = "EstimateTime") -> "MonorailProject":
        """Open a project, learning its custom field definitions"""
        monorail_name = f"projects/{name}"
        response = self.call(
            "Frontend", "GatherProjectEnvironment", {"parent": monorail_name}
        )
        field_defs = {field.get("name", ""): field for field in response.get("fields", [])}
        logger.debug(f"Project {name} has {len(field_defs)} field definitions")
        return MonorailProject(self, name, field_defs, estimate_field=estimate_field)


class MonorailProject:
    """One Monorail project; the IssueSource of a sync run"""

    def __init__(
        self,
        client: MonorailClient,
        name: str,
        field_defs: Dict[str, Dict[str, Any]],
        *,
        estimate_field: str = "EstimateTime",
    ):
        self.client = client
        self._name = name
        self.monorail_name = f"projects/{name}"
        self.field_defs = field_defs
        self.estimate_field = estimate_field

    def name(self) -> str:
        return self._name

    def _estimated_hours(self, field_values: List[Dict[str, Any]]) -> float:
        for value in field_values:
            definition = self.field_defs.get(value.get("field", ""))
            if definition and definition.get("displayName") == self.estimate_field:
                try:
                    hours = float(value.get("value", ""))
                except (TypeError, ValueError):
                    hours = math.nan
                if not math.isfinite(hours) or hours < 0:
                    logger.debug(f"Ignoring unusable estimate '{value.get('value')}'")
                    return 0.0
                return hours
        return 0.0

    @staticmethod
    def _parse_labels(labels: List[Dict[str, Any]]) -> Dict[str, str]:
        """Extract Priority/Milestone/Sprint from ``Key-Value`` labels."""
        out = {"priority": SourcePriority.MEDIUM, "milestone": "", "sprint": ""}
        for label in labels:
            parts = label.get("label", "").split("-")
            if len(parts) != 2:
                continue
            key, value = parts
            if key == "Priority":
                out["priority"] = value
            elif key == "Milestone":
                out["milestone"] = value
            elif key == "Sprint":
                out["sprint"] = value
        return out

    def _issue_id(self, name: str) -> int:
        prefix = f"{self.monorail_name}/issues/"
        if not name.startswith(prefix):
            raise SyncError(f"Expected issue '{name}' to have '{prefix}' prefix")
        try:
            return int(name[len(prefix):])
        except ValueError as e:
            raise SyncError(f"Failed to parse issue ID from '{name[len(prefix):]}'") from e

    def _search_all(self) -> List[Dict[str, Any]]:
        request: Dict[str, Any] = {"projects": [self.monorail_name]}
        items: List[Dict[str, Any]] = []
        while True:
            response = self.client.call("Issues", "SearchIssues", request)
            page = response.get("issues", [])
            logger.info(f"issues returned: {len(page)}")
            items.extend(page)
            token = response.get("nextPageToken", "")
            if not token:
                return items
            request["pageToken"] = token

    def _emails(self, user_names: List[str]) -> Dict[str, str]:
        if not user_names:
            return {}
        response = self.client.call("Users", "BatchGetUsers", {"names": user_names})
        return {
            user.get("name", ""): user.get("email", "")
            for user in response.get("users", [])
        }

    def list_issues(self) -> List[SourceRecord]:
        """Get all issues of the project, assignees resolved to email addresses"""
        parsed = []
        owners: Dict[str, None] = {}
        for item in self._search_all():
            issue_id = self._issue_id(item.get("name", ""))
            labels = self._parse_labels(item.get("labels", []))
            owner = (item.get("owner") or {}).get("user", "")
            if owner:
                owners[owner] = None
            parsed.append((issue_id, item, labels, owner))

        emails = self._emails(list(owners))

        out = []
        for issue_id, item, labels, owner in parsed:
            assignee = ""
            if owner:
                assignee = emails.get(owner, "")
                if not assignee:
                    raise SyncError(f"Couldn't resolve email address of '{owner}'")
            out.append(
                SourceRecord(
                    id=issue_id,
                    summary=item.get("summary", ""),
                    assignee=assignee,
                    status=(item.get("status") or {}).get("status", ""),
                    estimated_duration=timedelta(
                        hours=self._estimated_hours(item.get("fieldValues", []))
                    ),
                    priority=labels["priority"],
                    milestone=labels["milestone"],
                    sprint=labels["sprint"],
                )
            )
        return out
