"""Mapping of Monorail assignee emails to Hansoft resources"""
from typing import Any, Dict, Iterable, Optional, Tuple


def alternative_email(email: str, domains: Tuple[str, str]) -> str:
    """Swap the email's domain with the other one of the pair.

    Emails outside both domains are returned unchanged.
    """
    name, sep, domain = email.rpartition("@")
    if not sep or not name:
        return email
    first, second = domains
    if domain == first:
        return f"{name}@{second}"
    if domain == second:
        return f"{name}@{first}"
    return email


class IdentityResolver:
    """Email -> resource lookup that accepts either domain of the organisation.

    Lookups are exact and case-sensitive. When two resources register the same
    address, the last one enumerated wins.
    """

    def __init__(self, domains: Tuple[str, str]):
        self.domains = domains
        self._by_email: Dict[str, Any] = {}

    @classmethod
    def from_resources(cls, resources: Iterable[Any], domains: Tuple[str, str]) -> "IdentityResolver":
        resolver = cls(domains)
        for resource in resources:
            resolver.register(resource.email(), resource)
        return resolver

    def register(self, email: str, resource: Any) -> None:
        if not email:
            return
        self._by_email[email] = resource
        self._by_email[alternative_email(email, self.domains)] = resource

    def resolve(self, email: str) -> Optional[Any]:
        """Return the resource registered for the email, or None."""
        if not email:
            return None
        return self._by_email.get(email)

    def __len__(self) -> int:
        return len(self._by_email)
