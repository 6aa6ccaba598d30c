"""
Requester identity and the ownership policy applied to uploads and analyses.
"""
from __future__ import annotations

from dataclasses import dataclass

from ..errors import ForbiddenError


@dataclass(frozen=True)
class Requester:
    """The authenticated caller of a request."""
    user_id: str
    username: str | None = None


def is_owner(owner_id: str, requester: Requester) -> bool:
    return str(owner_id) == str(requester.user_id)


def ensure_owner(owner_id: str, requester: Requester, action: str, resource: str) -> None:
    """Raise ForbiddenError unless the requester owns the resource."""
    if not is_owner(owner_id, requester):
        raise ForbiddenError(f"Not authorized to {action} this {resource}")
