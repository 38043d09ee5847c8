"""
Authorization policy.

Pure rules over the authenticated ``Caller``. Each ``ensure_*`` function
returns nothing when the action is allowed and raises ``PortalError`` with
the client-facing message when it is not. Organization scoping inside the
database is still enforced by row-level security; these rules decide the
per-request branches (admin, self, cross-organization).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from clinical_portal.core.datasource import DataSource
from clinical_portal.core.errors import PortalError

ADMIN = "admin"
ROLES = ("admin", "user", "doctor")

TRIAL_ACCESS_DENIED = "Access denied: You do not have access to this clinical trial"


@dataclass(frozen=True)
class Caller:
    """The authenticated user behind a request, with their profile's tenant and role."""

    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    user_metadata: dict[str, Any] = field(default_factory=dict)
    token_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    @property
    def name(self) -> Optional[str]:
        return self.display_name or self.user_metadata.get("full_name") or self.email


def ensure_admin(caller: Caller, message: str = "Admin access required") -> None:
    if not caller.is_admin:
        raise PortalError(403, message)


def ensure_same_organization(caller: Caller, organization_id: Optional[uuid.UUID], message: str) -> None:
    if organization_id != caller.organization_id:
        raise PortalError(403, message)


def ensure_valid_role(role: str) -> None:
    if role not in ROLES:
        raise PortalError(400, "Invalid role. Must be: admin, user, or doctor")


def ensure_profile_update_allowed(caller: Caller, target_id: uuid.UUID, *, changes_role: bool) -> None:
    """Self-service edits for everyone, role changes and edits of others for admins."""
    if not caller.is_admin and caller.user_id != target_id:
        raise PortalError(403, "You can only update your own profile")
    if changes_role and not caller.is_admin:
        raise PortalError(403, "Only admins can change user roles")


def ensure_profile_delete_allowed(caller: Caller, target_id: uuid.UUID) -> None:
    # Self-deletion is refused for every role, admins included
    if caller.user_id == target_id:
        raise PortalError(400, "Cannot delete your own account")
    if not caller.is_admin:
        raise PortalError(403, "Only admins can delete users")


def ensure_owner_or_admin(caller: Caller, owner_id: Optional[uuid.UUID], message: str) -> None:
    if caller.is_admin or (owner_id is not None and owner_id == caller.user_id):
        return
    raise PortalError(403, message)


def ensure_trial_access(trial_id: uuid.UUID, accessible: set[uuid.UUID]) -> None:
    if trial_id not in accessible:
        raise PortalError(403, TRIAL_ACCESS_DENIED)


async def accessible_trial_ids(datasource: DataSource, caller: Caller) -> set[uuid.UUID]:
    """Trials the caller may see: every trial of their organization for admins, assigned ones otherwise."""
    rows = await datasource.rpc("get_user_accessible_trials", {"user_id": caller.user_id})
    return {row["id"] if isinstance(row["id"], uuid.UUID) else uuid.UUID(str(row["id"])) for row in rows or ()}
