"""
User management service: profiles within the caller's organization.

Accounts themselves belong to the identity provider; a profile attaches an
existing account to an organization with a role.
"""

from __future__ import annotations

import uuid

import structlog

from clinical_portal.core.datasource import DataSource, Row, attach
from clinical_portal.core.errors import IdentityProviderError, PortalError, downstream
from clinical_portal.core.identity import IdentityProvider
from clinical_portal.core.policy import (
    Caller,
    ensure_admin,
    ensure_profile_delete_allowed,
    ensure_profile_update_allowed,
    ensure_same_organization,
    ensure_valid_role,
)
from clinical_portal_shared.schemas.users import UserCreateRequest, UserUpdateRequest

log = structlog.get_logger()


def _present(row: Row) -> dict:
    return {
        "id": row["id"],
        "role": row["role"],
        "display_name": row.get("display_name"),
        "organization_id": row["organization_id"],
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
        "organizations": row.get("organizations"),
    }


async def _with_organizations(datasource: DataSource, rows: list[Row]) -> list[Row]:
    return await attach(
        datasource, rows, table="organizations", key="organization_id", name="organizations", columns=("id", "name")
    )


async def _load(datasource: DataSource, user_id: uuid.UUID) -> Row:
    profile = await datasource.fetch_one("profiles", {"id": user_id})
    if profile is None:
        raise PortalError(404, "User not found")
    return profile


async def list_users(datasource: DataSource, caller: Caller) -> list[dict]:
    """Admins see their whole organization, everyone else only themselves."""
    if caller.is_admin:
        filters = {"organization_id": caller.organization_id}
    else:
        filters = {"id": caller.user_id}
    with downstream("Failed to fetch users"):
        rows = await datasource.select("profiles", filters=filters, order_by=("-created_at",))
        rows = await _with_organizations(datasource, rows)
    return [_present(row) for row in rows]


async def get_user(datasource: DataSource, caller: Caller, user_id: uuid.UUID) -> dict:
    if not caller.is_admin and caller.user_id != user_id:
        raise PortalError(403, "You can only view your own profile")
    profile = await _load(datasource, user_id)
    ensure_same_organization(caller, profile["organization_id"], "Cannot view users from different organizations")
    [profile] = await _with_organizations(datasource, [profile])
    return _present(profile)


async def create_user(
    datasource: DataSource,
    identity: IdentityProvider,
    caller: Caller,
    req: UserCreateRequest,
) -> dict:
    """Create a profile in the admin's organization for an already registered account."""
    if not req.email or not req.role:
        raise PortalError(400, "Email and role are required")
    ensure_valid_role(req.role)
    ensure_admin(caller, "Only admins can create users")

    try:
        account = await identity.find_user_by_email(req.email)
    except IdentityProviderError as exc:
        log.error("user.lookup_failed", email=req.email, reason=exc.message)
        raise PortalError(400, "Failed to validate user", error=exc.message)
    if account is None:
        raise PortalError(
            400, "User must be registered in the system first. Please have them create an account."
        )

    with downstream("Failed to create user profile"):
        result = await datasource.rpc(
            "create_profile_and_assignments",
            {
                "admin_user_id": caller.user_id,
                "new_user_auth_id": account.id,
                "new_user_role": req.role,
                "new_user_display_name": req.display_name or account.user_metadata.get("full_name"),
                "selected_clinical_trial_id": req.clinical_trial_id,
            },
        )
    if not result or not result.get("success"):
        error = (result or {}).get("error")
        log.info("user.create_rejected", email=req.email, reason=error)
        raise PortalError(400, "Failed to create user profile", error=error)

    profile = await _load(datasource, account.id)
    log.info(
        "user.created",
        user_id=str(account.id),
        org_id=str(caller.organization_id),
        role=req.role,
        trial_assigned=bool(result.get("trial_assigned")),
    )
    return {
        **_present(profile),
        "email": account.email,
        "trial_assigned": bool(result.get("trial_assigned")),
    }


async def update_user(
    datasource: DataSource, caller: Caller, user_id: uuid.UUID, req: UserUpdateRequest
) -> dict:
    changes = req.provided()
    ensure_profile_update_allowed(caller, user_id, changes_role=changes.get("role") is not None)

    profile = await _load(datasource, user_id)
    if caller.is_admin:
        ensure_same_organization(
            caller, profile["organization_id"], "Cannot update users from different organizations"
        )
    if changes.get("role") is not None:
        ensure_valid_role(changes["role"])

    values = {key: changes[key] for key in ("display_name", "role") if changes.get(key) is not None}
    if values:
        with downstream("Failed to update user"):
            [profile] = await datasource.update("profiles", {"id": user_id}, values)
        log.info("user.updated", user_id=str(user_id), org_id=str(profile["organization_id"]), fields=sorted(values))
    return _present(profile)


async def delete_user(datasource: DataSource, caller: Caller, user_id: uuid.UUID) -> None:
    """Remove a profile (and its trial assignments). The provider account is kept."""
    ensure_profile_delete_allowed(caller, user_id)
    profile = await _load(datasource, user_id)
    ensure_same_organization(caller, profile["organization_id"], "Cannot delete users from different organizations")

    with downstream("Failed to delete user"):
        await datasource.delete("profiles", {"id": user_id})
    log.info("user.deleted", user_id=str(user_id), org_id=str(caller.organization_id))
