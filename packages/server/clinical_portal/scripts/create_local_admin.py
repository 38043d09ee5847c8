"""
Bootstrap an organization and its first admin profile.

Admins create every other profile through the API, so the first one has to
come from here. The account must exist at the identity provider; pass
--password to sign it up first.

    python -m clinical_portal.scripts.create_local_admin --email a@b.org --organization "Acme Research"
"""

import argparse
import asyncio
from typing import Optional

import structlog

from clinical_portal.core.backends import supabase_identity, get_mock_backend
from clinical_portal.core.config import get_settings
from clinical_portal.core.database import get_session_context
from clinical_portal.core.datasource import DataSource, LiveDataSource
from clinical_portal.core.identity import IdentityProvider
from clinical_portal.core.logging import configure_logging

log = structlog.get_logger()


async def create_admin(
    datasource: DataSource,
    identity: IdentityProvider,
    email: str,
    organization: str,
    *,
    password: Optional[str] = None,
    display_name: Optional[str] = None,
) -> dict:
    """Ensure the organization, the account and an admin profile exist. Returns the profile."""
    org = await datasource.fetch_one("organizations", {"name": organization})
    if org is None:
        org = await datasource.insert("organizations", {"name": organization})
        log.info("admin_script.organization_created", organization=organization)

    account = await identity.find_user_by_email(email)
    if account is None:
        if not password:
            raise SystemExit(f"No account for {email}; pass --password to register it")
        account = await identity.sign_up(email, password, {"full_name": display_name} if display_name else {})
        log.info("admin_script.account_registered", email=email)

    profile = await datasource.fetch_one("profiles", {"id": account.id})
    if profile is None:
        profile = await datasource.insert(
            "profiles",
            {
                "id": account.id,
                "organization_id": org["id"],
                "role": "admin",
                "display_name": display_name or email.split("@")[0],
            },
        )
        log.info("admin_script.profile_created", email=email, organization=organization)
    elif profile["organization_id"] != org["id"]:
        raise SystemExit(f"{email} already belongs to another organization")
    elif profile["role"] != "admin":
        [profile] = await datasource.update("profiles", {"id": account.id}, {"role": "admin"})
        log.info("admin_script.promoted", email=email)
    else:
        log.info("admin_script.already_admin", email=email)
    return profile


async def main(args: argparse.Namespace) -> None:
    settings = get_settings()
    if settings.data_source == "mock":
        datasource, identity = get_mock_backend()
        await create_admin(
            datasource, identity, args.email, args.organization, password=args.password, display_name=args.name
        )
        return

    async with get_session_context() as session:
        await create_admin(
            LiveDataSource(session),
            supabase_identity(),
            args.email,
            args.organization,
            password=args.password,
            display_name=args.name,
        )


def cli() -> None:
    parser = argparse.ArgumentParser(description="Create an organization admin.")
    parser.add_argument("--email", required=True, help="Email address of the admin account")
    parser.add_argument("--organization", required=True, help="Organization name (created if missing)")
    parser.add_argument("--password", help="Register the account with this password if it does not exist")
    parser.add_argument("--name", help="Display name for the profile")

    configure_logging(get_settings().log_level, "console")
    asyncio.run(main(parser.parse_args()))


if __name__ == "__main__":
    cli()
