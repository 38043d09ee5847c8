"""
Backend selection.

``PORTAL_DATA_SOURCE=live`` wires Postgres and Supabase GoTrue; ``mock`` wires
the in-memory data source and identity provider, optionally seeded with the
demo tenant. The settings model refuses ``mock`` in production.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache

from clinical_portal.core.config import get_settings
from clinical_portal.core.database import get_session_context
from clinical_portal.core.datasource import DataSource, LiveDataSource
from clinical_portal.core.demo import seed_demo_data
from clinical_portal.core.identity import IdentityProvider, MockIdentityProvider, SupabaseIdentityProvider
from clinical_portal.core.mock_datasource import MockDataSource


@lru_cache
def get_mock_backend() -> tuple[MockDataSource, MockIdentityProvider]:
    """The process-wide in-memory backend pair."""
    datasource, identity = MockDataSource(), MockIdentityProvider()
    if get_settings().seed_demo_data:
        seed_demo_data(datasource, identity)
    return datasource, identity


@lru_cache
def supabase_identity() -> SupabaseIdentityProvider:
    settings = get_settings()
    return SupabaseIdentityProvider(
        settings.supabase_url,
        settings.supabase_key,
        timeout_s=settings.identity_timeout_seconds,
    )


async def get_datasource() -> AsyncGenerator[DataSource, None]:
    """FastAPI dependency yielding the configured data source."""
    if get_settings().data_source == "mock":
        yield get_mock_backend()[0]
        return

    async with get_session_context() as session:
        yield LiveDataSource(session)


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency returning the configured identity provider."""
    if get_settings().data_source == "mock":
        return get_mock_backend()[1]
    return supabase_identity()
