"""
Supabase Service — Shared async client for chart metadata and source tables.

The dashboard reads from two kinds of tables on the same instance: the
`dashboard`/`chart` metadata tables and whatever source table each chart
row points at.
"""

import logging
from typing import Any

from supabase import acreate_client, AsyncClient

from chartboard.config import settings

logger = logging.getLogger(__name__)

_client: AsyncClient | None = None


async def get_supabase_client() -> AsyncClient:
    """Get or lazily create the async Supabase client."""
    global _client
    if _client is None:
        try:
            _client = await acreate_client(
                settings.supabase_url, settings.supabase_service_key
            )
        except Exception as e:
            logger.error("Failed to create Supabase client: %s", e)
            raise
        logger.info("Supabase client ready for %s", settings.supabase_url)
    return _client


async def close_supabase() -> None:
    """Forget the client (call on shutdown)."""
    global _client
    _client = None


async def fetch_rows(query: Any) -> list[dict[str, Any]]:
    """Execute a query builder and return its rows (empty list on no data)."""
    result = await query.execute()
    return list(result.data or [])


async def fetch_first_or_none(query: Any) -> dict[str, Any] | None:
    """Execute query limited to one row and return it, or None."""
    rows = await fetch_rows(query.limit(1))
    return rows[0] if rows else None
