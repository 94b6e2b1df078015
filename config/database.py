"""
Database connection management.

Provides the Supabase client used by the community alias store. The store
is optional: without SUPABASE_URL/SUPABASE_KEY there is no client.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)

ALIAS_TABLE = "smart_paste_aliases"
ALIAS_UPSERT_RPC = "upsert_smart_paste_alias"


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Optional[Client]:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call reset_connection() to reconnect.

    Returns:
        Client, or None when Supabase is not configured

    Raises:
        ConnectionError: If the client cannot be created
    """
    if not settings.alias_store_configured:
        logger.info("supabase_not_configured", feature="community_aliases")
        return None

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info(
            "supabase_connected",
            status="success"
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


def check_connection() -> dict:
    """
    Check alias store health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()
        if client is None:
            return {"status": "disabled"}

        aliases = client.table(ALIAS_TABLE).select("source_key", count="exact").limit(1).execute()

        return {
            "status": "healthy",
            "aliases_count": aliases.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached database connection.

    Call this if connection becomes stale or after config changes.
    """
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
