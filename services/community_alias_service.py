"""
Community alias service.

Learns key -> spec field mappings from reviewers. When someone maps an
unmatched key by hand, the mapping is upserted (usage_count + 1); once a
mapping is used often enough it is fed back into the alias index.

The store is optional. Every public method degrades to an empty result or
a no-op when Supabase is unset or failing.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from config.database import ALIAS_TABLE, ALIAS_UPSERT_RPC
from config.settings import settings
from exceptions import AliasStoreError
from models.smart_paste import CommunityAlias

logger = structlog.get_logger(__name__)


class CommunityAliasService:
    """
    Read and record community-learned aliases.

    fetch() and record() never raise; failures are logged as warnings.
    """

    def __init__(self, client=None):
        self._client = client
        self.table = ALIAS_TABLE

    @property
    def db(self):
        if self._client is None:
            try:
                self._client = get_supabase_client()
            except Exception as e:
                raise AliasStoreError("Alias store connection failed", {"error": str(e)}) from e
        return self._client

    # ===================
    # READ OPERATIONS
    # ===================

    def _select_aliases(self, min_usage: int) -> list[dict]:
        client = self.db
        if client is None:
            return []
        try:
            response = (
                client.table(self.table)
                .select("source_key, spec_name, usage_count")
                .gte("usage_count", min_usage)
                .order("usage_count", desc=True)
                .execute()
            )
        except Exception as e:
            raise AliasStoreError("Alias select failed", {"error": str(e)}) from e
        return response.data or []

    def fetch(self, min_usage: Optional[int] = None) -> dict[str, CommunityAlias]:
        """
        Get aliases used at least min_usage times.

        Args:
            min_usage: Usage threshold (default from settings)

        Returns:
            source_key -> CommunityAlias, most used first; {} on any failure
        """
        if min_usage is None:
            min_usage = settings.community_alias_min_usage

        try:
            rows = self._select_aliases(min_usage)
        except AliasStoreError as e:
            logger.warning("community_aliases_unavailable", error=e.message, details=e.details)
            return {}

        aliases: dict[str, CommunityAlias] = {}
        for row in rows:
            source_key = row.get("source_key")
            spec_name = row.get("spec_name")
            if not source_key or not spec_name or source_key in aliases:
                continue
            aliases[source_key] = CommunityAlias(
                spec_name=spec_name,
                usage_count=row.get("usage_count") or 0,
            )

        logger.info("community_aliases_fetched", count=len(aliases), min_usage=min_usage)
        return aliases

    # ===================
    # WRITE OPERATIONS
    # ===================

    def record(self, source_key: str, spec_name: str, category: Optional[str] = None) -> None:
        """
        Record a manual mapping (upsert, increments usage_count).

        Args:
            source_key: Key as it appeared in the pasted text
            spec_name: Spec field the reviewer mapped it to
            category: Item category, for context
        """
        key = (source_key or "").lower().strip()
        if not key or not spec_name:
            return

        try:
            client = self.db
            if client is None:
                return
            client.rpc(ALIAS_UPSERT_RPC, {
                "p_source_key": key,
                "p_spec_name": spec_name,
                "p_category": category or None,
            }).execute()
            logger.info("community_alias_recorded", source_key=key, spec_name=spec_name)

        except AliasStoreError as e:
            logger.warning("community_alias_record_unavailable", error=e.message, details=e.details)
        except Exception as e:
            logger.warning("community_alias_record_failed", source_key=key, error=str(e))


# Singleton instance
_community_alias_service: Optional[CommunityAliasService] = None


def get_community_alias_service() -> CommunityAliasService:
    """Get or create CommunityAliasService instance."""
    global _community_alias_service
    if _community_alias_service is None:
        _community_alias_service = CommunityAliasService()
    return _community_alias_service
