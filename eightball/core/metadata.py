"""Community metadata: cache first, directory second, never an error.

Metadata only flavors the answer pool, so every failure here degrades to
``None`` (generic answers) and is logged instead of raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from eightball.core.exceptions import DirectoryError
from eightball.core.models import CommunityMetadata, CommunityRule, RequestContext
from eightball.core.store import KeyValueStore
from eightball.tools.community_directory import CommunityDirectory


logger = logging.getLogger("eightball.metadata")

CACHE_PREFIX = "subreddit_info"
DEFAULT_CACHE_TTL = 3600
DEFAULT_TIMEOUT = 5.0


def cache_key(community_id: str) -> str:
    return f"{CACHE_PREFIX}:{community_id.lower()}"


def _first(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def normalize_rules(rules: List[Dict[str, Any]]) -> List[CommunityRule]:
    """Short name falls back to the violation reason, then to "Rule"."""

    normalized = []
    for rule in rules:
        short_name = _first(rule, "short_name", "shortName", "violation_reason", "violationReason")
        description = _first(rule, "description") or ""
        normalized.append(
            CommunityRule(short_name=str(short_name or "Rule"), description=str(description))
        )
    return normalized


def build_metadata(about: Dict[str, Any], rules: List[Dict[str, Any]]) -> CommunityMetadata:
    community_id = about["name"]
    return CommunityMetadata(
        community_id=community_id,
        display_name=about.get("display_name") or community_id,
        description=about.get("description") or None,
        subscriber_count=about.get("subscribers"),
        rules=normalize_rules(rules),
        flair_enabled=bool(about.get("user_flair_enabled")),
    )


class MetadataProvider:
    def __init__(
        self,
        store: KeyValueStore,
        directory: CommunityDirectory,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._store = store
        self._directory = directory
        self._cache_ttl = cache_ttl
        self._timeout = timeout

    async def _read_cache(self, community_id: str) -> Optional[CommunityMetadata]:
        key = cache_key(community_id)
        try:
            raw = await self._store.get(key)
        except Exception as exc:
            logger.warning("Metadata cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return CommunityMetadata.model_validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring malformed metadata cache entry %s", key)
            return None

    async def _write_cache(self, metadata: CommunityMetadata) -> None:
        key = cache_key(metadata.community_id)
        try:
            await self._store.set(
                key,
                metadata.model_dump_json(by_alias=True, exclude_none=True),
                ttl_seconds=self._cache_ttl,
            )
        except Exception as exc:
            logger.warning("Metadata cache write failed for %s: %s", key, exc)

    async def _fetch(self, community_id: str) -> CommunityMetadata:
        about, rules = await asyncio.gather(
            self._directory.current_community(community_id),
            self._directory.community_rules(community_id),
        )
        return build_metadata(about, rules)

    async def get_metadata(self, context: RequestContext) -> Optional[CommunityMetadata]:
        community_id = context.subreddit_name
        if not community_id:
            return None

        cached = await self._read_cache(community_id)
        if cached is not None:
            logger.debug("Metadata cache hit for %s", community_id)
            return cached

        try:
            metadata = await asyncio.wait_for(self._fetch(community_id), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Community directory timed out for %s after %.1fs", community_id, self._timeout)
            return None
        except (DirectoryError, ValidationError, KeyError) as exc:
            logger.warning("Community metadata unavailable for %s: %s", community_id, exc)
            return None
        except Exception:
            logger.exception("Unexpected error resolving community metadata for %s", community_id)
            return None

        await self._write_cache(metadata)
        return metadata
