from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

import httpx

from eightball.core.exceptions import DirectoryError


class CommunityDirectory(Protocol):
    """Lookups the metadata provider needs from the community directory."""

    async def current_community(self, name: str) -> Dict[str, Any]:
        ...

    async def community_rules(self, name: str) -> List[Dict[str, Any]]:
        ...


def _extract_about(raw: Any, name: str) -> Dict[str, Any]:
    data = raw.get("data") if isinstance(raw, dict) else None
    if not isinstance(data, dict):
        raise DirectoryError(f"Malformed community payload for {name}", community=name)
    return {
        "name": data.get("display_name") or name,
        "display_name": data.get("display_name") or name,
        "description": data.get("public_description") or data.get("description") or None,
        "subscribers": data.get("subscribers"),
        "user_flair_enabled": bool(data.get("user_flair_enabled_in_sr")),
    }


def _extract_rules(raw: Any, name: str) -> List[Dict[str, Any]]:
    rules = raw.get("rules") if isinstance(raw, dict) else None
    if rules is None:
        return []
    if not isinstance(rules, list):
        raise DirectoryError(f"Malformed rules payload for {name}", community=name)
    return [rule for rule in rules if isinstance(rule, dict)]


class RedditDirectory:
    """Reddit's public JSON endpoints as a community directory.

    Pass ``client`` to reuse a connection pool (or a mock transport in tests);
    otherwise one is created and owned by this instance.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        user_agent: str = "community-eightball/1.0",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )

    async def _get_json(self, path: str, name: str) -> Any:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise DirectoryError(f"Community directory call failed: {exc}", community=name) from exc
        except ValueError as exc:
            raise DirectoryError(f"Community directory returned invalid JSON: {exc}", community=name) from exc

    async def current_community(self, name: str) -> Dict[str, Any]:
        raw = await self._get_json(f"/r/{name}/about.json", name)
        return _extract_about(raw, name)

    async def community_rules(self, name: str) -> List[Dict[str, Any]]:
        raw = await self._get_json(f"/r/{name}/about/rules.json", name)
        return _extract_rules(raw, name)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
