"""Unit tests for RedditDirectory using httpx.MockTransport."""

import httpx
import pytest

from eightball.core.exceptions import DirectoryError
from eightball.tools.community_directory import RedditDirectory


ABOUT = {
    "kind": "t5",
    "data": {
        "display_name": "python",
        "public_description": "News about Python",
        "subscribers": 1_300_000,
        "user_flair_enabled_in_sr": True,
    },
}

RULES = {
    "rules": [
        {"short_name": "Be civil", "description": "No attacks", "violation_reason": "Incivility"},
        {"violation_reason": "Spam"},
    ]
}


def _directory(handler) -> RedditDirectory:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://directory.test"
    )
    return RedditDirectory(base_url="https://directory.test", client=client)


class TestRedditDirectory:
    @pytest.mark.asyncio
    async def test_current_community(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json=ABOUT)

        about = await _directory(handler).current_community("python")

        assert seen == ["/r/python/about.json"]
        assert about == {
            "name": "python",
            "display_name": "python",
            "description": "News about Python",
            "subscribers": 1_300_000,
            "user_flair_enabled": True,
        }

    @pytest.mark.asyncio
    async def test_community_rules(self):
        def handler(request):
            assert request.url.path == "/r/python/about/rules.json"
            return httpx.Response(200, json=RULES)

        rules = await _directory(handler).community_rules("python")

        assert [r.get("short_name") for r in rules] == ["Be civil", None]

    @pytest.mark.asyncio
    async def test_not_found_raises(self):
        directory = _directory(lambda request: httpx.Response(404, json={"error": 404}))

        with pytest.raises(DirectoryError) as exc_info:
            await directory.current_community("missing")

        assert exc_info.value.community == "missing"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(DirectoryError):
            await _directory(handler).community_rules("python")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        directory = _directory(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(DirectoryError):
            await directory.current_community("python")

    @pytest.mark.asyncio
    async def test_missing_data_raises(self):
        directory = _directory(lambda request: httpx.Response(200, json={"kind": "t5"}))

        with pytest.raises(DirectoryError):
            await directory.current_community("python")

    @pytest.mark.asyncio
    async def test_rules_absent_is_empty(self):
        directory = _directory(lambda request: httpx.Response(200, json={}))

        assert await directory.community_rules("python") == []
