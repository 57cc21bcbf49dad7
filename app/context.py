from __future__ import annotations

from typing import Optional

from fastapi import Request

from config.settings import Settings, get_settings
from eightball.core.models import RequestContext


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_request_context(request: Request) -> RequestContext:
    """Read post, user and community identity set by the hosting platform.

    The platform authenticates the user before the request reaches us, so
    these headers are trusted as-is.
    """
    settings: Settings = getattr(request.app.state, "settings", None) or get_settings()
    headers = request.headers
    return RequestContext(
        post_id=_clean(headers.get(settings.post_id_header)),
        user_id=_clean(headers.get(settings.user_id_header)),
        subreddit_name=_clean(headers.get(settings.subreddit_header)),
    )
