from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

from eightball.core.answers import build_pool
from eightball.core.exceptions import OracleError, PersistenceError, PreconditionError
from eightball.core.history import HistoryStore
from eightball.core.metadata import MetadataProvider
from eightball.core.models import AskResult, CommunityMetadata, HistoryEntry, RequestContext


logger = logging.getLogger("eightball.oracle")

POST_REQUIRED = "postId is required"
LOGIN_REQUIRED = "Must be logged in"
QUESTION_REQUIRED = "Question is required"
DEFAULT_HISTORY_LIMIT = 10


class RandomSource(Protocol):
    def uniform_int(self, n: int) -> int:
        """Return an integer drawn uniformly from [0, n)."""
        ...


class PythonRandomSource:
    """``random.Random.randrange`` based draws, free of modulo bias."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def uniform_int(self, n: int) -> int:
        if n <= 0:
            raise ValueError(f"uniform_int needs a positive bound, got {n}")
        return self._rng.randrange(n)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_post(context: RequestContext) -> str:
    if not context.post_id:
        raise PreconditionError(POST_REQUIRED)
    return context.post_id


def require_user(context: RequestContext) -> str:
    if not context.user_id:
        raise PreconditionError(LOGIN_REQUIRED)
    return context.user_id


class Oracle:
    """Answers one question per call.

    ``ask`` runs validate -> enrich -> select -> persist -> respond. Only
    validation errors reach the caller as PreconditionError; metadata and
    history failures degrade the answer instead of blocking it.
    """

    def __init__(
        self,
        metadata_provider: MetadataProvider,
        history: HistoryStore,
        random_source: Optional[RandomSource] = None,
        clock: Callable[[], datetime] = _utcnow,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._metadata = metadata_provider
        self._history = history
        self._random = random_source or PythonRandomSource()
        self._clock = clock
        self.history_limit = history_limit

    def _validate(self, context: RequestContext, question: Optional[str]) -> str:
        require_post(context)
        require_user(context)
        text = (question or "").strip()
        if not text:
            raise PreconditionError(QUESTION_REQUIRED)
        return text

    async def _enrich(self, context: RequestContext) -> Optional[CommunityMetadata]:
        try:
            return await self._metadata.get_metadata(context)
        except Exception:
            logger.exception("Metadata provider failed; falling back to generic answers")
            return None

    def build_pool(self, metadata: Optional[CommunityMetadata]) -> List[str]:
        rule_index = None
        if metadata is not None and metadata.rules:
            rule_index = self._random.uniform_int(len(metadata.rules)) + 1
        return build_pool(metadata, rule_index=rule_index)

    def _select(self, pool: List[str]) -> str:
        answer = pool[self._random.uniform_int(len(pool))]
        if not answer:
            raise OracleError("Failed to get answer")
        return answer

    async def _persist(
        self,
        context: RequestContext,
        question: str,
        answer: str,
        community_name: Optional[str],
    ) -> None:
        now = self._clock()
        post_id, user_id = context.post_id, context.user_id
        try:
            await self._history.append_question(post_id, user_id, question, now)
        except PersistenceError as exc:
            logger.warning("Question record not stored for post=%s user=%s: %s", post_id, user_id, exc)
        try:
            await self._history.append_answer(post_id, user_id, question, answer, community_name, now)
        except PersistenceError as exc:
            logger.warning("Answer record not stored for post=%s user=%s: %s", post_id, user_id, exc)

    async def ask(self, context: RequestContext, question: Optional[str]) -> AskResult:
        text = self._validate(context, question)
        logger.info(
            "Incoming question: post_id=%s user_id=%s subreddit=%s question_len=%s",
            context.post_id,
            context.user_id,
            context.subreddit_name,
            len(text),
        )

        metadata = await self._enrich(context)
        pool = self.build_pool(metadata)
        answer = self._select(pool)
        community_name = metadata.community_id if metadata else None

        await self._persist(context, text, answer, community_name)

        logger.info("Answered from %s pool of %s", "community" if metadata else "generic", len(pool))
        return AskResult(
            answer=answer,
            subreddit=community_name,
            animation="reveal",
            confidence=self._random.uniform_int(100) + 1,
            mystical_level=self._random.uniform_int(5) + 1,
        )

    async def community(self, context: RequestContext) -> Optional[CommunityMetadata]:
        require_post(context)
        return await self._enrich(context)

    async def history(
        self, context: RequestContext, limit: Optional[int] = None
    ) -> List[HistoryEntry]:
        post_id = require_post(context)
        user_id = require_user(context)
        limit = self.history_limit if limit is None else min(limit, self.history_limit)
        return await self._history.recent_history(post_id, user_id, limit)
