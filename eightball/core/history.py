"""Question/answer history backed by the key-value store.

Records are append-only and expire through the store's TTL. Keys look like::

    question:<post_id>:<user_id>:<epoch_ms>:<nonce>
    answer:<post_id>:<user_id>:<epoch_ms>:<nonce>

``epoch_ms`` is strictly increasing per store instance and namespace, so two
writes in the same millisecond never share a key; ``nonce`` keeps separate
processes apart. Ids are percent-encoded so ``:`` never splits a segment.
History is rebuilt from the key timestamps alone.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ValidationError

from eightball.core.exceptions import PersistenceError
from eightball.core.models import AnswerRecord, HistoryEntry, QuestionRecord
from eightball.core.store import KeyValueStore, escape_glob


logger = logging.getLogger("eightball.history")

QUESTION_NAMESPACE = "question"
ANSWER_NAMESPACE = "answer"
DEFAULT_TTL_SECONDS = 86400


def _epoch_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def encode_id(value: str) -> str:
    """Percent-encode ``%`` and ``:`` so an id always fills one key segment."""

    return value.replace("%", "%25").replace(":", "%3A")


def timestamp_from_key(key: str) -> Optional[int]:
    parts = key.rsplit(":", 2)
    if len(parts) != 3:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None


class HistoryStore:
    """Append-only question/answer log keyed by (post, user)."""

    def __init__(self, store: KeyValueStore, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._store = store
        self._ttl = ttl_seconds
        self._last_stamp: Dict[str, int] = {}

    def _next_stamp(self, namespace: str, now: datetime) -> int:
        # no await between read and write
        stamp = max(_epoch_ms(now), self._last_stamp.get(namespace, -1) + 1)
        self._last_stamp[namespace] = stamp
        return stamp

    def _key(self, namespace: str, context_id: str, user_id: str, stamp: int) -> str:
        return (
            f"{namespace}:{encode_id(context_id)}:{encode_id(user_id)}"
            f":{stamp}:{secrets.token_hex(4)}"
        )

    async def _write(self, key: str, payload: str) -> None:
        try:
            await self._store.set(key, payload, ttl_seconds=self._ttl)
        except Exception as exc:
            raise PersistenceError(f"Failed to write history record: {exc}", key=key) from exc

    async def append_question(
        self, context_id: str, user_id: str, text: str, now: datetime
    ) -> str:
        stamp = self._next_stamp(QUESTION_NAMESPACE, now)
        key = self._key(QUESTION_NAMESPACE, context_id, user_id, stamp)
        record = QuestionRecord(
            context_id=context_id, user_id=user_id, question=text, created_at=stamp
        )
        await self._write(key, record.model_dump_json(by_alias=True))
        return key

    async def append_answer(
        self,
        context_id: str,
        user_id: str,
        text: str,
        answer: str,
        community_name: Optional[str],
        now: datetime,
    ) -> str:
        stamp = self._next_stamp(ANSWER_NAMESPACE, now)
        key = self._key(ANSWER_NAMESPACE, context_id, user_id, stamp)
        record = AnswerRecord(
            context_id=context_id,
            user_id=user_id,
            question=text,
            answer=answer,
            community_name=community_name,
            created_at=stamp,
        )
        await self._write(key, record.model_dump_json(by_alias=True, exclude_none=True))
        return key

    async def recent_history(
        self, context_id: str, user_id: str, limit: int
    ) -> List[HistoryEntry]:
        """Newest-first answers for (context, user), at most ``limit`` of them.

        Vanished, unreadable or malformed records are skipped; only a failed
        key scan raises.
        """
        if limit <= 0:
            return []

        pattern = (
            f"{ANSWER_NAMESPACE}:{escape_glob(encode_id(context_id))}"
            f":{escape_glob(encode_id(user_id))}:*"
        )
        try:
            keys = await self._store.keys(pattern)
        except Exception as exc:
            raise PersistenceError(f"Failed to scan history: {exc}") from exc

        values = await asyncio.gather(
            *(self._store.get(key) for key in keys), return_exceptions=True
        )

        history: List[HistoryEntry] = []
        for key, value in zip(keys, values):
            if isinstance(value, BaseException):
                logger.warning("Skipping unreadable history record %s: %s", key, value)
                continue
            if value is None:
                continue
            timestamp = timestamp_from_key(key)
            if timestamp is None:
                logger.warning("Skipping history key without timestamp: %s", key)
                continue
            try:
                record = AnswerRecord.model_validate_json(value)
            except ValidationError as exc:
                logger.warning("Skipping malformed history record %s: %s", key, exc.error_count())
                continue
            history.append(
                HistoryEntry(question=record.question, answer=record.answer, timestamp=timestamp)
            )

        history.sort(key=lambda entry: entry.timestamp, reverse=True)
        return history[:limit]
