"""Core domain models.

These pydantic models are shared by the oracle, the storage layer and the
HTTP app. JSON field names follow the client contract (camelCase aliases),
Python attribute names stay snake_case.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestContext(BaseModel):
    """Identity of the invoking post, user and community for one request."""

    model_config = ConfigDict(frozen=True)

    post_id: Optional[str] = None
    user_id: Optional[str] = None
    subreddit_name: Optional[str] = None


class CommunityRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    short_name: str = Field(..., alias="shortName", min_length=1)
    description: str = ""


class CommunityMetadata(BaseModel):
    """Descriptive facts about a community, cached for a short time."""

    model_config = ConfigDict(populate_by_name=True)

    community_id: str = Field(..., alias="name", min_length=1)
    display_name: str = Field(..., alias="displayName", min_length=1)
    description: Optional[str] = None
    subscriber_count: Optional[int] = Field(default=None, alias="subscribers")
    rules: List[CommunityRule] = Field(default_factory=list)
    flair_enabled: bool = Field(default=False, alias="flairEnabled")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class QuestionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    context_id: str = Field(..., alias="contextId")
    user_id: str = Field(..., alias="userId")
    question: str
    created_at: int = Field(..., alias="createdAt")


class AnswerRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    context_id: str = Field(..., alias="contextId")
    user_id: str = Field(..., alias="userId")
    question: str
    answer: str
    community_name: Optional[str] = Field(default=None, alias="subreddit")
    created_at: int = Field(..., alias="createdAt")


class HistoryEntry(BaseModel):
    question: str
    answer: str
    timestamp: int = Field(..., description="Epoch milliseconds taken from the record key")


class AskResult(BaseModel):
    """Successful answer payload; confidence and mystical level are decorative."""

    model_config = ConfigDict(populate_by_name=True)

    answer: str
    subreddit: Optional[str] = None
    animation: Literal["reveal"] = "reveal"
    confidence: Optional[int] = None
    mystical_level: Optional[int] = Field(default=None, alias="mysticalLevel")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
