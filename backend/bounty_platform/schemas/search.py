from __future__ import annotations
from pydantic import Field, field_validator
from typing import Literal
from bounty_platform.schemas.bounty import CamelModel

SearchType = Literal["bounty", "category"]
AnalyticsReport = Literal["summary", "popular-queries", "click-through-rate", "trends"]

class SearchMetadata(CamelModel):
    reward: float | None = None
    deadline: str | None = None
    status: str | None = None
    category: str | None = None

class SearchResult(CamelModel):
    id: str
    title: str
    description: str
    type: SearchType
    url: str
    metadata: SearchMetadata | None = None

class SearchResponse(CamelModel):
    query: str
    results: list[SearchResult]
    total: int
    has_more: bool

class SelectedResult(CamelModel):
    id: str
    title: str
    type: str
    position: int = 0

    @field_validator("position")
    @classmethod
    def clamp_position(cls, v: int) -> int:
        return max(0, v)

class SearchAnalyticsEvent(CamelModel):
    query: str = Field(min_length=1)
    timestamp: float
    results_count: int = 0
    selected_result: SelectedResult | None = None
    user_agent: str | None = None
    session_id: str | None = None

    @field_validator("query")
    @classmethod
    def normalize_query(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("query must not be blank")
        return v

    @field_validator("results_count")
    @classmethod
    def non_negative(cls, v: int) -> int:
        return max(0, v)

    @field_validator("user_agent")
    @classmethod
    def truncate_user_agent(cls, v: str | None) -> str | None:
        return v[:500] if v else v
