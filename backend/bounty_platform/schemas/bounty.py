from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Literal

BountyStatus = Literal["open", "in-progress", "closed"]
ActivityType = Literal["new_bounty", "payment", "application", "submission", "other"]

class CamelModel(BaseModel):
    # JSON keys are camelCase for the web client; Python side stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Bounty(CamelModel):
    id: str
    title: str
    description: str = ""
    requirements: str = ""
    reward: float = 0
    deadline: str
    category: str = "Other"  # comma-separated when several
    status: BountyStatus = "open"
    skills: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

class BountyStatusUpdate(BaseModel):
    status: str

class BountyStatusUpdated(BaseModel):
    success: bool = True
    message: str
    id: str
    status: BountyStatus

class Winner(CamelModel):
    id: str
    name: str
    time_ago: str
    bounty_title: str
    category: str
    reward: float

class Activity(CamelModel):
    id: str
    type: ActivityType
    user_name: str | None = None
    bounty_title: str | None = None
    amount: float | None = None
    message: str | None = None
    time_ago: str

class PlatformStats(CamelModel):
    total_earned: str
    available_opportunities: int
    total_available: str
    active_users: str
    completion_rate: int = Field(ge=0, le=100)

class SyncResult(CamelModel):
    success: bool = True
    message: str
    timestamp: str
    count: int
    has_changes: bool | None = None
