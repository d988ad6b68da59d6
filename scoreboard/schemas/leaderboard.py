from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LeaderboardRowOut(BaseModel):
    username: str
    total_score: int
    has_claimed_prize: bool
    flags_count: int
    rank: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeaderboardOut(BaseModel):
    count: int
    items: list[LeaderboardRowOut]


class RankOut(BaseModel):
    username: str
    rank: int
    total_score: int


class ClaimOut(BaseModel):
    username: str
    status: str
    accepted: bool
