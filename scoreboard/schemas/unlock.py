from datetime import datetime

from pydantic import BaseModel


class UnlockIn(BaseModel):
    flag_key: str
    points: int


class FlagUnlockOut(BaseModel):
    id: int
    username: str
    flag_key: str
    points: int
    unlocked_at: datetime

    class Config:
        from_attributes = True


class UnlockOut(BaseModel):
    status: str
    total_score: int
    unlock: FlagUnlockOut
