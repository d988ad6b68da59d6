from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserRegisterIn(BaseModel):
    username: str
    credential_ref: Optional[str] = None


class UserOut(BaseModel):
    username: str
    total_score: int
    has_claimed_prize: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
