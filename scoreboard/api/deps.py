from collections.abc import Iterator
from typing import Optional

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from scoreboard.config import settings
from scoreboard.db import SessionLocal


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_identity(x_auth_user: Optional[str] = Header(default=None)) -> str:
    # Set by the upstream identity provider after authentication.
    identity = (x_auth_user or "").strip()
    if not identity:
        raise HTTPException(status_code=401, detail="authentication required")
    return identity


def require_owner(username: str, identity: str) -> None:
    if identity != username:
        raise HTTPException(status_code=403, detail="may only modify your own records")


def require_admin(x_admin_token: Optional[str] = Header(default=None)) -> None:
    token = settings.ADMIN_API_TOKEN
    if not token:
        raise HTTPException(status_code=503, detail="admin token not configured")
    if x_admin_token != token:
        raise HTTPException(status_code=403, detail="admin token invalid")
