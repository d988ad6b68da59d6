from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scoreboard.crud.audit import record_audit
from scoreboard.db import store_errors, unit_of_work
from scoreboard.errors import ConstraintViolation, UserAlreadyExists, UserNotFound
from scoreboard.logging import get_logger
from scoreboard.models import FlagUnlock, User

logger = get_logger(__name__)


def normalize_username(username: Optional[str]) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ConstraintViolation("username must be a non-empty string")
    return username.strip()


def get_user(db: Session, username: str) -> Optional[User]:
    with store_errors(db):
        return db.scalar(select(User).where(User.username == username))


def get_user_or_raise(db: Session, username: str) -> User:
    username = normalize_username(username)
    user = get_user(db, username)
    if not user:
        raise UserNotFound(username)
    return user


def register_user(db: Session, username: str, credential_ref: Optional[str] = None) -> User:
    username = normalize_username(username)
    try:
        with unit_of_work(db):
            if get_user(db, username):
                raise UserAlreadyExists(username)
            user = User(username=username, credential_ref=credential_ref)
            db.add(user)
    except IntegrityError as exc:
        raise UserAlreadyExists(username) from exc
    db.refresh(user)
    logger.info("user_registered", username=username)
    return user


def count_unlocks(db: Session, username: str) -> int:
    with store_errors(db):
        return db.scalar(
            select(func.count()).select_from(FlagUnlock).where(FlagUnlock.username == username)
        ) or 0


def delete_user(db: Session, username: str, actor: Optional[str] = None) -> bool:
    """Hard-delete a user; the store cascades the delete to their unlocks."""
    username = normalize_username(username)
    with unit_of_work(db):
        user = get_user(db, username)
        if not user:
            return False
        before = {
            "total_score": user.total_score,
            "has_claimed_prize": user.has_claimed_prize,
            "flags_count": count_unlocks(db, username),
        }
        db.execute(delete(User).where(User.username == username))
        record_audit(db, "delete_user", username, actor_username=actor, payload={"before": before})
    db.expunge_all()
    logger.info("user_deleted", username=username, actor=actor)
    return True
