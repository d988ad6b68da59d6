"""Ledger of flag unlocks.

Every mutation recomputes the owner's total score inside the same
transaction, so no reader ever sees a total that disagrees with the ledger.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scoreboard.config import settings
from scoreboard.crud.audit import record_audit
from scoreboard.crud.scores import lock_user, recompute_total_score
from scoreboard.crud.users import get_user, get_user_or_raise, normalize_username
from scoreboard.db import store_errors, unit_of_work
from scoreboard.errors import ConstraintViolation, UnlockStatus, UserNotFound
from scoreboard.logging import get_logger
from scoreboard.models import FlagUnlock, User

logger = get_logger(__name__)

# A lost insert race on a brand-new user is retried once.
_UNLOCK_ATTEMPTS = 2
# Upper bound of the points column (32-bit INTEGER on PostgreSQL).
MAX_POINTS = 2**31 - 1


@dataclass
class UnlockResult:
    status: UnlockStatus
    unlock: FlagUnlock
    total_score: int

    @property
    def created(self) -> bool:
        return self.status is UnlockStatus.CREATED


def _validate_unlock(flag_key: Optional[str], points: object) -> str:
    if not isinstance(flag_key, str) or not flag_key.strip():
        raise ConstraintViolation("flag_key must be a non-empty string")
    if isinstance(points, bool) or not isinstance(points, int):
        raise ConstraintViolation("points must be an integer")
    if points < 0:
        raise ConstraintViolation("points must be non-negative")
    if points > MAX_POINTS:
        raise ConstraintViolation(f"points must not exceed {MAX_POINTS}")
    return flag_key.strip()


def get_unlock(db: Session, username: str, flag_key: str) -> Optional[FlagUnlock]:
    with store_errors(db):
        return db.scalar(
            select(FlagUnlock).where(FlagUnlock.username == username, FlagUnlock.flag_key == flag_key)
        )


def _unlock_once(db: Session, username: str, flag_key: str, points: int, auto_register: bool) -> UnlockResult:
    with unit_of_work(db):
        user = lock_user(db, username)
        if user is None:
            if not auto_register:
                raise UserNotFound(username)
            user = User(username=username)
            db.add(user)
            db.flush()
            logger.info("user_auto_registered", username=username)

        existing = get_unlock(db, username, flag_key)
        if existing is not None:
            return UnlockResult(UnlockStatus.DUPLICATE, existing, user.total_score)

        entry = FlagUnlock(username=username, flag_key=flag_key, points=points)
        db.add(entry)
        db.flush()
        total = recompute_total_score(db, username)
    db.refresh(entry)
    return UnlockResult(UnlockStatus.CREATED, entry, total)


def unlock(
    db: Session,
    username: str,
    flag_key: str,
    points: int,
    auto_register: Optional[bool] = None,
) -> UnlockResult:
    username = normalize_username(username)
    flag_key = _validate_unlock(flag_key, points)
    if auto_register is None:
        auto_register = settings.AUTO_REGISTER_ON_UNLOCK

    for attempt in range(_UNLOCK_ATTEMPTS):
        try:
            result = _unlock_once(db, username, flag_key, points, auto_register)
        except IntegrityError:
            # Lost a race: either the same flag was recorded concurrently,
            # the user was created concurrently, or the user was deleted.
            existing = get_unlock(db, username, flag_key)
            if existing is not None:
                result = UnlockResult(UnlockStatus.DUPLICATE, existing, existing.user.total_score)
                break
            if get_user(db, username) is None and not auto_register:
                raise UserNotFound(username)
            if attempt + 1 == _UNLOCK_ATTEMPTS:
                raise
            continue
        break

    if result.created:
        logger.info(
            "flag_unlocked",
            username=username,
            flag_key=flag_key,
            points=points,
            total_score=result.total_score,
        )
    else:
        logger.info("flag_duplicate", username=username, flag_key=flag_key)
    return result


def remove(db: Session, username: str, flag_key: str, actor: Optional[str] = None) -> bool:
    """Delete one unlock and recompute the owner's total. Absent entries are a no-op."""
    username = normalize_username(username)
    with unit_of_work(db):
        user = lock_user(db, username)
        if user is None:
            return False
        entry = get_unlock(db, username, flag_key)
        if entry is None:
            return False
        points = entry.points
        db.execute(delete(FlagUnlock).where(FlagUnlock.id == entry.id))
        total = recompute_total_score(db, username)
        record_audit(
            db,
            "remove_flag",
            username,
            actor_username=actor,
            payload={"flag_key": flag_key, "points": points, "total_score": total},
        )
    logger.info("flag_removed", username=username, flag_key=flag_key, total_score=total, actor=actor)
    return True


def list_by_user(db: Session, username: str) -> list[FlagUnlock]:
    user = get_user_or_raise(db, username)
    with store_errors(db):
        return list(
            db.scalars(
                select(FlagUnlock)
                .where(FlagUnlock.username == user.username)
                .order_by(FlagUnlock.unlocked_at.asc(), FlagUnlock.id.asc())
            )
        )
