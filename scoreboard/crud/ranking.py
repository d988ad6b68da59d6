"""Competitive ranking and the one-time prize claim.

Ranking uses standard competition ranking: tied scores share a rank and the
next lower score skips ahead, so scores 100, 100, 50 rank 1, 1, 3.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, aliased

from scoreboard.crud.audit import record_audit
from scoreboard.crud.users import get_user, normalize_username
from scoreboard.db import store_errors, unit_of_work
from scoreboard.errors import ClaimStatus, UserNotFound
from scoreboard.logging import get_logger
from scoreboard.models import FlagUnlock, User

logger = get_logger(__name__)


@dataclass
class ClaimResult:
    status: ClaimStatus
    username: str

    @property
    def accepted(self) -> bool:
        return self.status is ClaimStatus.ACCEPTED


@dataclass
class LeaderboardRow:
    username: str
    total_score: int
    has_claimed_prize: bool
    flags_count: int
    rank: int
    updated_at: Optional[datetime]


def get_standing(db: Session, username: str) -> tuple[int, int]:
    """Return ``(rank, total_score)`` for one user, read in a single statement."""
    username = normalize_username(username)
    higher = aliased(User)
    above = (
        select(func.count())
        .select_from(higher)
        .where(higher.total_score > User.total_score)
        .scalar_subquery()
    )
    with store_errors(db):
        row = db.execute(select(User.total_score, above).where(User.username == username)).first()
    if row is None:
        raise UserNotFound(username)
    total_score, higher_count = row
    return int(higher_count or 0) + 1, int(total_score)


def get_rank(db: Session, username: str) -> int:
    rank, _ = get_standing(db, username)
    return rank


def claim_prize(db: Session, username: str, actor: Optional[str] = None) -> ClaimResult:
    """Mark the prize as claimed exactly once.

    The check and the write are one conditional UPDATE, so among concurrent
    callers only the one whose statement flips the flag sees ACCEPTED.
    """
    username = normalize_username(username)
    with unit_of_work(db):
        flipped = db.execute(
            update(User)
            .where(User.username == username, User.has_claimed_prize.is_(False))
            .values(has_claimed_prize=True, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        ).rowcount
        if flipped == 1:
            status = ClaimStatus.ACCEPTED
            record_audit(db, "claim_prize", username, actor_username=actor or username)
        elif get_user(db, username) is None:
            status = ClaimStatus.NO_SUCH_USER
        else:
            status = ClaimStatus.ALREADY_CLAIMED
    # The UPDATE bypassed the identity map.
    db.expire_all()
    logger.info("prize_claim", username=username, status=status.value)
    return ClaimResult(status, username)


def leaderboard(db: Session, limit: Optional[int] = None) -> list[LeaderboardRow]:
    flags = (
        select(FlagUnlock.username, func.count(FlagUnlock.id).label("flags_count"))
        .group_by(FlagUnlock.username)
        .subquery()
    )
    query = (
        select(
            User.username,
            User.total_score,
            User.has_claimed_prize,
            func.coalesce(flags.c.flags_count, 0).label("flags_count"),
            func.rank().over(order_by=User.total_score.desc()).label("rank"),
            User.updated_at,
        )
        .outerjoin(flags, flags.c.username == User.username)
        .order_by(User.total_score.desc(), User.username.asc())
    )
    if limit is not None:
        query = query.limit(limit)
    with store_errors(db):
        rows = db.execute(query).all()

    return [
        LeaderboardRow(
            username=row.username,
            total_score=row.total_score,
            has_claimed_prize=bool(row.has_claimed_prize),
            flags_count=int(row.flags_count),
            rank=int(row.rank),
            updated_at=row.updated_at,
        )
        for row in rows
    ]
