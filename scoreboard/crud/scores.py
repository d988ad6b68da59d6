"""Score aggregation: keeps users.total_score equal to the sum of their unlocks.

Totals are always recomputed from the ledger, never adjusted incrementally.
Callers run these inside the same transaction as the ledger mutation.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from scoreboard.db import store_errors
from scoreboard.models import FlagUnlock, User


def _ledger_sum(username: str):
    return (
        select(func.coalesce(func.sum(FlagUnlock.points), 0))
        .where(FlagUnlock.username == username)
        .scalar_subquery()
    )


def lock_user(db: Session, username: str) -> Optional[User]:
    """Load the user row, holding a row lock until the transaction ends.

    SQLite has no row locks; its single writer lock gives the same ordering.
    """
    return db.scalar(select(User).where(User.username == username).with_for_update())


def recompute_total_score(db: Session, username: str) -> int:
    db.execute(
        update(User)
        .where(User.username == username)
        .values(total_score=_ledger_sum(username), updated_at=datetime.utcnow())
        .execution_options(synchronize_session="fetch")
    )
    return db.scalar(select(User.total_score).where(User.username == username)) or 0


def ledger_total(db: Session, username: str) -> int:
    with store_errors(db):
        return db.scalar(select(_ledger_sum(username))) or 0


def verify_total_score(db: Session, username: str) -> bool:
    with store_errors(db):
        stored = db.scalar(select(User.total_score).where(User.username == username))
    if stored is None:
        return False
    return stored == ledger_total(db, username)
