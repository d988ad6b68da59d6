from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scoreboard.models.base import Base

if TYPE_CHECKING:
    from scoreboard.models.flag_unlock import FlagUnlock


class User(Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255), primary_key=True)
    credential_ref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Derived from user_flags; written only by scoreboard.crud.scores.
    total_score: Mapped[int] = mapped_column(BigInteger, default=0, server_default="0")
    has_claimed_prize: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    unlocks: Mapped[list["FlagUnlock"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FlagUnlock.unlocked_at",
    )

    def __repr__(self) -> str:
        return f"<User {self.username} score={self.total_score}>"


Index("idx_users_total_score", User.total_score.desc())
