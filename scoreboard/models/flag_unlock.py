from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scoreboard.models.base import Base

if TYPE_CHECKING:
    from scoreboard.models.user import User


class FlagUnlock(Base):
    __tablename__ = "user_flags"
    __table_args__ = (UniqueConstraint("username", "flag_key", name="uq_user_flags_username_flag_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        ForeignKey("users.username", ondelete="CASCADE"),
        index=True,
    )
    flag_key: Mapped[str] = mapped_column(String(255))
    points: Mapped[int] = mapped_column(Integer)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    user: Mapped["User"] = relationship(back_populates="unlocks")

    def __repr__(self) -> str:
        return f"<FlagUnlock {self.flag_key} user={self.username} points={self.points}>"
