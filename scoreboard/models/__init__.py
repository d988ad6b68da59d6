from scoreboard.models.base import Base
from scoreboard.models.audit_log import AuditLog
from scoreboard.models.flag_unlock import FlagUnlock
from scoreboard.models.user import User

__all__ = [
    "Base",
    "AuditLog",
    "FlagUnlock",
    "User",
]
