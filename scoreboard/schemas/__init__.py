from scoreboard.schemas.leaderboard import ClaimOut, LeaderboardOut, LeaderboardRowOut, RankOut
from scoreboard.schemas.unlock import FlagUnlockOut, UnlockIn, UnlockOut
from scoreboard.schemas.user import UserOut, UserRegisterIn

__all__ = [
    "UserRegisterIn",
    "UserOut",
    "UnlockIn",
    "UnlockOut",
    "FlagUnlockOut",
    "LeaderboardRowOut",
    "LeaderboardOut",
    "RankOut",
    "ClaimOut",
]
