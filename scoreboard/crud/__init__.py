from scoreboard.crud.audit import list_audit_logs, record_audit
from scoreboard.crud.ledger import UnlockResult, get_unlock, list_by_user, remove, unlock
from scoreboard.crud.ranking import ClaimResult, LeaderboardRow, claim_prize, get_rank, get_standing, leaderboard
from scoreboard.crud.scores import ledger_total, lock_user, recompute_total_score, verify_total_score
from scoreboard.crud.users import count_unlocks, delete_user, get_user, get_user_or_raise, register_user

__all__ = [
    "register_user",
    "get_user",
    "get_user_or_raise",
    "delete_user",
    "count_unlocks",
    "unlock",
    "remove",
    "list_by_user",
    "get_unlock",
    "UnlockResult",
    "lock_user",
    "recompute_total_score",
    "ledger_total",
    "verify_total_score",
    "get_rank",
    "get_standing",
    "claim_prize",
    "leaderboard",
    "ClaimResult",
    "LeaderboardRow",
    "record_audit",
    "list_audit_logs",
]
