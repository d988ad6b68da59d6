"""Error taxonomy and typed outcomes of the score ledger.

Duplicate unlocks and repeated prize claims are benign and are reported
through :class:`UnlockStatus` / :class:`ClaimStatus` rather than raised.
"""

from enum import Enum


class ScoreboardError(Exception):
    """Base class for every error the ledger reports to its caller."""


class UserNotFound(ScoreboardError):
    def __init__(self, username: str) -> None:
        super().__init__(f"user not found: {username!r}")
        self.username = username


class UserAlreadyExists(ScoreboardError):
    def __init__(self, username: str) -> None:
        super().__init__(f"user already exists: {username!r}")
        self.username = username


class ConstraintViolation(ScoreboardError):
    """Malformed input, rejected before anything is written."""


class StoreUnavailable(ScoreboardError):
    """Transient store failure. Safe to retry with backoff."""


class UnlockStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"


class ClaimStatus(str, Enum):
    ACCEPTED = "accepted"
    ALREADY_CLAIMED = "already_claimed"
    NO_SUCH_USER = "no_such_user"
