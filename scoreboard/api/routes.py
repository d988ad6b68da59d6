from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from scoreboard.api.deps import get_db, get_identity, require_owner
from scoreboard.config import settings
from scoreboard.crud import (
    claim_prize,
    count_unlocks,
    get_standing,
    get_user_or_raise,
    leaderboard,
    list_by_user,
    register_user,
    unlock,
)
from scoreboard.errors import ClaimStatus, UserNotFound
from scoreboard.models import User
from scoreboard.schemas import (
    ClaimOut,
    FlagUnlockOut,
    LeaderboardOut,
    LeaderboardRowOut,
    RankOut,
    UnlockIn,
    UnlockOut,
    UserOut,
    UserRegisterIn,
)

router = APIRouter(prefix="/v1", tags=["scoreboard"])


def _user_payload(db: Session, user: User) -> Dict[str, Any]:
    payload = UserOut.model_validate(user).model_dump(mode="json")
    payload["flags_count"] = count_unlocks(db, user.username)
    return payload


@router.post("/users", status_code=201)
def users_register(
    body: UserRegisterIn,
    identity: str = Depends(get_identity),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    require_owner(body.username.strip(), identity)
    user = register_user(db, body.username, credential_ref=body.credential_ref)
    return _user_payload(db, user)


@router.get("/users/{username}")
def users_get(username: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    user = get_user_or_raise(db, username)
    return _user_payload(db, user)


@router.get("/users/{username}/flags")
def users_flags(username: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    entries = list_by_user(db, username)
    return {
        "count": len(entries),
        "items": [FlagUnlockOut.model_validate(e).model_dump(mode="json") for e in entries],
    }


@router.post("/users/{username}/flags")
def users_unlock(
    username: str,
    body: UnlockIn,
    identity: str = Depends(get_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    require_owner(username, identity)
    result = unlock(db, username, body.flag_key, body.points)
    out = UnlockOut(
        status=result.status.value,
        total_score=result.total_score,
        unlock=FlagUnlockOut.model_validate(result.unlock),
    )
    return JSONResponse(status_code=201 if result.created else 200, content=out.model_dump(mode="json"))


@router.get("/users/{username}/rank")
def users_rank(username: str, db: Session = Depends(get_db)) -> RankOut:
    rank, total_score = get_standing(db, username)
    return RankOut(username=username.strip(), rank=rank, total_score=total_score)


@router.post("/users/{username}/claim")
def users_claim(
    username: str,
    identity: str = Depends(get_identity),
    db: Session = Depends(get_db),
) -> ClaimOut:
    require_owner(username, identity)
    result = claim_prize(db, username, actor=identity)
    if result.status is ClaimStatus.NO_SUCH_USER:
        raise UserNotFound(username)
    return ClaimOut(username=username, status=result.status.value, accepted=result.accepted)


@router.get("/leaderboard")
def leaderboard_view(limit: Optional[int] = None, db: Session = Depends(get_db)) -> LeaderboardOut:
    if limit is not None:
        limit = max(1, min(limit, settings.LEADERBOARD_MAX_LIMIT))
    rows = leaderboard(db, limit=limit)
    return LeaderboardOut(
        count=len(rows),
        items=[LeaderboardRowOut.model_validate(row) for row in rows],
    )
