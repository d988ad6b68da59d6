import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from scoreboard.api.deps import get_db, require_admin
from scoreboard.crud import (
    delete_user,
    get_user_or_raise,
    ledger_total,
    list_audit_logs,
    remove,
    verify_total_score,
)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.delete("/users/{username}/flags/{flag_key}")
def admin_remove_flag(
    username: str,
    flag_key: str,
    _: None = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    removed = remove(db, username, flag_key, actor="admin")
    return {"ok": True, "removed": removed, "username": username, "flag_key": flag_key}


@router.delete("/users/{username}")
def admin_delete_user(
    username: str,
    _: None = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    if not delete_user(db, username, actor="admin"):
        raise HTTPException(status_code=404, detail="user not found")
    return {"ok": True, "username": username}


@router.get("/users/{username}/consistency")
def admin_user_consistency(
    username: str,
    _: None = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = get_user_or_raise(db, username)
    return {
        "username": username,
        "total_score": user.total_score,
        "ledger_total": ledger_total(db, username),
        "consistent": verify_total_score(db, username),
    }


@router.get("/audit")
def admin_audit(
    limit: int = 100,
    username: Optional[str] = None,
    action: Optional[str] = None,
    _: None = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    limit = max(1, min(limit, 500))
    logs = list_audit_logs(db, limit=limit, target_username=username, action=action)
    return {
        "count": len(logs),
        "items": [
            {
                "id": log.id,
                "actor_username": log.actor_username,
                "action": log.action,
                "target_username": log.target_username,
                "payload": json.loads(log.payload_json) if log.payload_json else None,
                "created_at": log.created_at.isoformat() if log.created_at else None,
            }
            for log in logs
        ],
    }
