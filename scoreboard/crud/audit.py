import json
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from scoreboard.db import store_errors
from scoreboard.models import AuditLog


def record_audit(
    db: Session,
    action: str,
    target_username: str,
    actor_username: Optional[str] = None,
    payload: Optional[dict[str, Any]] = None,
) -> AuditLog:
    # Added to the caller's transaction; the caller commits.
    log = AuditLog(
        actor_username=actor_username,
        action=action,
        target_username=target_username,
        payload_json=json.dumps(payload, ensure_ascii=False, default=str) if payload is not None else None,
    )
    db.add(log)
    return log


def list_audit_logs(
    db: Session,
    limit: int = 100,
    target_username: Optional[str] = None,
    action: Optional[str] = None,
) -> list[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    if target_username:
        query = query.where(AuditLog.target_username == target_username)
    if action:
        query = query.where(AuditLog.action == action)
    with store_errors(db):
        return list(db.scalars(query))
