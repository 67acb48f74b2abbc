"""Audit logging service"""
import json
from typing import Optional
from sqlalchemy.orm import Session

from src.sheet_import.models.audit_log import AuditLog


def log_action(
    db: Session,
    action: str,
    target_type: str,
    target_id: Optional[int] = None,
    meta: Optional[dict] = None,
    session_key: Optional[str] = None,
    commit: bool = True
) -> AuditLog:
    audit_log = AuditLog(
        session_key=session_key,
        action=action,
        target_type=target_type,
        target_id=target_id,
        meta_json=json.dumps(meta) if meta else None
    )
    db.add(audit_log)
    if commit:
        db.commit()
        db.refresh(audit_log)
    return audit_log
