"""
Audit Log API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import date
import json

from tourdesk.core.database import get_db
from tourdesk.core.security import PermissionChecker
from tourdesk.services.audit_service import AuditService

router = APIRouter(
    prefix="/audit-logs",
    tags=["Audit Logs"],
    dependencies=[Depends(PermissionChecker(["audit:view"]))]
)


def _audit_dict(log) -> dict:
    return {
        'id': log.id,
        'action': log.action,
        'resource_type': log.resource_type,
        'resource_id': log.resource_id,
        'description': log.description,
        'old_values': json.loads(log.old_values) if log.old_values else None,
        'new_values': json.loads(log.new_values) if log.new_values else None,
        'user_id': log.user_id,
        'username': log.username,
        'ip_address': log.ip_address,
        'request_method': log.request_method,
        'request_path': log.request_path,
        'status': log.status,
        'error_message': log.error_message,
        'created_at': log.created_at.isoformat() if log.created_at else None
    }


@router.get("")
async def list_audit_logs(
    start_date: date = None,
    end_date: date = None,
    user_id: int = None,
    action: str = None,
    resource_type: str = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Search the audit trail, newest first"""
    logs = AuditService(db).search(start_date, end_date, user_id, action, resource_type, limit, offset)
    return [_audit_dict(log) for log in logs]


@router.get("/resource/{resource_type}/{resource_id}")
async def get_resource_history(
    resource_type: str,
    resource_id: int,
    db: Session = Depends(get_db)
):
    """Audit history of one record"""
    return [_audit_dict(log) for log in AuditService(db).get_by_resource(resource_type, resource_id)]


@router.get("/{log_id}")
async def get_audit_log(
    log_id: int,
    db: Session = Depends(get_db)
):
    log = AuditService(db).get_by_id(log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Audit log not found")
    return _audit_dict(log)
