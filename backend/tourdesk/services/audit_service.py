"""
Audit Logging Service
Trail of logins, user management and every change to the financial ledger
"""
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import Optional, List, Dict
from datetime import date, datetime, time, timedelta
from fastapi import Request
import json
import logging

from tourdesk.models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    # Money movements and bulk ledger changes
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_MADE = "PAYMENT_MADE"
    TRANSFER_COMPLETED = "TRANSFER_COMPLETED"
    EXPENSE_PAID = "EXPENSE_PAID"
    ACCOUNTING_REPLACED = "ACCOUNTING_REPLACED"
    BALANCE_RECALCULATED = "BALANCE_RECALCULATED"

    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _as_json(values: Optional[Dict]) -> Optional[str]:
    return json.dumps(values, default=str) if values else None


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log(self, action: str, resource_type: str, resource_id: Optional[int] = None,
            description: Optional[str] = None, old_values: Optional[Dict] = None,
            new_values: Optional[Dict] = None, **context) -> AuditLog:
        """
        Add an audit row to the session (flushed, not committed).

        `context` carries the remaining AuditLog columns: user_id, username,
        ip_address, user_agent, request_method, request_path, status and
        error_message. old_values/new_values are stored as JSON text.
        """
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            description=description,
            old_values=_as_json(old_values),
            new_values=_as_json(new_values),
            **context
        )
        self.db.add(entry)
        self.db.flush()

        logger.info(
            f"Audit: {action} {resource_type}(id={resource_id}) "
            f"by user={entry.username} status={entry.status or 'success'}"
        )
        return entry

    def log_request(self, request: Request, user, action: str, resource_type: str,
                    resource_id: Optional[int] = None, description: Optional[str] = None,
                    old_values: Optional[Dict] = None, new_values: Optional[Dict] = None,
                    username: Optional[str] = None, status: str = "success",
                    error_message: Optional[str] = None) -> AuditLog:
        """Audit an action of the request's user; `username` names an unknown caller"""
        return self.log(
            action, resource_type, resource_id, description, old_values, new_values,
            user_id=user.id if user else None,
            username=user.username if user else username,
            ip_address=_client_address(request),
            user_agent=request.headers.get("User-Agent", "")[:500],
            request_method=request.method,
            request_path=request.url.path,
            status=status,
            error_message=error_message
        )

    def get_by_id(self, log_id: int) -> Optional[AuditLog]:
        return self.db.query(AuditLog).filter(AuditLog.id == log_id).first()

    def search(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
               user_id: Optional[int] = None, action: Optional[str] = None,
               resource_type: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[AuditLog]:
        """Newest first; end_date is inclusive"""
        query = self.db.query(AuditLog)
        if start_date:
            query = query.filter(AuditLog.created_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(AuditLog.created_at < datetime.combine(end_date + timedelta(days=1), time.min))
        if user_id:
            query = query.filter(AuditLog.user_id == user_id)
        if action:
            query = query.filter(AuditLog.action == action)
        if resource_type:
            query = query.filter(AuditLog.resource_type == resource_type)
        return query.order_by(desc(AuditLog.created_at), desc(AuditLog.id)).offset(offset).limit(limit).all()

    def get_by_resource(self, resource_type: str, resource_id: int, limit: int = 50) -> List[AuditLog]:
        return self.db.query(AuditLog).filter(
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == resource_id
        ).order_by(desc(AuditLog.created_at)).limit(limit).all()
