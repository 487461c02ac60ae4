"""Audit logging service for security and administrative events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flask import current_app, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from lpb.extensions import db
from lpb.models import AuditLog

if TYPE_CHECKING:
    from lpb.models import User


def _remote_addr() -> str | None:
    return request.remote_addr if has_request_context() else None


def log_security_event(
    user: User,
    action: str,
    details: str | None = None,
    metadata: dict[str, Any] | None = None
) -> None:
    """
    Log a security-related event to the audit log.

    Args:
        user: User the event concerns
        action: Action performed (e.g., "login_success", "logout_all")
        details: Optional additional details
        metadata: Additional metadata to store
    """
    meta = dict(metadata or {})
    if details:
        meta['details'] = details
    _write(user.id, action, 'user', user.id, meta, 'security event')


def log_admin_action(
    user: User | None,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None
) -> None:
    """
    Log an administrative action.

    Args:
        user: User who performed the action
        action: Action performed (e.g., "user_invited", "page_deleted")
        entity_type: Type of entity affected
        entity_id: ID of entity affected
        metadata: Additional metadata
    """
    _write(user.id if user else None, action, entity_type, entity_id, dict(metadata or {}), 'admin action')


def _write(
    user_id: str | None,
    action: str,
    entity_type: str,
    entity_id: str | None,
    meta: dict[str, Any],
    label: str,
) -> None:
    meta.setdefault('ip_address', _remote_addr())
    try:
        db.session.add(AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            meta=meta,
        ))
        db.session.commit()
    except SQLAlchemyError as e:
        # The audited operation has already committed
        db.session.rollback()
        current_app.logger.error(f"Failed to log {label}: {e}")


__all__ = ["log_security_event", "log_admin_action"]
