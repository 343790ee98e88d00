"""
Audit Logging Helper Functions

Provides a centralized way to log financial actions.
"""

from audit.models import AuditLog
from django.db import transaction
import logging

logger = logging.getLogger(__name__)


def log_action(account_id, actor_id, action, resource_type, resource_id, description, metadata=None):
    """
    Log an action to the audit log.

    Runs inside its own savepoint so a failed audit write never breaks
    the caller's transaction.

    Args:
        account_id: Account the action belongs to
        actor_id: User who performed the action (None for scheduled jobs)
        action: Action type (AuditLog.ACTION_*)
        resource_type: Type of resource (AuditLog.RESOURCE_*)
        resource_id: ID of the resource
        description: Human-readable description
        metadata: Additional context data (optional)

    Returns:
        AuditLog instance, or None when the write failed

    Example:
        log_action(
            account_id=lease.account_id,
            actor_id=user.id,
            action=AuditLog.ACTION_CREATE,
            resource_type=AuditLog.RESOURCE_LEASE,
            resource_id=lease.id,
            description=f"Created lease {lease.lease_number}",
        )
    """
    try:
        with transaction.atomic():
            audit_log = AuditLog.objects.create(
                account_id=account_id,
                user_id=actor_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                description=description,
                metadata=metadata or {}
            )

        logger.info(f"Audit: user #{actor_id} - {action} - {resource_type} #{resource_id}")
        return audit_log

    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {e}", exc_info=True)
        return None


def get_resource_audit_trail(account_id, resource_type, resource_id, limit=50):
    """
    Get the audit trail for a specific resource of an account.

    Returns:
        QuerySet of AuditLog entries, newest first
    """
    return AuditLog.objects.for_account(account_id).for_resource(
        resource_type, resource_id
    ).order_by('-timestamp', '-id')[:limit]
