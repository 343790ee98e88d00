"""
Audit Log Model

IMMUTABLE: Audit logs cannot be edited or deleted after creation.
Purpose: accountability for every financial action taken on an account
(lease creation, payments, allocations, penalties, deposit movements, documents).
"""

from django.db import models
from django.conf import settings
from django.core.exceptions import PermissionDenied


# ============================================================================
# CUSTOM MANAGER AND QUERYSET
# ============================================================================

class AuditLogQuerySet(models.QuerySet):
    """Custom queryset for audit logs with filtering helpers"""

    def for_account(self, account_id):
        return self.filter(account_id=account_id)

    def for_user(self, user_id):
        return self.filter(user_id=user_id)

    def for_resource(self, resource_type, resource_id):
        """Filter logs for a specific resource"""
        return self.filter(resource_type=resource_type, resource_id=resource_id)

    def for_action(self, action):
        return self.filter(action=action)

    def recent(self, limit=100):
        return self.order_by('-timestamp')[:limit]


class AuditLogManager(models.Manager.from_queryset(AuditLogQuerySet)):
    """Custom manager for audit logs"""


# ============================================================================
# AUDIT LOG MODEL
# ============================================================================

class AuditLog(models.Model):
    """
    Immutable audit log for tracking financial actions.

    Security:
    - Logs CANNOT be edited after creation
    - Logs CANNOT be deleted (except via cascading account deletion)
    - Users only ever see logs of their own account
    """

    # Action types
    ACTION_CREATE = 'CREATE'
    ACTION_UPDATE = 'UPDATE'
    ACTION_STATUS_CHANGE = 'STATUS_CHANGE'
    ACTION_GENERATE = 'GENERATE'
    ACTION_RECORD_PAYMENT = 'RECORD_PAYMENT'
    ACTION_ALLOCATE = 'ALLOCATE'
    ACTION_PENALTY = 'PENALTY'
    ACTION_PENALTY_OVERRIDE = 'PENALTY_OVERRIDE'
    ACTION_DEPOSIT_COLLECT = 'DEPOSIT_COLLECT'
    ACTION_DEPOSIT_REFUND = 'DEPOSIT_REFUND'
    ACTION_DEPOSIT_DEDUCT = 'DEPOSIT_DEDUCT'
    ACTION_ISSUE_DOCUMENT = 'ISSUE_DOCUMENT'
    ACTION_CO_RENTER_ADD = 'CO_RENTER_ADD'
    ACTION_CO_RENTER_REMOVE = 'CO_RENTER_REMOVE'

    ACTION_CHOICES = [
        (ACTION_CREATE, 'Create'),
        (ACTION_UPDATE, 'Update'),
        (ACTION_STATUS_CHANGE, 'Status Change'),
        (ACTION_GENERATE, 'Generate Installments'),
        (ACTION_RECORD_PAYMENT, 'Record Payment'),
        (ACTION_ALLOCATE, 'Allocate Payment'),
        (ACTION_PENALTY, 'Penalty Assessed'),
        (ACTION_PENALTY_OVERRIDE, 'Penalty Override'),
        (ACTION_DEPOSIT_COLLECT, 'Deposit Collected'),
        (ACTION_DEPOSIT_REFUND, 'Deposit Refunded'),
        (ACTION_DEPOSIT_DEDUCT, 'Deposit Deducted'),
        (ACTION_ISSUE_DOCUMENT, 'Issue Document'),
        (ACTION_CO_RENTER_ADD, 'Co-renter Added'),
        (ACTION_CO_RENTER_REMOVE, 'Co-renter Removed'),
    ]

    # Resource types
    RESOURCE_LEASE = 'Lease'
    RESOURCE_INSTALLMENT = 'Installment'
    RESOURCE_PAYMENT = 'Payment'
    RESOURCE_DEPOSIT = 'SecurityDeposit'
    RESOURCE_DOCUMENT = 'RentalDocument'
    RESOURCE_ACCOUNT = 'Account'

    RESOURCE_TYPE_CHOICES = [
        (RESOURCE_LEASE, 'Lease'),
        (RESOURCE_INSTALLMENT, 'Installment'),
        (RESOURCE_PAYMENT, 'Payment'),
        (RESOURCE_DEPOSIT, 'Security Deposit'),
        (RESOURCE_DOCUMENT, 'Rental Document'),
        (RESOURCE_ACCOUNT, 'Account'),
    ]

    account = models.ForeignKey(
        'accounts.Account',
        on_delete=models.CASCADE,
        related_name='audit_logs',
        help_text="Account this action belongs to"
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="User who performed the action (empty for scheduled jobs)"
    )

    action = models.CharField(max_length=20, choices=ACTION_CHOICES, db_index=True)
    resource_type = models.CharField(max_length=50, choices=RESOURCE_TYPE_CHOICES, db_index=True)
    resource_id = models.IntegerField(db_index=True, null=True, blank=True)
    description = models.TextField(help_text="Human-readable description of the action")

    # Additional context (JSON)
    metadata = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogManager()

    class Meta:
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['account', '-timestamp'], name='audit_account_time_idx'),
            models.Index(fields=['resource_type', 'resource_id'], name='audit_resource_idx'),
            models.Index(fields=['action', '-timestamp'], name='audit_action_time_idx'),
        ]

    def __str__(self):
        username = self.user.username if self.user else 'System'
        return f"{username} - {self.action} - {self.resource_type} #{self.resource_id} - {self.timestamp}"

    def save(self, *args, **kwargs):
        """
        Override save to enforce immutability.
        Only allow creation, not updates.
        """
        if self.pk is not None:
            raise PermissionDenied(
                "Audit logs are immutable and cannot be modified after creation."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied(
            "Audit logs are immutable and cannot be deleted."
        )

    @property
    def user_display(self):
        if self.user:
            return self.user.get_full_name() or self.user.username
        return "System"
