from django.db import models
from django.conf import settings
from django.core.exceptions import PermissionDenied
from accounts.models import Account
from core.constants import PaymentMethod, PaymentStatus, MobileMoneyOperator


class Payment(models.Model):
    """
    A settled payment fact recorded against an account.
    idempotency_key is unique per account; replays return the original row.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='payments')
    lease = models.ForeignKey('leases.Lease', on_delete=models.PROTECT, related_name='payments', null=True, blank=True)
    renter_ref = models.CharField(max_length=64, blank=True, db_index=True)

    method = models.CharField(max_length=20, choices=PaymentMethod.CHOICES)
    # Method-specific details
    mm_operator = models.CharField(max_length=10, choices=MobileMoneyOperator.CHOICES, blank=True)
    mm_phone = models.CharField(max_length=20, blank=True)
    psp_name = models.CharField(max_length=64, blank=True)
    psp_transaction_id = models.CharField(max_length=128, blank=True)
    psp_reference = models.CharField(max_length=128, blank=True)
    check_number = models.CharField(max_length=64, blank=True)

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3)
    idempotency_key = models.CharField(max_length=128)
    status = models.CharField(max_length=10, choices=PaymentStatus.CHOICES, default=PaymentStatus.PENDING)

    initiated_at = models.DateTimeField(auto_now_add=True, db_index=True)
    succeeded_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    canceled_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    class Meta:
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        ordering = ['-initiated_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['account', 'idempotency_key'], name='unique_payment_idempotency_key'),
        ]
        indexes = [
            models.Index(fields=['account', 'status'], name='payment_account_status_idx'),
            models.Index(fields=['lease', 'status'], name='payment_lease_status_idx'),
        ]

    def __str__(self):
        return f"{self.amount} {self.currency} via {self.get_method_display()} ({self.status})"


class PaymentAllocation(models.Model):
    """
    Portion of a payment applied to one installment.
    IMMUTABLE: allocations are append-only.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='payment_allocations')
    payment = models.ForeignKey(Payment, on_delete=models.PROTECT, related_name='allocations')
    installment = models.ForeignKey('installments.Installment', on_delete=models.PROTECT, related_name='allocations')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Payment Allocation"
        verbose_name_plural = "Payment Allocations"
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.amount} {self.currency} -> installment #{self.installment_id}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise PermissionDenied("Payment allocations are immutable and cannot be modified after creation.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Payment allocations are immutable and cannot be deleted.")
