from django.db import models
from django.conf import settings
from django.core.exceptions import PermissionDenied
from accounts.models import Account
from core.constants import DepositMovementType


class SecurityDeposit(models.Model):
    """
    Security deposit of a lease, tracked apart from rent.
    held_amount is a cache of collected_amount minus refunds and deductions,
    recomputed from the movement ledger on every write.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='security_deposits')
    lease = models.OneToOneField('leases.Lease', on_delete=models.CASCADE, related_name='security_deposit')
    currency = models.CharField(max_length=3)
    target_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    collected_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    held_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    collected_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Security Deposit"
        verbose_name_plural = "Security Deposits"

    def __str__(self):
        return f"Deposit for {self.lease.lease_number}: {self.held_amount}/{self.target_amount} {self.currency}"

    @property
    def is_collected(self):
        return self.collected_at is not None


class DepositMovement(models.Model):
    """Append-only ledger entry of a security deposit"""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='deposit_movements')
    deposit = models.ForeignKey(SecurityDeposit, on_delete=models.CASCADE, related_name='movements')
    type = models.CharField(max_length=10, choices=DepositMovementType.CHOICES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment = models.ForeignKey('payments.Payment', on_delete=models.PROTECT, null=True, blank=True, related_name='deposit_movements')
    installment = models.ForeignKey('installments.Installment', on_delete=models.PROTECT, null=True, blank=True, related_name='deposit_movements')
    note = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Deposit Movement"
        verbose_name_plural = "Deposit Movements"
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.type} {self.amount}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise PermissionDenied("Deposit movements are immutable and cannot be modified after creation.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Deposit movements are immutable and cannot be deleted.")
