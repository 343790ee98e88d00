from django.db import models
from accounts.models import Account
from core.constants import InstallmentStatus
from core.money import ZERO


class Installment(models.Model):
    """
    One billing period of a lease.
    amount_paid always equals the sum of the allocations made to it.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='installments')
    lease = models.ForeignKey('leases.Lease', on_delete=models.CASCADE, related_name='installments')
    period_year = models.PositiveSmallIntegerField()
    period_month = models.PositiveSmallIntegerField()
    due_date = models.DateField(db_index=True)
    status = models.CharField(max_length=10, choices=InstallmentStatus.CHOICES, default=InstallmentStatus.DUE)
    currency = models.CharField(max_length=3)

    amount_rent = models.DecimalField(max_digits=14, decimal_places=2)
    amount_service = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    amount_other_fees = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    penalty_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Installment"
        verbose_name_plural = "Installments"
        ordering = ['due_date', 'period_year', 'period_month', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['lease', 'period_year', 'period_month'],
                name='unique_installment_period_per_lease'
            ),
        ]
        indexes = [
            models.Index(fields=['account', 'status'], name='inst_account_status_idx'),
            models.Index(fields=['lease', 'status'], name='inst_lease_status_idx'),
        ]

    def __str__(self):
        return f"{self.lease.lease_number} {self.period_year}-{self.period_month:02d} ({self.status})"

    @property
    def base_due(self):
        """Rent + service + other fees, penalty excluded"""
        return self.amount_rent + self.amount_service + self.amount_other_fees

    @property
    def total_due(self):
        return self.base_due + self.penalty_amount

    @property
    def remaining_due(self):
        return max(ZERO, self.total_due - self.amount_paid)

    @property
    def is_paid(self):
        return self.status == InstallmentStatus.PAID

    def days_late(self, today):
        return max(0, (today - self.due_date).days)
