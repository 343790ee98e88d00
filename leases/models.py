from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from accounts.models import Account
from core.constants import LeaseStatus, BillingFrequency, PenaltyMode, DefaultLimits


class Lease(models.Model):
    """
    Rental contract between an owner and a renter.
    Property, renter and owner live in external systems and are stored as opaque references.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='leases')
    property_ref = models.CharField(max_length=64, blank=True)
    renter_ref = models.CharField(max_length=64, blank=True, db_index=True)
    owner_ref = models.CharField(max_length=64, blank=True)
    lease_number = models.CharField(max_length=32)
    status = models.CharField(max_length=10, choices=LeaseStatus.CHOICES, default=LeaseStatus.ACTIVE)

    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True, help_text="Empty for open-ended leases")
    billing_frequency = models.CharField(max_length=12, choices=BillingFrequency.CHOICES, default=BillingFrequency.MONTHLY)
    due_day_of_month = models.PositiveSmallIntegerField(
        default=DefaultLimits.DUE_DAY,
        validators=[MinValueValidator(1), MaxValueValidator(31)]
    )
    currency = models.CharField(max_length=3)

    rent_amount = models.DecimalField(max_digits=14, decimal_places=2)
    service_charge_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    security_deposit_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    # Penalty terms
    penalty_grace_days = models.PositiveIntegerField(default=0)
    penalty_mode = models.CharField(max_length=20, choices=PenaltyMode.CHOICES, default=PenaltyMode.PERCENT_OF_BALANCE)
    penalty_rate = models.DecimalField(max_digits=7, decimal_places=4, default=0, help_text="Fraction, 0.10 = 10%")
    penalty_fixed_amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    penalty_cap = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    min_balance_threshold = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Lease"
        verbose_name_plural = "Leases"
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['account', 'lease_number'], name='unique_lease_number_per_account'),
        ]
        indexes = [
            models.Index(fields=['account', 'status'], name='lease_account_status_idx'),
        ]

    def __str__(self):
        return f"{self.lease_number} ({self.get_status_display()})"

    @property
    def is_open_ended(self):
        return self.end_date is None

    @property
    def is_closed(self):
        return self.status in LeaseStatus.CLOSED


class LeaseCoRenter(models.Model):
    """Additional renter sharing a lease (same opaque reference scheme as Lease.renter_ref)"""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='lease_co_renters')
    lease = models.ForeignKey(Lease, on_delete=models.CASCADE, related_name='co_renters')
    renter_ref = models.CharField(max_length=64)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Co-renter"
        verbose_name_plural = "Co-renters"
        ordering = ['created_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['lease', 'renter_ref'], name='unique_co_renter_per_lease'),
        ]

    def __str__(self):
        return f"{self.renter_ref} on {self.lease_id}"
