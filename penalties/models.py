from django.db import models
from django.conf import settings
from accounts.models import Account
from core.constants import PenaltyMode


class PenaltyAssessment(models.Model):
    """
    Latest late-penalty evaluation of an installment.
    A manual override freezes the amount; batch runs leave it untouched.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='penalty_assessments')
    installment = models.OneToOneField('installments.Installment', on_delete=models.CASCADE, related_name='penalty_assessment')
    calculated_on = models.DateField(help_text="The 'today' the amount was computed for")
    days_late = models.PositiveIntegerField(default=0)
    mode = models.CharField(max_length=20, choices=PenaltyMode.CHOICES)
    rate = models.DecimalField(max_digits=7, decimal_places=4, null=True, blank=True)
    fixed_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    currency = models.CharField(max_length=3)

    is_manual_override = models.BooleanField(default=False)
    override_reason = models.TextField(blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Penalty Assessment"
        verbose_name_plural = "Penalty Assessments"
        ordering = ['-calculated_on', '-id']

    def __str__(self):
        flag = " (manual)" if self.is_manual_override else ""
        return f"Penalty {self.amount} {self.currency} on installment #{self.installment_id}{flag}"
