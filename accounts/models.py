from django.db import models
from django.conf import settings


def default_currency():
    return getattr(settings, 'RENTAL_DEFAULT_CURRENCY', 'XOF')


class Account(models.Model):
    """Multi-tenant account - the agency that owns leases, payments and documents"""

    name = models.CharField(max_length=255, help_text="Agency/organisation name")
    default_currency = models.CharField(max_length=3, default=default_currency)
    is_active = models.BooleanField(default=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    @property
    def owner(self):
        """Get the owner user (first user with OWNER role)"""
        return self.users.filter(role='OWNER').first()
