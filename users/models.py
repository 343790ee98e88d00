from django.contrib.auth.models import AbstractUser
from django.db import models
from accounts.models import Account
from core.constants import UserRole


class User(AbstractUser):
    """Custom User model - Owner/Manager acting on behalf of an account"""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='users', null=True, blank=True)
    role = models.CharField(max_length=20, choices=UserRole.CHOICES, default=UserRole.OWNER)
    phone = models.CharField(max_length=20, blank=True)

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
