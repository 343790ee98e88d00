"""
Shared fixtures: two isolated accounts, an owner user, an authenticated API
client and a lease factory going through LeaseService.
"""
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.models import Account
from core.constants import UserRole
from core.dto import LeaseDTO, PaymentDTO
from leases.services import LeaseService
from payments.services import PaymentLedgerService
from users.models import User


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.RENTAL_OPEN_ENDED_HORIZON_MONTHS = 3
    return settings.MEDIA_ROOT


@pytest.fixture
def account(db):
    return Account.objects.create(name="Agence Plateau", default_currency="XOF")


@pytest.fixture
def other_account(db):
    return Account.objects.create(name="Agence Cocody", default_currency="XOF")


@pytest.fixture
def owner(account):
    return User.objects.create_user(
        username='owner', password='s3cret-pass', account=account, role=UserRole.OWNER
    )


@pytest.fixture
def manager(account):
    return User.objects.create_user(
        username='manager', password='s3cret-pass', account=account, role=UserRole.MANAGER
    )


@pytest.fixture
def api_client(owner):
    client = APIClient()
    client.force_authenticate(user=owner)
    return client


@pytest.fixture
def make_lease(account):
    """Create a 2025 monthly lease; keyword arguments override LeaseDTO fields"""
    def _make(target_account=None, **overrides):
        values = {
            'property_ref': 'prop-12',
            'renter_ref': 'renter-7',
            'start_date': date(2025, 1, 1),
            'end_date': date(2025, 12, 31),
            'due_day_of_month': 5,
            'rent_amount': Decimal('100000'),
        }
        values.update(overrides)
        return LeaseService().create_lease((target_account or account).id, LeaseDTO(**values))
    return _make


@pytest.fixture
def make_payment(account):
    counter = {'n': 0}

    def _make(amount, lease=None, method='CASH', key=None, **extra):
        counter['n'] += 1
        data = PaymentDTO(
            idempotency_key=key or f"pay-{counter['n']}",
            method=method,
            amount=Decimal(amount),
            lease_id=lease.id if lease else None,
            **extra
        )
        return PaymentLedgerService().create_payment(account.id, data)
    return _make
