"""
Management command tests.
"""
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from accounts.models import Account
from core.constants import UserRole
from installments.models import Installment
from installments.services import InstallmentService
from users.models import User


@pytest.mark.django_db
class TestGenerateInstallmentsCommand:

    def test_generates_for_leases_without_schedule(self, make_lease):
        lease = make_lease()
        out = StringIO()

        call_command('generate_installments', stdout=out)

        assert Installment.objects.filter(lease=lease).count() == 12
        call_command('generate_installments', '--lease', str(lease.id), stdout=out)
        assert Installment.objects.filter(lease=lease).count() == 12


@pytest.mark.django_db
class TestCalculatePenaltiesCommand:

    def test_dry_run_changes_nothing(self, account, make_lease):
        lease = make_lease(penalty_mode='FIXED_AMOUNT', penalty_fixed_amount='2000')
        InstallmentService().generate_installments(account.id, lease.id)
        out = StringIO()

        call_command('calculate_penalties', '--date', '2025-02-01', '--dry-run', stdout=out)

        assert 'DRY RUN' in out.getvalue()
        assert not Installment.objects.filter(lease=lease, penalty_amount__gt=0).exists()

        call_command('calculate_penalties', '--date', '2025-02-01', '--account', str(account.id), stdout=out)
        assert Installment.objects.get(lease=lease, period_month=1).penalty_amount == 2000

    def test_bad_date(self):
        with pytest.raises(CommandError):
            call_command('calculate_penalties', '--date', '01/02/2025', stdout=StringIO())


@pytest.mark.django_db
class TestCreateAccountCommand:

    def test_creates_account_and_owner(self):
        call_command('create_account', 'Agence Yopougon', 'yopougon', '--password', 'pw-12345', stdout=StringIO())

        account = Account.objects.get(name='Agence Yopougon')
        user = User.objects.get(username='yopougon')
        assert user.account == account
        assert user.role == UserRole.OWNER
        assert user.check_password('pw-12345')
