"""
Lease registry tests.

Covers:
- Lease creation with generated and supplied lease numbers
- Term validation
- Status lifecycle
- Security deposit opened alongside the lease
- Co-renters
"""
from datetime import date
from decimal import Decimal

import pytest
from django.utils import timezone

from audit.models import AuditLog
from core.constants import LeaseStatus
from core.exceptions import AlreadyExistsError, InvalidStateError, NotFoundError, ValidationError
from deposits.models import SecurityDeposit
from leases.services import LeaseService


@pytest.mark.django_db
class TestCreateLease:

    def test_generated_lease_numbers_follow_the_yearly_sequence(self, make_lease):
        year = timezone.localdate().year

        first = make_lease()
        second = make_lease()

        assert first.lease_number == f"BAIL-{year}-0001"
        assert second.lease_number == f"BAIL-{year}-0002"

    def test_supplied_lease_number_must_be_unique(self, make_lease):
        make_lease(lease_number='BAIL-2020-0042')

        with pytest.raises(AlreadyExistsError):
            make_lease(lease_number='BAIL-2020-0042')

    def test_generated_number_skips_a_number_already_supplied(self, make_lease):
        year = timezone.localdate().year
        make_lease(lease_number=f"BAIL-{year}-0001")

        lease = make_lease()

        assert lease.lease_number == f"BAIL-{year}-0002"

    def test_currency_defaults_to_account_currency(self, make_lease):
        assert make_lease().currency == 'XOF'
        assert make_lease(currency='eur').currency == 'EUR'

    def test_deposit_is_opened_with_the_target_amount(self, make_lease):
        lease = make_lease(security_deposit_amount=Decimal('200000'))

        deposit = SecurityDeposit.objects.get(lease=lease)
        assert deposit.target_amount == Decimal('200000.00')
        assert deposit.held_amount == Decimal('0')
        assert deposit.collected_at is None

    def test_creation_is_audited(self, account, make_lease):
        lease = make_lease()

        assert AuditLog.objects.for_resource(AuditLog.RESOURCE_LEASE, lease.id).filter(
            account=account, action=AuditLog.ACTION_CREATE
        ).exists()

    @pytest.mark.parametrize('overrides', [
        {'end_date': date(2024, 12, 31)},
        {'due_day_of_month': 0},
        {'billing_frequency': 'WEEKLY'},
        {'rent_amount': Decimal('-1')},
        {'penalty_rate': Decimal('1.5')},
        {'status': LeaseStatus.ENDED},
    ])
    def test_invalid_terms_are_rejected(self, make_lease, overrides):
        with pytest.raises(ValidationError):
            make_lease(**overrides)


@pytest.mark.django_db
class TestLeaseStatus:

    def test_active_lease_can_be_suspended_and_resumed(self, account, make_lease):
        lease = make_lease()
        service = LeaseService()

        service.update_lease_status(account.id, lease.id, LeaseStatus.SUSPENDED)
        lease = service.update_lease_status(account.id, lease.id, LeaseStatus.ACTIVE)

        assert lease.status == LeaseStatus.ACTIVE

    def test_ended_lease_is_terminal(self, account, make_lease):
        lease = make_lease()
        service = LeaseService()
        service.update_lease_status(account.id, lease.id, LeaseStatus.ENDED)

        with pytest.raises(InvalidStateError):
            service.update_lease_status(account.id, lease.id, LeaseStatus.ACTIVE)

    def test_other_account_cannot_read_the_lease(self, other_account, make_lease):
        lease = make_lease()

        with pytest.raises(NotFoundError):
            LeaseService().get_lease(other_account.id, lease.id)


@pytest.mark.django_db
class TestCoRenters:

    def test_add_and_list(self, account, owner, make_lease):
        lease = make_lease()
        service = LeaseService()

        service.add_co_renter(account.id, lease.id, 'renter-8', actor_id=owner.id)
        service.add_co_renter(account.id, lease.id, 'renter-9')

        refs = [c.renter_ref for c in service.list_co_renters(account.id, lease.id)]
        assert refs == ['renter-8', 'renter-9']
        assert AuditLog.objects.for_resource(AuditLog.RESOURCE_LEASE, lease.id).filter(
            action=AuditLog.ACTION_CO_RENTER_ADD, user=owner
        ).exists()

    def test_same_renter_cannot_be_added_twice(self, account, make_lease):
        lease = make_lease()
        service = LeaseService()
        service.add_co_renter(account.id, lease.id, 'renter-8')

        with pytest.raises(AlreadyExistsError) as exc_info:
            service.add_co_renter(account.id, lease.id, 'renter-8')

        assert exc_info.value.code == 'CO_RENTER_EXISTS'
        assert lease.co_renters.count() == 1

    def test_same_renter_on_two_leases(self, account, make_lease):
        service = LeaseService()
        first, second = make_lease(), make_lease()

        service.add_co_renter(account.id, first.id, 'renter-8')
        service.add_co_renter(account.id, second.id, 'renter-8')

        assert second.co_renters.count() == 1

    def test_blank_renter_ref(self, account, make_lease):
        with pytest.raises(ValidationError):
            LeaseService().add_co_renter(account.id, make_lease().id, '   ')

    def test_remove(self, account, make_lease):
        lease = make_lease()
        service = LeaseService()
        service.add_co_renter(account.id, lease.id, 'renter-8')

        service.remove_co_renter(account.id, lease.id, 'renter-8')

        assert service.list_co_renters(account.id, lease.id) == []
        assert AuditLog.objects.for_resource(AuditLog.RESOURCE_LEASE, lease.id).filter(
            action=AuditLog.ACTION_CO_RENTER_REMOVE
        ).exists()
        with pytest.raises(NotFoundError):
            service.remove_co_renter(account.id, lease.id, 'renter-8')

    def test_lease_of_another_account(self, other_account, make_lease):
        lease = make_lease()
        service = LeaseService()

        with pytest.raises(NotFoundError):
            service.add_co_renter(other_account.id, lease.id, 'renter-8')
        with pytest.raises(NotFoundError):
            service.list_co_renters(other_account.id, lease.id)
