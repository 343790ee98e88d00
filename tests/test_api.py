"""
REST API tests.

Covers:
- Authentication and role checks
- Error kind to HTTP status mapping
- Lease, installment, payment, deposit, penalty and document endpoints
- Tenant isolation through the API
"""
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from core.exceptions import FatalError
from api.exceptions import rental_exception_handler
from installments.models import Installment
from installments.services import InstallmentService

LEASE_PAYLOAD = {
    'property_ref': 'prop-1',
    'renter_ref': 'renter-1',
    'start_date': '2025-01-01',
    'end_date': '2025-12-31',
    'due_day_of_month': 5,
    'rent_amount': '100000.00',
    'service_charge_amount': '20000.00',
    'security_deposit_amount': '200000.00',
}


@pytest.mark.django_db
class TestAuthentication:

    def test_anonymous_requests_are_rejected(self):
        response = APIClient().get('/api/leases/')

        assert response.status_code == 401

    def test_jwt_login(self, owner):
        response = APIClient().post(
            '/api/auth/login/', {'username': 'owner', 'password': 's3cret-pass'}, format='json'
        )

        assert response.status_code == 200
        assert 'access' in response.data

    def test_penalty_run_is_owner_only(self, manager):
        client = APIClient()
        client.force_authenticate(user=manager)

        response = client.post('/api/penalties/run/', {}, format='json')

        assert response.status_code == 403


@pytest.mark.django_db
class TestLeaseEndpoints:

    def test_create_and_retrieve(self, api_client):
        response = api_client.post('/api/leases/', LEASE_PAYLOAD, format='json')

        assert response.status_code == 201
        assert response.data['lease_number'].startswith('BAIL-')
        detail = api_client.get(f"/api/leases/{response.data['id']}/")
        assert detail.status_code == 200
        assert detail.data['rent_amount'] == '100000.00'

    def test_list_is_paginated(self, api_client, make_lease):
        make_lease()
        make_lease()

        response = api_client.get('/api/leases/', {'page_size': 1})

        assert response.status_code == 200
        assert response.data['count'] == 2
        assert response.data['total_pages'] == 2
        assert len(response.data['results']) == 1

    def test_invalid_payload(self, api_client):
        response = api_client.post('/api/leases/', {**LEASE_PAYLOAD, 'rent_amount': 'abc'}, format='json')

        assert response.status_code == 400

    def test_lease_of_another_account_is_not_found(self, api_client, other_account, make_lease):
        lease = make_lease(target_account=other_account)

        response = api_client.get(f'/api/leases/{lease.id}/')

        assert response.status_code == 404
        assert response.data['kind'] == 'NOT_FOUND'

    def test_generate_twice_conflicts(self, api_client, make_lease):
        lease = make_lease()

        first = api_client.post(f'/api/leases/{lease.id}/generate_installments/')
        second = api_client.post(f'/api/leases/{lease.id}/generate_installments/')

        assert first.status_code == 201
        assert first.data['count'] == 12
        assert second.status_code == 409
        assert second.data['kind'] == 'ALREADY_EXISTS'
        assert second.data['code'] == 'INSTALLMENTS_EXIST'

    def test_invalid_transition_is_a_bad_request(self, api_client, make_lease):
        lease = make_lease()
        api_client.post(f'/api/leases/{lease.id}/status/', {'status': 'ENDED'}, format='json')

        response = api_client.post(f'/api/leases/{lease.id}/status/', {'status': 'ACTIVE'}, format='json')

        assert response.status_code == 400
        assert response.data['kind'] == 'INVALID_STATE'

    def test_deposit_collect_twice(self, api_client, make_lease, make_payment):
        lease = make_lease(security_deposit_amount=Decimal('200000'))
        payment = make_payment('200000', lease=lease)
        url = f'/api/leases/{lease.id}/deposit/collect/'
        body = {'amount': '200000.00', 'payment_id': payment.id}

        first = api_client.post(url, body, format='json')
        second = api_client.post(url, body, format='json')

        assert first.status_code == 200
        assert first.data['held_amount'] == '200000.00'
        assert second.status_code == 409

    def test_deposit_collect_without_payment(self, api_client, make_lease):
        lease = make_lease(security_deposit_amount=Decimal('200000'))

        response = api_client.post(f'/api/leases/{lease.id}/deposit/collect/', {'amount': '200000.00'}, format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'MISSING_PAYMENT_ID'

    def test_co_renters(self, api_client, make_lease):
        lease = make_lease()
        url = f'/api/leases/{lease.id}/co-renters/'

        added = api_client.post(url, {'renter_ref': 'renter-8'}, format='json')
        duplicate = api_client.post(url, {'renter_ref': 'renter-8'}, format='json')
        listed = api_client.get(url)
        removed = api_client.delete(f'{url}renter-8/')

        assert added.status_code == 201
        assert added.data['renter_ref'] == 'renter-8'
        assert duplicate.status_code == 409
        assert duplicate.data['code'] == 'CO_RENTER_EXISTS'
        assert [c['renter_ref'] for c in listed.data] == ['renter-8']
        assert removed.status_code == 204
        assert api_client.delete(f'{url}renter-8/').status_code == 404


@pytest.mark.django_db
class TestPaymentEndpoints:

    @pytest.fixture
    def lease(self, account, make_lease):
        lease = make_lease()
        InstallmentService().generate_installments(account.id, lease.id)
        return lease

    def test_idempotency_key_header(self, api_client, lease):
        payload = {'method': 'CASH', 'amount': '100000.00', 'lease_id': lease.id}

        first = api_client.post('/api/payments/', payload, format='json', HTTP_IDEMPOTENCY_KEY='receipt-991')
        replay = api_client.post('/api/payments/', payload, format='json', HTTP_IDEMPOTENCY_KEY='receipt-991')

        assert first.status_code == 201
        assert replay.status_code == 201
        assert replay.data['id'] == first.data['id']

    def test_missing_key(self, api_client, lease):
        response = api_client.post('/api/payments/', {'method': 'CASH', 'amount': '10.00', 'lease_id': lease.id},
                                   format='json')

        assert response.status_code == 400
        assert response.data['code'] == 'MISSING_IDEMPOTENCY_KEY'

    def test_allocate(self, api_client, lease):
        payment = api_client.post('/api/payments/', {
            'idempotency_key': 'k-1', 'method': 'CASH', 'amount': '150000.00', 'lease_id': lease.id,
        }, format='json')

        response = api_client.post(f"/api/payments/{payment.data['id']}/allocate/", {}, format='json')

        assert response.status_code == 201
        assert response.data['total_allocated'] == '150000.00'
        assert len(response.data['allocations']) == 2
        listed = api_client.get(f"/api/payments/{payment.data['id']}/allocations/")
        assert len(listed.data) == 2

    def test_installments_listing(self, api_client, lease):
        response = api_client.get('/api/installments/', {'lease': lease.id, 'month': 3})

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['total_due'] == '100000.00'

    def test_penalty_override_endpoint(self, api_client, lease):
        january = Installment.objects.get(lease=lease, period_month=1)

        response = api_client.post('/api/penalties/override/', {
            'installment_id': january.id, 'amount': '1500.00', 'reason': 'Agreed late fee',
        }, format='json')

        assert response.status_code == 200
        assert response.data['is_manual_override'] is True

    def test_penalty_run(self, api_client, lease):
        response = api_client.post('/api/penalties/run/', {'date': '2025-01-20'}, format='json')

        assert response.status_code == 200
        assert response.data['processed'] == 1

    def test_issue_receipt(self, api_client, lease, django_capture_on_commit_callbacks):
        payment = api_client.post('/api/payments/', {
            'idempotency_key': 'k-2', 'method': 'CASH', 'amount': '1000.00', 'lease_id': lease.id,
        }, format='json')

        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post('/api/documents/issue/', {
                'doc_type': 'RENT_RECEIPT', 'source_key': str(payment.data['id']),
            }, format='json')

        assert response.status_code == 201
        assert response.data['document_number'].startswith('RCU-')


@pytest.mark.django_db
class TestAuditEndpoint:

    def test_only_own_account_logs_are_listed(self, api_client, other_account, make_lease):
        make_lease()
        make_lease(target_account=other_account)

        response = api_client.get('/api/audit/logs/')

        assert response.status_code == 200
        assert response.data['count'] == 1


class TestExceptionHandler:

    def test_fatal_errors_map_to_500(self):
        response = rental_exception_handler(FatalError(message="boom", code="DATASTORE_ERROR"), {})

        assert response.status_code == 500
        assert response.data == {'detail': 'boom', 'kind': 'FATAL', 'code': 'DATASTORE_ERROR', 'details': {}}
