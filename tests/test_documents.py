"""
Document numbering and issuance tests.

Covers:
- Number formats and period keys
- Counter sequences per (account, type, period)
- Issuance, rendering after commit, failures and regeneration
"""
from datetime import date
from pathlib import Path

import pytest

from core.constants import DocumentStatus, DocumentType
from core.exceptions import NotFoundError, ValidationError
from documents.models import RentalDocument
from documents.services import (
    DocumentNumberingService, DocumentService, format_document_number, period_key_for,
)


class TestNumberFormat:

    def test_period_keys(self):
        assert period_key_for(DocumentType.LEASE_NUMBER, date(2025, 3, 15)) == '2025'
        assert period_key_for(DocumentType.RENT_RECEIPT, date(2025, 3, 15)) == '2025-03'

    def test_formats(self):
        assert format_document_number(DocumentType.LEASE_CONTRACT, '2025', 1) == 'BAIL-2025-0001'
        assert format_document_number(DocumentType.RENT_RECEIPT, '2025-03', 7) == 'RCU-202503-0007'
        assert format_document_number(DocumentType.RENT_STATEMENT, '2025-12', 42) == 'RLV-202512-0042'

    def test_sequence_grows_past_four_digits(self):
        assert format_document_number(DocumentType.RENT_RECEIPT, '2025-03', 12345) == 'RCU-202503-12345'


@pytest.mark.django_db
class TestNumbering:

    def test_counters_are_gap_free_per_key(self, account, other_account):
        service = DocumentNumberingService()

        numbers = [service.next_number(account.id, DocumentType.RENT_RECEIPT, '2025-03') for _ in range(3)]

        assert numbers == [1, 2, 3]
        assert service.next_number(account.id, DocumentType.RENT_RECEIPT, '2025-04') == 1
        assert service.next_number(account.id, DocumentType.RENT_STATEMENT, '2025-03') == 1
        assert service.next_number(other_account.id, DocumentType.RENT_RECEIPT, '2025-03') == 1

    def test_issue_number(self, account):
        number = DocumentNumberingService().issue_number(account.id, DocumentType.RENT_STATEMENT, date(2025, 6, 1))

        assert number == 'RLV-202506-0001'

    def test_unknown_type(self, account):
        with pytest.raises(ValidationError):
            DocumentNumberingService().next_number(account.id, 'INVOICE', '2025')


@pytest.mark.django_db
class TestIssueDocument:

    def test_receipt_is_numbered_and_rendered_after_commit(self, account, make_lease, make_payment,
                                                           django_capture_on_commit_callbacks, media_root):
        payment = make_payment('100000', lease=make_lease())

        with django_capture_on_commit_callbacks(execute=True):
            document = DocumentService().issue_document(
                account.id, DocumentType.RENT_RECEIPT, payment.id, today=date(2025, 3, 15)
            )

        document.refresh_from_db()
        assert document.document_number == 'RCU-202503-0001'
        assert document.payment_id == payment.id
        assert document.status == DocumentStatus.RENDERED
        assert len(document.content_hash) == 64
        assert (Path(media_root) / document.file_ref).exists()

    def test_contract_reuses_the_lease_number(self, account, make_lease):
        lease = make_lease()

        document = DocumentService().issue_document(account.id, DocumentType.LEASE_CONTRACT, lease.id)

        assert document.document_number == lease.lease_number

    def test_renderer_failure_marks_the_document_failed(self, settings, account, make_lease,
                                                        django_capture_on_commit_callbacks):
        settings.RENTAL_DOCUMENT_RENDERER = 'tests.renderers.failing_renderer'
        lease = make_lease()

        with django_capture_on_commit_callbacks(execute=True):
            document = DocumentService().issue_document(account.id, DocumentType.RENT_STATEMENT, lease.id)

        document.refresh_from_db()
        assert document.status == DocumentStatus.FAILED
        assert 'template missing' in document.error_message

    def test_without_renderer_the_document_stays_issued(self, settings, account, make_lease,
                                                        django_capture_on_commit_callbacks):
        settings.RENTAL_DOCUMENT_RENDERER = ''

        with django_capture_on_commit_callbacks(execute=True):
            document = DocumentService().issue_document(account.id, DocumentType.RENT_STATEMENT, make_lease().id)

        document.refresh_from_db()
        assert document.status == DocumentStatus.ISSUED

    def test_regenerate_keeps_the_number(self, account, make_lease, django_capture_on_commit_callbacks):
        lease = make_lease()
        service = DocumentService()
        with django_capture_on_commit_callbacks(execute=True):
            document = service.issue_document(account.id, DocumentType.RENT_STATEMENT, lease.id)

        with django_capture_on_commit_callbacks(execute=True):
            service.regenerate_document(account.id, document.id)

        regenerated = RentalDocument.objects.get(id=document.id)
        assert regenerated.revision == 2
        assert regenerated.document_number == document.document_number
        assert regenerated.status == DocumentStatus.RENDERED
        assert regenerated.file_ref.endswith('-r2.txt')

    def test_receipt_source_must_be_a_payment_of_the_account(self, other_account, make_lease, make_payment):
        payment = make_payment('1000', lease=make_lease())

        with pytest.raises(NotFoundError):
            DocumentService().issue_document(other_account.id, DocumentType.RENT_RECEIPT, payment.id)

    def test_lease_number_documents_cannot_be_issued(self, account, make_lease):
        with pytest.raises(ValidationError):
            DocumentService().issue_document(account.id, DocumentType.LEASE_NUMBER, make_lease().id)
