"""
Document services - sequence numbering and document issuance.
"""
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string

from audit.helpers import log_action
from audit.models import AuditLog
from core.constants import DocumentType, DocumentStatus, DefaultLimits
from core.dto import PageDTO
from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService
from .models import RentalDocument
from .repositories import DocumentCounterRepository, RentalDocumentRepository


def period_key_for(doc_type: str, on_date: date) -> str:
    """Annual key (YYYY) for contracts and lease numbers, monthly (YYYY-MM) otherwise"""
    if doc_type in DocumentType.ANNUAL:
        return f"{on_date.year:04d}"
    return f"{on_date.year:04d}-{on_date.month:02d}"


def format_document_number(doc_type: str, period_key: str, number: int) -> str:
    """
    BAIL-YYYY-NNNN, RCU-YYYYMM-NNNN or RLV-YYYYMM-NNNN.
    The sequence is zero-padded to four digits and simply grows wider past 9999.
    """
    prefix = DocumentType.PREFIXES[doc_type]
    padded = str(number).zfill(DefaultLimits.DOCUMENT_NUMBER_WIDTH)
    return f"{prefix}-{period_key.replace('-', '')}-{padded}"


class DocumentNumberingService(BaseService):
    """Issues gap-free, per-account sequence numbers"""

    def __init__(self):
        super().__init__()
        self.counter_repo = DocumentCounterRepository()

    def next_number(self, account_id: int, doc_type: str, period_key: str) -> int:
        if doc_type not in DocumentType.PREFIXES:
            raise ValidationError(
                message=f"Unsupported document type: {doc_type}",
                code="UNSUPPORTED_DOCUMENT_TYPE"
            )
        with self.datastore_guard("next_number", account_id=account_id, doc_type=doc_type, period_key=period_key):
            number = self.counter_repo.increment(account_id, doc_type, period_key)
        self.log_info("Document number issued", account_id=account_id, doc_type=doc_type,
                      period_key=period_key, number=number)
        return number

    def issue_number(self, account_id: int, doc_type: str, on_date: Optional[date] = None) -> str:
        """Issue the next formatted number for the period containing on_date"""
        period_key = period_key_for(doc_type, self.today(on_date))
        number = self.next_number(account_id, doc_type, period_key)
        return format_document_number(doc_type, period_key, number)

    def issue_lease_number(self, account_id: int, is_taken, on_date: Optional[date] = None) -> str:
        """
        Issue a BAIL-YYYY-NNNN lease number.
        Numbers already used by a caller-supplied lease_number are skipped.
        """
        lease_number = self.issue_number(account_id, DocumentType.LEASE_NUMBER, on_date)
        while is_taken(lease_number):
            self.log_warning("Generated lease number already taken, issuing next",
                             account_id=account_id, lease_number=lease_number)
            lease_number = self.issue_number(account_id, DocumentType.LEASE_NUMBER, on_date)
        return lease_number


class DocumentService(BaseService):
    """
    Records issued documents and hands them to the configured renderer.

    Rendering happens after the issuing transaction commits, so a renderer
    failure only marks the document FAILED.
    """

    def __init__(self):
        super().__init__()
        self.document_repo = RentalDocumentRepository()
        self.numbering = DocumentNumberingService()

    def _resolve_source(self, account_id: int, doc_type: str, source_key):
        from leases.models import Lease
        from payments.models import Payment

        try:
            source_id = int(source_key)
        except (TypeError, ValueError):
            raise ValidationError(
                message="source_key must be a lease or payment id",
                code="INVALID_SOURCE_KEY",
                details={'source_key': str(source_key)}
            )

        if doc_type == DocumentType.RENT_RECEIPT:
            payment = Payment.objects.filter(id=source_id, account_id=account_id).first()
            if not payment:
                raise NotFoundError(resource_type="Payment", resource_id=source_id)
            return payment.lease, payment

        lease = Lease.objects.filter(id=source_id, account_id=account_id).first()
        if not lease:
            raise NotFoundError(resource_type="Lease", resource_id=source_id)
        return lease, None

    def issue_document(self, account_id: int, doc_type: str, source_key, actor_id: Optional[int] = None,
                       today: Optional[date] = None) -> RentalDocument:
        """
        Issue a numbered document for a lease (contract, statement) or a payment (receipt).

        Lease contracts reuse the lease's own lease_number; other types draw
        the next number from the (account, doc_type, period) counter.
        """
        if doc_type not in (DocumentType.LEASE_CONTRACT, DocumentType.RENT_RECEIPT, DocumentType.RENT_STATEMENT):
            raise ValidationError(
                message=f"Documents of type {doc_type} cannot be issued",
                code="UNSUPPORTED_DOCUMENT_TYPE"
            )

        lease, payment = self._resolve_source(account_id, doc_type, source_key)

        with self.datastore_guard("issue_document", account_id=account_id, doc_type=doc_type, source_key=source_key):
            with transaction.atomic():
                if doc_type == DocumentType.LEASE_CONTRACT and lease.lease_number:
                    document_number = lease.lease_number
                else:
                    document_number = self.numbering.issue_number(account_id, doc_type, today)

                document = self.document_repo.create(
                    account_id=account_id,
                    doc_type=doc_type,
                    source_key=str(source_key),
                    lease=lease,
                    payment=payment,
                    document_number=document_number,
                    created_by_id=actor_id,
                )

                log_action(
                    account_id=account_id,
                    actor_id=actor_id,
                    action=AuditLog.ACTION_ISSUE_DOCUMENT,
                    resource_type=AuditLog.RESOURCE_DOCUMENT,
                    resource_id=document.id,
                    description=f"Issued {document.get_doc_type_display()} {document_number}",
                    metadata={'source_key': str(source_key), 'doc_type': doc_type}
                )
                transaction.on_commit(lambda: self.render_document(document.id))

        self.log_info("Document issued", account_id=account_id, document_id=document.id,
                      document_number=document_number)
        return document

    def regenerate_document(self, account_id: int, document_id: int, actor_id: Optional[int] = None) -> RentalDocument:
        """Render a new revision of an existing document, keeping its number"""
        with transaction.atomic():
            document = self.document_repo.lock_for_account(account_id, document_id)
            if not document:
                raise NotFoundError(resource_type="RentalDocument", resource_id=document_id)

            self.document_repo.update(
                document,
                revision=document.revision + 1,
                status=DocumentStatus.ISSUED,
                error_message='',
            )
            log_action(
                account_id=account_id,
                actor_id=actor_id,
                action=AuditLog.ACTION_ISSUE_DOCUMENT,
                resource_type=AuditLog.RESOURCE_DOCUMENT,
                resource_id=document.id,
                description=f"Regenerated {document.document_number} (revision {document.revision})",
            )
            transaction.on_commit(lambda: self.render_document(document.id))

        return document

    def render_document(self, document_id: int):
        """Run the configured renderer; failures are recorded on the document"""
        renderer_path = getattr(settings, 'RENTAL_DOCUMENT_RENDERER', '')
        if not renderer_path:
            return None

        document = RentalDocument.objects.select_related('lease', 'payment').get(id=document_id)
        try:
            renderer = import_string(renderer_path)
            file_ref, content_hash = renderer(document)
        except Exception as e:
            self.log_error("Document rendering failed", error=e, document_id=document_id,
                           account_id=document.account_id)
            RentalDocument.objects.filter(id=document_id).update(
                status=DocumentStatus.FAILED,
                error_message=str(e)[:1000],
            )
            return None

        RentalDocument.objects.filter(id=document_id).update(
            status=DocumentStatus.RENDERED,
            file_ref=file_ref or '',
            content_hash=content_hash or '',
            error_message='',
        )
        return file_ref

    def get_document(self, account_id: int, document_id: int) -> RentalDocument:
        document = self.document_repo.get_for_account(account_id, document_id)
        if not document:
            raise NotFoundError(resource_type="RentalDocument", resource_id=document_id)
        return document

    def list_documents(self, account_id: int, doc_type: Optional[str] = None, lease_id: Optional[int] = None,
                       page: int = 1, page_size: Optional[int] = None) -> PageDTO:
        queryset = self.document_repo.get_by_account(account_id)
        if doc_type:
            queryset = queryset.filter(doc_type=doc_type)
        if lease_id:
            queryset = queryset.filter(lease_id=lease_id)
        return self.document_repo.paginate(queryset, page, page_size)
