"""
Document renderers.

A renderer is any callable taking a RentalDocument and returning
``(file_ref, content_hash)``. The active renderer is configured with the
RENTAL_DOCUMENT_RENDERER setting (dotted path); template storage and DOCX/PDF
generation live outside this service.
"""
import hashlib
import logging
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)


def render_text_document(document):
    """Write a plain-text summary of the document under MEDIA_ROOT/documents"""
    lines = [
        f"Document: {document.document_number}",
        f"Type: {document.get_doc_type_display()}",
        f"Revision: {document.revision}",
        f"Source: {document.source_key}",
    ]
    if document.lease_id:
        lease = document.lease
        lines += [
            f"Lease: {lease.lease_number}",
            f"Renter: {lease.renter_ref}",
            f"Rent: {lease.rent_amount} {lease.currency}",
        ]
    if document.payment_id:
        payment = document.payment
        lines += [
            f"Payment: {payment.amount} {payment.currency} ({payment.get_method_display()})",
            f"Paid at: {payment.succeeded_at or payment.initiated_at}",
        ]
    content = "\n".join(lines).encode('utf-8')

    relative = Path('documents') / str(document.account_id) / f"{document.document_number}-r{document.revision}.txt"
    target = Path(settings.MEDIA_ROOT) / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)

    logger.info(f"Rendered document {document.document_number} to {relative}")
    return str(relative), hashlib.sha256(content).hexdigest()
