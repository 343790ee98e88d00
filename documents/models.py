from django.db import models
from django.conf import settings
from accounts.models import Account
from core.constants import DocumentType, DocumentStatus


class DocumentCounter(models.Model):
    """
    Per-account sequence for document numbers.
    One row per (account, doc_type, period_key); last_number only ever grows
    and is changed through an F() increment under a row lock.
    """

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='document_counters')
    doc_type = models.CharField(max_length=20, choices=DocumentType.CHOICES)
    period_key = models.CharField(max_length=7, help_text="YYYY for annual sequences, YYYY-MM for monthly ones")
    last_number = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Document Counter"
        verbose_name_plural = "Document Counters"
        constraints = [
            models.UniqueConstraint(
                fields=['account', 'doc_type', 'period_key'],
                name='unique_document_counter_key'
            ),
        ]

    def __str__(self):
        return f"{self.doc_type} {self.period_key}: {self.last_number}"


class RentalDocument(models.Model):
    """An issued, numbered document (contract, receipt, statement)"""

    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='documents')
    doc_type = models.CharField(max_length=20, choices=DocumentType.CHOICES)
    source_key = models.CharField(max_length=64, help_text="Lease id or payment id the document was issued for")
    lease = models.ForeignKey('leases.Lease', on_delete=models.PROTECT, related_name='documents', null=True, blank=True)
    payment = models.ForeignKey('payments.Payment', on_delete=models.PROTECT, related_name='documents', null=True, blank=True)
    document_number = models.CharField(max_length=32, db_index=True)
    revision = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=10, choices=DocumentStatus.CHOICES, default=DocumentStatus.ISSUED)
    file_ref = models.CharField(max_length=500, blank=True)
    content_hash = models.CharField(max_length=64, blank=True)
    error_message = models.TextField(blank=True)
    issued_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    class Meta:
        verbose_name = "Rental Document"
        verbose_name_plural = "Rental Documents"
        ordering = ['-issued_at', '-id']
        indexes = [
            models.Index(fields=['account', 'doc_type', 'source_key'], name='document_source_idx'),
        ]

    def __str__(self):
        return f"{self.document_number} ({self.get_doc_type_display()})"
