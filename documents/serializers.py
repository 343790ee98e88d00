from rest_framework import serializers

from core.constants import DocumentType
from .models import RentalDocument


class RentalDocumentSerializer(serializers.ModelSerializer):
    doc_type_display = serializers.CharField(source='get_doc_type_display', read_only=True)

    class Meta:
        model = RentalDocument
        fields = [
            'id', 'doc_type', 'doc_type_display', 'document_number', 'revision', 'source_key',
            'lease', 'payment', 'status', 'file_ref', 'content_hash', 'error_message', 'issued_at'
        ]
        read_only_fields = fields


class DocumentIssueSerializer(serializers.Serializer):
    doc_type = serializers.ChoiceField(choices=[
        DocumentType.LEASE_CONTRACT, DocumentType.RENT_RECEIPT, DocumentType.RENT_STATEMENT,
    ])
    source_key = serializers.CharField(max_length=64)
