from django.contrib import admin
from .models import DocumentCounter, RentalDocument


@admin.register(RentalDocument)
class RentalDocumentAdmin(admin.ModelAdmin):
    list_display = ['document_number', 'doc_type', 'revision', 'status', 'account', 'issued_at']
    list_filter = ['doc_type', 'status']
    search_fields = ['document_number', 'source_key']
    readonly_fields = [f.name for f in RentalDocument._meta.fields]


@admin.register(DocumentCounter)
class DocumentCounterAdmin(admin.ModelAdmin):
    list_display = ['account', 'doc_type', 'period_key', 'last_number', 'updated_at']
    list_filter = ['doc_type']
    readonly_fields = ['account', 'doc_type', 'period_key', 'last_number', 'updated_at']
