"""
Audit Log Admin - READ ONLY

Audit logs are immutable and cannot be edited or deleted via admin.
"""

import json

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for audit logs."""

    list_display = [
        'id',
        'timestamp',
        'account',
        'user_link',
        'action',
        'resource_type',
        'resource_id',
        'description_short',
    ]

    list_filter = [
        'action',
        'resource_type',
        'timestamp',
        ('user', admin.RelatedOnlyFieldListFilter),
    ]

    search_fields = ['description', 'user__username', 'account__name']

    readonly_fields = [
        'account',
        'user',
        'action',
        'resource_type',
        'resource_id',
        'description',
        'metadata_display',
        'timestamp'
    ]

    fieldsets = (
        ('Action Details', {
            'fields': ('action', 'resource_type', 'resource_id', 'description')
        }),
        ('Actor', {
            'fields': ('account', 'user')
        }),
        ('Additional Context', {
            'fields': ('metadata_display', 'timestamp'),
            'classes': ('collapse',)
        }),
    )

    date_hierarchy = 'timestamp'
    ordering = ['-timestamp']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_actions(self, request):
        """Disable bulk actions"""
        actions = super().get_actions(request)
        if 'delete_selected' in actions:
            del actions['delete_selected']
        return actions

    @admin.display(description='User')
    def user_link(self, obj):
        if obj.user:
            url = reverse('admin:users_user_change', args=[obj.user.id])
            return format_html('<a href="{}">{}</a>', url, obj.user.username)
        return "System"

    @admin.display(description='Description')
    def description_short(self, obj):
        max_length = 80
        if len(obj.description) > max_length:
            return f"{obj.description[:max_length]}..."
        return obj.description

    @admin.display(description='Metadata')
    def metadata_display(self, obj):
        if obj.metadata:
            return format_html('<pre>{}</pre>', json.dumps(obj.metadata, indent=2))
        return "No metadata"
