"""
Audit Log Serializers
"""

from rest_framework import serializers
from audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    """
    Serializer for AuditLog model.

    Read-only: Audit logs cannot be created/updated via API.
    """

    user_display = serializers.CharField(read_only=True)
    user_username = serializers.CharField(source='user.username', read_only=True, allow_null=True)
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'account',
            'user',
            'user_username',
            'user_display',
            'action',
            'action_display',
            'resource_type',
            'resource_id',
            'description',
            'metadata',
            'timestamp'
        ]
        read_only_fields = fields
