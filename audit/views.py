"""
Audit Log API Views

Provides read-only access to the audit logs of the caller's account.
"""

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from audit.models import AuditLog
from audit.serializers import AuditLogSerializer
from audit.helpers import get_resource_audit_trail
from api.filters import AccountFilterBackend
from api.permissions import IsAccountMember, IsOwnerOrManager


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only ViewSet for audit logs.

    Query params:
    - action: filter by action type
    - resource_type: filter by resource type
    - user: filter by acting user id
    """

    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsAccountMember, IsOwnerOrManager]
    filter_backends = [AccountFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['description']
    ordering_fields = ['timestamp', 'action']
    ordering = ['-timestamp']

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('user')

        params = self.request.query_params
        if params.get('action'):
            queryset = queryset.for_action(params['action'])
        if params.get('resource_type'):
            queryset = queryset.filter(resource_type=params['resource_type'])
        if params.get('user'):
            queryset = queryset.filter(user_id=params['user'])
        return queryset

    @action(detail=False, methods=['get'])
    def resource_trail(self, request):
        """
        Get audit trail for a specific resource.

        Example: GET /api/audit/logs/resource_trail/?resource_type=Payment&resource_id=12
        """
        resource_type = request.query_params.get('resource_type')
        resource_id = request.query_params.get('resource_id')

        if not resource_type or not resource_id:
            return Response(
                {'detail': 'Both resource_type and resource_id are required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        trail = get_resource_audit_trail(request.user.account_id, resource_type, resource_id)
        serializer = self.get_serializer(trail, many=True)

        return Response({
            'resource_type': resource_type,
            'resource_id': resource_id,
            'audit_trail': serializer.data,
            'count': len(serializer.data)
        })
