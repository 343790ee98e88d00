from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.pagination import page_params, page_response
from api.permissions import IsAccountMember, IsOwnerOrManager
from deposits.serializers import SecurityDepositSerializer, DepositMovementRequestSerializer
from deposits.services import DepositService
from installments.serializers import InstallmentSerializer
from installments.services import InstallmentService
from .serializers import (
    LeaseSerializer, LeaseListSerializer, LeaseCreateSerializer, LeaseStatusSerializer,
    LeaseCoRenterSerializer, CoRenterRequestSerializer,
)
from .services import LeaseService


class LeaseViewSet(viewsets.GenericViewSet):
    """
    ViewSet for the Lease Registry.
    Every write goes through LeaseService / InstallmentService / DepositService.
    """
    permission_classes = [IsAuthenticated, IsAccountMember, IsOwnerOrManager]
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):
        if self.action == 'list':
            return LeaseListSerializer
        if self.action == 'create':
            return LeaseCreateSerializer
        return LeaseSerializer

    def list(self, request):
        """
        Query params:
        - status, renter_ref, property_ref: exact filters
        - search: lease number / notes
        """
        params = request.query_params
        page, page_size = page_params(request)
        result = LeaseService().list_leases(
            request.user.account_id,
            status=params.get('status'),
            renter_ref=params.get('renter_ref'),
            property_ref=params.get('property_ref'),
            search=params.get('search'),
            page=page,
            page_size=page_size,
        )
        return page_response(self, result)

    def retrieve(self, request, pk=None):
        lease = LeaseService().get_lease(request.user.account_id, int(pk))
        return Response(LeaseSerializer(lease).data)

    def create(self, request):
        serializer = LeaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lease = LeaseService().create_lease(request.user.account_id, serializer.to_dto(), actor_id=request.user.id)
        return Response(LeaseSerializer(lease).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='status')
    def change_status(self, request, pk=None):
        serializer = LeaseStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lease = LeaseService().update_lease_status(
            request.user.account_id, int(pk), serializer.validated_data['status'], actor_id=request.user.id
        )
        return Response(LeaseSerializer(lease).data)

    @action(detail=True, methods=['post'])
    def generate_installments(self, request, pk=None):
        """Build the installment schedule of the lease (409 if any period already exists)"""
        created = InstallmentService().generate_installments(request.user.account_id, int(pk), actor_id=request.user.id)
        return Response({
            'count': len(created),
            'installments': InstallmentSerializer(created, many=True).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def deposit(self, request, pk=None):
        deposit = DepositService().get_deposit(request.user.account_id, int(pk))
        return Response(SecurityDepositSerializer(deposit).data)

    @action(detail=True, methods=['post'], url_path='deposit/collect')
    def deposit_collect(self, request, pk=None):
        data = self._movement_data(request)
        deposit = DepositService().collect(
            request.user.account_id, int(pk), data['amount'], actor_id=request.user.id,
            payment_id=data.get('payment_id'), note=data['note']
        )
        return Response(SecurityDepositSerializer(deposit).data)

    @action(detail=True, methods=['post'], url_path='deposit/refund')
    def deposit_refund(self, request, pk=None):
        data = self._movement_data(request)
        deposit = DepositService().refund(
            request.user.account_id, int(pk), data['amount'], actor_id=request.user.id, note=data['note']
        )
        return Response(SecurityDepositSerializer(deposit).data)

    @action(detail=True, methods=['post'], url_path='deposit/deduct')
    def deposit_deduct(self, request, pk=None):
        data = self._movement_data(request)
        deposit = DepositService().deduct(
            request.user.account_id, int(pk), data['amount'], actor_id=request.user.id,
            note=data['note'], installment_id=data.get('installment_id')
        )
        return Response(SecurityDepositSerializer(deposit).data)

    def _movement_data(self, request):
        serializer = DepositMovementRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @action(detail=True, methods=['delete'], url_path='installments')
    def delete_installments(self, request, pk=None):
        """Drop the whole schedule so it can be regenerated (refused once money was allocated)"""
        deleted = InstallmentService().delete_installments(request.user.account_id, int(pk), actor_id=request.user.id)
        return Response({'deleted': deleted})

    @action(detail=True, methods=['get', 'post'], url_path='co-renters')
    def co_renters(self, request, pk=None):
        service = LeaseService()
        if request.method == 'GET':
            co_renters = service.list_co_renters(request.user.account_id, int(pk))
            return Response(LeaseCoRenterSerializer(co_renters, many=True).data)

        serializer = CoRenterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        co_renter = service.add_co_renter(
            request.user.account_id, int(pk), serializer.validated_data['renter_ref'], actor_id=request.user.id
        )
        return Response(LeaseCoRenterSerializer(co_renter).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path=r'co-renters/(?P<renter_ref>[^/]+)')
    def remove_co_renter(self, request, pk=None, renter_ref=None):
        LeaseService().remove_co_renter(request.user.account_id, int(pk), renter_ref, actor_id=request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
