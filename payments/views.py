from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.pagination import page_params, page_response, int_param, date_param
from api.permissions import IsAccountMember, IsOwnerOrManager
from core.dto import PaymentFilterDTO
from .allocation import AllocationService
from .serializers import (
    PaymentSerializer, PaymentCreateSerializer, PaymentStatusSerializer,
    PaymentAllocationSerializer, AllocationRequestSerializer,
)
from .services import PaymentLedgerService


class PaymentViewSet(viewsets.GenericViewSet):
    """
    ViewSet for the payment ledger.
    POST is idempotent: the key comes from the body or the Idempotency-Key header,
    and a replayed key returns the original payment.
    """
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsAccountMember, IsOwnerOrManager]
    lookup_value_regex = r"\d+"

    def list(self, request):
        """
        Query params:
        - lease, renter_ref, status, method
        - start_date / end_date (YYYY-MM-DD, on initiation date)
        """
        params = request.query_params
        filters = PaymentFilterDTO(
            lease_id=int_param(request, 'lease'),
            renter_ref=params.get('renter_ref') or None,
            status=params.get('status') or None,
            method=params.get('method') or None,
            start_date=date_param(request, 'start_date'),
            end_date=date_param(request, 'end_date'),
        )
        page, page_size = page_params(request)
        result = PaymentLedgerService().list_payments(request.user.account_id, filters, page, page_size)
        return page_response(self, result)

    def retrieve(self, request, pk=None):
        payment = PaymentLedgerService().get_payment_by_id(request.user.account_id, int(pk))
        return Response(self.get_serializer(payment).data)

    def create(self, request):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = PaymentLedgerService().create_payment(
            request.user.account_id,
            serializer.to_dto(idempotency_key=request.headers.get('Idempotency-Key')),
            actor_id=request.user.id,
        )
        return Response(self.get_serializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='status')
    def change_status(self, request, pk=None):
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = PaymentLedgerService().update_payment_status(
            request.user.account_id, int(pk), serializer.validated_data['status'], actor_id=request.user.id
        )
        return Response(self.get_serializer(payment).data)

    @action(detail=True, methods=['post'])
    def allocate(self, request, pk=None):
        """
        Allocate the unallocated remainder of the payment.

        Body: {"installment_ids": [..], "amounts": {"<installment id>": "1000.00"}}
        """
        serializer = AllocationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = AllocationService().allocate_payment(
            request.user.account_id, int(pk), serializer.to_dto(), actor_id=request.user.id
        )
        return Response({
            'allocations': PaymentAllocationSerializer(result.allocations, many=True).data,
            'total_allocated': str(result.total_allocated),
            'unallocated_amount': str(result.unallocated_amount),
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def allocations(self, request, pk=None):
        allocations = AllocationService().list_allocations(request.user.account_id, int(pk))
        return Response(PaymentAllocationSerializer(allocations, many=True).data)
