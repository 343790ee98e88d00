from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.pagination import page_params, page_response, int_param
from api.permissions import IsAccountMember, IsOwnerOrManager, IsOwner
from installments.serializers import InstallmentSerializer
from .serializers import (
    PenaltyAssessmentSerializer, PenaltyRunSerializer,
    PenaltyTargetSerializer, PenaltyOverrideSerializer,
)
from .services import PenaltyService


class PenaltyViewSet(viewsets.GenericViewSet):
    """
    Late penalties.

    - GET  /penalties/?lease=&installment=   assessments of the account
    - POST /penalties/run/                   batch run for the account (owner only)
    - POST /penalties/calculate/             recompute one installment
    - POST /penalties/override/              set a penalty by hand
    - POST /penalties/clear_override/        hand the installment back to the batch
    """
    serializer_class = PenaltyAssessmentSerializer
    permission_classes = [IsAuthenticated, IsAccountMember, IsOwnerOrManager]

    def get_permissions(self):
        if self.action == 'run':
            return [IsAuthenticated(), IsAccountMember(), IsOwner()]
        return super().get_permissions()

    def list(self, request):
        page, page_size = page_params(request)
        result = PenaltyService().list_penalties(
            request.user.account_id,
            lease_id=int_param(request, 'lease'),
            installment_id=int_param(request, 'installment'),
            page=page,
            page_size=page_size,
        )
        return page_response(self, result)

    @action(detail=False, methods=['post'])
    def run(self, request):
        serializer = PenaltyRunSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = PenaltyService().calculate_penalties(
            today=serializer.validated_data.get('date'),
            account_id=request.user.account_id,
            actor_id=request.user.id,
        )
        return Response({
            'run_date': result.run_date,
            'processed': result.processed,
            'updated': result.updated,
            'skipped': result.skipped,
            'errors': result.errors,
        })

    @action(detail=False, methods=['post'])
    def calculate(self, request):
        serializer = PenaltyTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        installment = PenaltyService().calculate_penalty(
            request.user.account_id,
            serializer.validated_data['installment_id'],
            today=serializer.validated_data.get('date'),
            actor_id=request.user.id,
        )
        return Response(InstallmentSerializer(installment).data)

    @action(detail=False, methods=['post'])
    def override(self, request):
        serializer = PenaltyOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assessment = PenaltyService().override_penalty(
            request.user.account_id,
            serializer.validated_data['installment_id'],
            serializer.validated_data['amount'],
            serializer.validated_data['reason'],
            actor_id=request.user.id,
        )
        return Response(self.get_serializer(assessment).data)

    @action(detail=False, methods=['post'])
    def clear_override(self, request):
        serializer = PenaltyTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assessment = PenaltyService().clear_override(
            request.user.account_id, serializer.validated_data['installment_id'], actor_id=request.user.id
        )
        return Response(self.get_serializer(assessment).data)
