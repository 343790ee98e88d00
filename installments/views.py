from rest_framework import viewsets
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.pagination import page_params, page_response, int_param
from api.permissions import IsAccountMember, IsOwnerOrManager
from core.dto import InstallmentFilterDTO
from .serializers import InstallmentSerializer
from .services import InstallmentService


class InstallmentViewSet(viewsets.GenericViewSet):
    """
    Read-only access to installments.
    Installments are created by lease schedule generation and settled by allocations.

    Query params:
    - lease, status, year, month
    - overdue=true: open installments past their due date
    """
    serializer_class = InstallmentSerializer
    permission_classes = [IsAuthenticated, IsAccountMember, IsOwnerOrManager]
    lookup_value_regex = r"\d+"

    def list(self, request):
        params = request.query_params
        filters = InstallmentFilterDTO(
            lease_id=int_param(request, 'lease'),
            status=params.get('status') or None,
            year=int_param(request, 'year'),
            month=int_param(request, 'month'),
            overdue=params.get('overdue', '').lower() in ('1', 'true', 'yes'),
        )
        page, page_size = page_params(request)
        result = InstallmentService().list_installments(request.user.account_id, filters, page, page_size)
        return page_response(self, result)

    def retrieve(self, request, pk=None):
        installment = InstallmentService().get_installment(request.user.account_id, int(pk))
        return Response(self.get_serializer(installment).data)
