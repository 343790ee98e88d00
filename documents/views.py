from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from api.pagination import page_params, page_response, int_param
from api.permissions import IsAccountMember, IsOwnerOrManager
from .serializers import RentalDocumentSerializer, DocumentIssueSerializer
from .services import DocumentService


class RentalDocumentViewSet(viewsets.GenericViewSet):
    """
    Issued documents (lease contracts, receipts, statements).
    Rendering runs after the issuing transaction commits; poll the document for its status.
    """
    serializer_class = RentalDocumentSerializer
    permission_classes = [IsAuthenticated, IsAccountMember, IsOwnerOrManager]
    lookup_value_regex = r"\d+"

    def list(self, request):
        page, page_size = page_params(request)
        result = DocumentService().list_documents(
            request.user.account_id,
            doc_type=request.query_params.get('doc_type') or None,
            lease_id=int_param(request, 'lease'),
            page=page,
            page_size=page_size,
        )
        return page_response(self, result)

    def retrieve(self, request, pk=None):
        document = DocumentService().get_document(request.user.account_id, int(pk))
        return Response(self.get_serializer(document).data)

    @action(detail=False, methods=['post'])
    def issue(self, request):
        serializer = DocumentIssueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        document = DocumentService().issue_document(
            request.user.account_id,
            serializer.validated_data['doc_type'],
            serializer.validated_data['source_key'],
            actor_id=request.user.id,
        )
        return Response(self.get_serializer(document).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def regenerate(self, request, pk=None):
        document = DocumentService().regenerate_document(request.user.account_id, int(pk), actor_id=request.user.id)
        return Response(self.get_serializer(document).data)
