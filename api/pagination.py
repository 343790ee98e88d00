"""
Helpers shared by the viewsets that list through the service layer.
"""
from datetime import datetime

from rest_framework.response import Response

from core.exceptions import ValidationError


def page_params(request):
    """Read ?page= and ?page_size= as integers (invalid values fall back to defaults)"""
    def _int(name):
        value = request.query_params.get(name)
        try:
            return int(value) if value else None
        except ValueError:
            return None
    return _int('page') or 1, _int('page_size')


def int_param(request, name):
    value = request.query_params.get(name)
    if value in (None, ''):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(message=f"{name} must be an integer", code="INVALID_QUERY_PARAM")


def date_param(request, name, fmt='%Y-%m-%d'):
    value = request.query_params.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, fmt).date()
    except ValueError:
        raise ValidationError(message=f"{name} must be formatted YYYY-MM-DD", code="INVALID_QUERY_PARAM")


def page_response(view, page):
    """Serialize a PageDTO with the view's serializer"""
    serializer = view.get_serializer(page.items, many=True)
    return Response({
        'count': page.total,
        'page': page.page,
        'page_size': page.page_size,
        'total_pages': page.total_pages,
        'results': serializer.data,
    })
