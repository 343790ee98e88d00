"""
API URLs for the rental ledger
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from documents.views import RentalDocumentViewSet
from installments.views import InstallmentViewSet
from leases.views import LeaseViewSet
from payments.views import PaymentViewSet
from penalties.views import PenaltyViewSet

# Create router
router = DefaultRouter()
router.register(r'leases', LeaseViewSet, basename='lease')
router.register(r'installments', InstallmentViewSet, basename='installment')
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'penalties', PenaltyViewSet, basename='penalty')
router.register(r'documents', RentalDocumentViewSet, basename='document')

urlpatterns = [
    # JWT Authentication
    path('auth/login/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Audit logs
    path('audit/', include('audit.urls')),

    # API routes
    path('', include(router.urls)),
]
