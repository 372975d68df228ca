from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from api import errors
from api.booking.models import Booking
from .kinds import kind_for
from .models import Business
from .serializers import BusinessSerializer


class BusinessViewSet(viewsets.ModelViewSet):
    queryset = Business.objects.select_related('owner').all()
    serializer_class = BusinessSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        business_type = self.request.query_params.get('business_type')
        if business_type:
            queryset = queryset.filter(business_type=business_type)
        if self.action == 'list' and not self.request.user.is_staff:
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)

    def perform_update(self, serializer):
        if not serializer.instance.is_managed_by(self.request.user):
            raise PermissionDenied("You do not manage this business.")
        serializer.save()

    def perform_destroy(self, instance):
        if not instance.is_managed_by(self.request.user):
            raise PermissionDenied("You do not manage this business.")
        if (
            Booking.objects.filter(vehicle__business=instance).exists()
            or instance.transactions.exists()
            or instance.withdrawal_requests.exists()
        ):
            raise errors.Conflict("This business has bookings or wallet history. Deactivate it instead of deleting it.")
        instance.delete()

    @action(detail=True, methods=['get'])
    def dashboard(self, request, pk=None):
        business = self.get_object()
        if not business.is_managed_by(request.user):
            raise PermissionDenied("You do not manage this business.")
        return Response(kind_for(business).dashboard_summary())
