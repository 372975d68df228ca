from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from api import errors
from api.booking import services
from api.booking.availability import check_availability
from api.booking.serializers import AvailabilityQuerySerializer, BookingCreateSerializer, BookingSerializer
from .models import Vehicle
from .serializers import VehicleSerializer


class VehicleViewSet(viewsets.ModelViewSet):
    queryset = Vehicle.objects.select_related('business').all()
    serializer_class = VehicleSerializer

    def get_permissions(self):
        if self.action in ('availability', 'book'):
            return [AllowAny()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        business_id = self.request.query_params.get('business')
        if business_id:
            queryset = queryset.filter(business_id=business_id)
        is_available = self.request.query_params.get('is_available')
        if is_available in ('true', 'false'):
            queryset = queryset.filter(is_available=is_available == 'true')
        return queryset

    def _check_owner(self, business):
        if not business.is_managed_by(self.request.user):
            raise PermissionDenied("You do not manage this business.")

    def perform_create(self, serializer):
        self._check_owner(serializer.validated_data['business'])
        serializer.save()

    def perform_update(self, serializer):
        self._check_owner(serializer.instance.business)
        if 'business' in serializer.validated_data:
            self._check_owner(serializer.validated_data['business'])
        serializer.save()

    def perform_destroy(self, instance):
        self._check_owner(instance.business)
        if instance.bookings.exists():
            raise errors.Conflict("This vehicle has bookings. Switch it off instead of deleting it.")
        instance.delete()

    @action(detail=True, methods=['post'], url_path='toggle-availability')
    def toggle_availability(self, request, pk=None):
        vehicle = self.get_object()
        self._check_owner(vehicle.business)
        vehicle.is_available = not vehicle.is_available
        vehicle.save(update_fields=['is_available', 'updated_at'])
        return Response(self.get_serializer(vehicle).data)

    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        vehicle = self.get_object()
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = check_availability(vehicle, query.validated_data['pickup'], query.validated_data['return'])
        return Response(result.as_dict())

    @action(detail=True, methods=['post'], url_path='bookings')
    def book(self, request, pk=None):
        vehicle = self.get_object()
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.create_booking(
            vehicle,
            serializer.validated_data['pickup_at'],
            serializer.validated_data['return_at'],
            customer=serializer.customer_data(),
            user=request.user,
            notes=serializer.validated_data.get('notes', ''),
        )
        return Response(
            {"message": "Booking request sent.", "booking": BookingSerializer(booking).data},
            status=status.HTTP_201_CREATED,
        )
