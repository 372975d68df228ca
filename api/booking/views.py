from django.shortcuts import get_object_or_404
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.booking import services
from api.booking.models import Booking
from api.booking.serializers import (
    BookingSerializer,
    CancelBookingSerializer,
    MileageSerializer,
    ReturnSerializer,
)
from api.business.models import Business


class BookingViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    A single car booking and its lifecycle actions. Everything except
    reading one's own booking is reserved to the owning business.
    """

    queryset = Booking.objects.select_related('vehicle__business').all()
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]

    def retrieve(self, request, *args, **kwargs):
        booking = self.get_object()
        user = request.user
        if not booking.vehicle.business.is_managed_by(user) and booking.user_id != user.pk:
            raise PermissionDenied("You cannot view this booking.")
        return Response(self.get_serializer(booking).data)

    def _respond(self, booking):
        return Response(BookingSerializer(booking).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        booking = services.confirm_booking(self.get_object(), request.user)
        return self._respond(booking)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.cancel_booking(
            self.get_object(), request.user, reason=serializer.validated_data['reason']
        )
        return self._respond(booking)

    @action(detail=True, methods=['post'], url_path='no-show')
    def no_show(self, request, pk=None):
        booking = services.mark_no_show(self.get_object(), request.user)
        return self._respond(booking)

    @action(detail=True, methods=['post'], url_path='pick-up')
    def pick_up(self, request, pk=None):
        serializer = MileageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.record_pickup(
            self.get_object(),
            request.user,
            mileage=serializer.validated_data['mileage'],
            notes=serializer.validated_data['notes'],
        )
        return self._respond(booking)

    @action(detail=True, methods=['post'], url_path='return')
    def return_vehicle(self, request, pk=None):
        serializer = ReturnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = services.record_return(
            self.get_object(),
            request.user,
            mileage=data['mileage'],
            notes=data['notes'],
            extra_charges=data.get('extra_charges'),
            extra_charges_description=data['extra_charges_description'],
        )
        return self._respond(booking)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        booking = services.complete_booking(self.get_object(), request.user)
        return self._respond(booking)


class BusinessBookingListView(generics.ListAPIView):
    """Bookings of one car-rental business, optionally filtered by status."""

    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        business = get_object_or_404(Business, pk=self.kwargs['business_id'])
        if not business.is_managed_by(self.request.user):
            raise PermissionDenied("You do not manage this business.")

        queryset = Booking.objects.select_related('vehicle__business').filter(vehicle__business=business)
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        vehicle_id = self.request.query_params.get('vehicle')
        if vehicle_id:
            queryset = queryset.filter(vehicle_id=vehicle_id)
        return queryset
