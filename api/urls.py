# api/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from api.booking.views import BookingViewSet, BusinessBookingListView
from api.business.views import BusinessViewSet
from api.garage.views import VehicleViewSet

router = DefaultRouter()
router.register(r'businesses', BusinessViewSet)
router.register(r'vehicles', VehicleViewSet)
router.register(r'bookings', BookingViewSet)


urlpatterns = [
    path('businesses/<int:business_id>/bookings/', BusinessBookingListView.as_view(), name='business-bookings'),
    path('', include(router.urls)),
]
