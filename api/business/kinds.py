"""
Per-type behaviour for businesses.

The dashboard shell is shared by hotels, restaurants and car-rental
companies; anything that differs by type goes through the handler
registered for that ``business_type`` instead of branching on the string.
"""
from django.db.models import Count, Q, Sum

from api.business.models import Business


class BusinessKind:
    business_type = None
    label = ""

    def __init__(self, business):
        self.business = business

    def resources(self):
        """Bookable things the business lists (rooms, tables, vehicles)."""
        return []

    def dashboard_summary(self):
        return {"business_type": self.business_type, "label": self.label}


class CarRentalKind(BusinessKind):
    business_type = Business.TYPE_CAR_RENTAL
    label = "Car rental"

    def resources(self):
        return self.business.vehicles.all()

    def dashboard_summary(self):
        from api.booking.models import Booking

        vehicles = self.business.vehicles.aggregate(
            total=Count("id"),
            available=Count("id", filter=Q(is_available=True)),
        )
        bookings = Booking.objects.filter(vehicle__business=self.business)
        by_status = {
            row["status"]: row["count"]
            for row in bookings.values("status").annotate(count=Count("id"))
        }
        revenue = bookings.filter(status=Booking.STATUS_COMPLETED).aggregate(total=Sum("total_amount"))["total"]

        summary = super().dashboard_summary()
        summary.update({
            "vehicles_total": vehicles["total"],
            "vehicles_available": vehicles["available"],
            "bookings_by_status": by_status,
            "completed_revenue": revenue or 0,
        })
        return summary


class HotelKind(BusinessKind):
    business_type = Business.TYPE_HOTEL
    label = "Hotel"


class RestaurantKind(BusinessKind):
    business_type = Business.TYPE_RESTAURANT
    label = "Restaurant"


KINDS = {kind.business_type: kind for kind in (CarRentalKind, HotelKind, RestaurantKind)}


def kind_for(business):
    return KINDS[business.business_type](business)
