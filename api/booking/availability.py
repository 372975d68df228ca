"""
Availability and price quotes for vehicles.

Every screen that needs rental days, a return time or a subtotal goes
through these helpers so the customer and back-office flows agree.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from api import errors

ONE_DAY = timedelta(days=1)
RETURN_OFFSET = timedelta(hours=1)


@dataclass
class Availability:
    available: bool
    rental_days: int
    subtotal: Decimal
    total_km_allowed: Optional[int]
    price_per_day: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    reasons: list = field(default_factory=list)

    def as_dict(self):
        return {
            "available": self.available,
            "rental_days": self.rental_days,
            "subtotal": self.subtotal,
            "total_km_allowed": self.total_km_allowed,
            "price_per_day": self.price_per_day,
            "deposit_amount": self.deposit_amount,
            "reasons": self.reasons,
        }


def rental_days_between(pickup_at: datetime, return_at: datetime) -> int:
    """Whole days in the range; a started day counts as a full one."""
    if return_at <= pickup_at:
        raise errors.ValidationError("Return must be after pickup.")
    span = return_at - pickup_at
    return max(1, math.ceil(span / ONE_DAY))


def ranges_overlap(a_start, a_end, b_start, b_end) -> bool:
    """Half-open ranges: a return at T does not collide with a pickup at T."""
    return a_start < b_end and b_start < a_end


def default_return_at(return_date, pickup_time) -> datetime:
    """
    Return time used when the customer only picks a return date: one hour
    before the pickup clock time, so N calendar days bill as N rental days.
    """
    return datetime.combine(return_date, pickup_time) - RETURN_OFFSET


def check_rental_bounds(vehicle, rental_days: int):
    if vehicle.min_rental_days and rental_days < vehicle.min_rental_days:
        raise errors.ValidationError(
            f"This vehicle must be rented for at least {vehicle.min_rental_days} days."
        )
    if vehicle.max_rental_days and rental_days > vehicle.max_rental_days:
        raise errors.ValidationError(
            f"This vehicle can be rented for at most {vehicle.max_rental_days} days."
        )


def total_km_allowed(vehicle, rental_days: int) -> Optional[int]:
    if vehicle.mileage_limit is None:
        return None
    return vehicle.mileage_limit * rental_days


def price_quote(vehicle, pickup_at: datetime, return_at: datetime) -> dict:
    """Validated rental days and the amounts snapshotted onto a booking."""
    days = rental_days_between(pickup_at, return_at)
    check_rental_bounds(vehicle, days)
    price_per_day = Decimal(vehicle.price_per_day)
    return {
        "rental_days": days,
        "price_per_day": price_per_day,
        "subtotal": price_per_day * days,
        "deposit_amount": Decimal(vehicle.deposit_amount or 0),
        "total_km_allowed": total_km_allowed(vehicle, days),
    }


def overlapping_bookings(vehicle, pickup_at: datetime, return_at: datetime, exclude_id=None):
    from api.booking.models import Booking

    queryset = Booking.objects.filter(
        vehicle=vehicle,
        pickup_at__lt=return_at,
        return_at__gt=pickup_at,
    ).exclude(status__in=Booking.RELEASED_STATUSES)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset


def check_availability(vehicle, pickup_at: datetime, return_at: datetime) -> Availability:
    """
    Point-in-time answer for the booking form. Nothing is locked here;
    booking creation checks the overlap again under a lock.
    """
    quote = price_quote(vehicle, pickup_at, return_at)

    reasons = []
    if not vehicle.is_available:
        reasons.append("Vehicle is not offered for rent at the moment.")
    if not vehicle.business.is_active:
        reasons.append("The rental company is not active.")
    if overlapping_bookings(vehicle, pickup_at, return_at).exists():
        reasons.append("Vehicle is already booked for the selected dates.")

    return Availability(
        available=not reasons,
        rental_days=quote["rental_days"],
        subtotal=quote["subtotal"],
        total_km_allowed=quote["total_km_allowed"],
        price_per_day=quote["price_per_day"],
        deposit_amount=quote["deposit_amount"],
        reasons=reasons,
    )
