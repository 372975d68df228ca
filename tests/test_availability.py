from datetime import date, datetime, time
from decimal import Decimal

import pytest

from api import errors
from api.booking import services
from api.booking.availability import (
    check_availability,
    default_return_at,
    price_quote,
    ranges_overlap,
    rental_days_between,
)
from api.booking.models import Booking


def test_started_day_counts_as_a_full_day():
    assert rental_days_between(datetime(2024, 1, 1, 9), datetime(2024, 1, 3, 8)) == 2
    assert rental_days_between(datetime(2024, 1, 1, 9), datetime(2024, 1, 3, 9)) == 2
    assert rental_days_between(datetime(2024, 1, 1, 9), datetime(2024, 1, 3, 10)) == 3


def test_short_rental_is_one_day():
    assert rental_days_between(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 11)) == 1


def test_return_before_pickup_is_rejected():
    with pytest.raises(errors.ValidationError):
        rental_days_between(datetime(2024, 1, 3, 9), datetime(2024, 1, 1, 9))
    with pytest.raises(errors.ValidationError):
        rental_days_between(datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 9))


def test_default_return_is_one_hour_before_pickup_clock():
    assert default_return_at(date(2024, 6, 4), time(10, 0)) == datetime(2024, 6, 4, 9, 0)
    # Three calendar days bill as three rental days.
    assert rental_days_between(datetime(2024, 6, 1, 10), default_return_at(date(2024, 6, 4), time(10, 0))) == 3


def test_ranges_are_half_open():
    assert ranges_overlap(1, 5, 4, 8)
    assert ranges_overlap(1, 10, 3, 4)
    assert not ranges_overlap(1, 5, 5, 8)
    assert not ranges_overlap(5, 8, 1, 5)


@pytest.mark.django_db
def test_price_quote(vehicle):
    quote = price_quote(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 4, 10))
    assert quote["rental_days"] == 3
    assert quote["subtotal"] == Decimal("12000")
    assert quote["total_km_allowed"] == 450
    assert quote["deposit_amount"] == Decimal("20000")


@pytest.mark.django_db
def test_unlimited_mileage_has_no_allowance(vehicle):
    vehicle.mileage_limit = None
    quote = price_quote(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 10))
    assert quote["total_km_allowed"] is None


@pytest.mark.django_db
def test_rental_bounds(vehicle):
    vehicle.min_rental_days = 2
    vehicle.max_rental_days = 5
    vehicle.save()

    with pytest.raises(errors.ValidationError):
        price_quote(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 10))
    with pytest.raises(errors.ValidationError):
        price_quote(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 8, 10))
    assert price_quote(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 6, 10))["rental_days"] == 5


@pytest.mark.django_db
def test_free_vehicle_is_available(vehicle):
    result = check_availability(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 4, 10))
    assert result.available
    assert result.rental_days == 3
    assert result.subtotal == Decimal("12000")
    assert result.reasons == []


@pytest.mark.django_db
def test_overlapping_booking_makes_vehicle_unavailable(vehicle, three_day_booking):
    result = check_availability(vehicle, datetime(2024, 6, 3, 10), datetime(2024, 6, 5, 10))
    assert not result.available
    assert result.reasons


@pytest.mark.django_db
def test_back_to_back_is_available(vehicle, three_day_booking):
    assert check_availability(vehicle, datetime(2024, 6, 4, 10), datetime(2024, 6, 6, 10)).available
    assert check_availability(vehicle, datetime(2024, 5, 30, 10), datetime(2024, 6, 1, 10)).available


@pytest.mark.django_db
def test_cancelled_booking_releases_the_vehicle(vehicle, three_day_booking, owner):
    services.cancel_booking(three_day_booking, owner)
    assert check_availability(vehicle, datetime(2024, 6, 2, 10), datetime(2024, 6, 3, 10)).available


@pytest.mark.django_db
def test_no_show_keeps_blocking(vehicle, three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    services.mark_no_show(three_day_booking, owner)
    assert Booking.objects.get(pk=three_day_booking.pk).status == Booking.STATUS_NO_SHOW
    assert not check_availability(vehicle, datetime(2024, 6, 2, 10), datetime(2024, 6, 3, 10)).available


@pytest.mark.django_db
def test_switched_off_vehicle_is_unavailable(vehicle):
    vehicle.is_available = False
    vehicle.save()
    assert not check_availability(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 10)).available


@pytest.mark.django_db
def test_inactive_business_is_unavailable(vehicle, business):
    business.is_active = False
    business.save()
    vehicle.refresh_from_db()
    assert not check_availability(vehicle, datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 10)).available
