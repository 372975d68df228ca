from datetime import datetime
from decimal import Decimal
from unittest import mock

import pytest

from api import errors
from api.booking import services
from api.booking.models import Booking
from api.garage.models import Vehicle


@pytest.mark.django_db
def test_create_booking_snapshots_the_quote(three_day_booking, vehicle):
    booking = three_day_booking
    assert booking.status == Booking.STATUS_PENDING
    assert booking.rental_days == 3
    assert booking.price_per_day == Decimal("4000")
    assert booking.subtotal == Decimal("12000")
    assert booking.total_amount == Decimal("12000")
    assert booking.total_km_allowed == 450
    assert booking.extra_km_price == Decimal("20")
    assert booking.pickup_at == datetime(2024, 6, 1, 10, 0)
    assert booking.return_at == datetime(2024, 6, 4, 10, 0)

    # Later price changes do not touch the booking.
    vehicle.price_per_day = Decimal("5000")
    vehicle.save()
    booking.refresh_from_db()
    assert booking.subtotal == Decimal("12000")


@pytest.mark.django_db
def test_overlapping_booking_is_refused(book, three_day_booking):
    with pytest.raises(errors.Conflict):
        book(datetime(2024, 6, 3, 10), datetime(2024, 6, 6, 10))
    assert Booking.objects.count() == 1


@pytest.mark.django_db
def test_back_to_back_bookings_are_allowed(book, three_day_booking):
    after = book(datetime(2024, 6, 4, 10), datetime(2024, 6, 5, 10))
    before = book(datetime(2024, 5, 30, 10), datetime(2024, 6, 1, 10))
    assert after.pk and before.pk
    assert Booking.objects.count() == 3


@pytest.mark.django_db
def test_other_vehicle_is_not_blocked(book, three_day_booking, business):
    other = Vehicle.objects.create(
        business=business, brand="Dacia", model="Logan", license_plate="04567-114-16", price_per_day=Decimal("3500")
    )
    booking = book(datetime(2024, 6, 2, 10), datetime(2024, 6, 3, 10), on=other)
    assert booking.vehicle_id == other.pk


@pytest.mark.django_db
def test_switched_off_vehicle_cannot_be_booked(book, vehicle):
    vehicle.is_available = False
    vehicle.save()
    with pytest.raises(errors.Conflict):
        book(datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 10))


@pytest.mark.django_db
def test_out_of_bounds_booking_is_a_validation_error(book, vehicle):
    vehicle.max_rental_days = 2
    vehicle.save()
    with pytest.raises(errors.ValidationError):
        book(datetime(2024, 6, 1, 10), datetime(2024, 6, 4, 10))
    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_booking_received_email_goes_out_after_commit(book, django_capture_on_commit_callbacks):
    with mock.patch("api.booking.services.Email") as email:
        with django_capture_on_commit_callbacks(execute=True):
            booking = book(datetime(2024, 6, 1, 10), datetime(2024, 6, 2, 10))
    email.return_value.send_booking_received_email.assert_called_once_with(booking)


@pytest.mark.django_db
def test_happy_path(three_day_booking, owner):
    booking = services.confirm_booking(three_day_booking, owner)
    assert booking.status == Booking.STATUS_CONFIRMED
    assert booking.confirmed_at is not None

    booking = services.record_pickup(booking, owner, mileage=10000, notes="Full tank")
    assert booking.status == Booking.STATUS_PICKED_UP
    assert booking.pickup_mileage == 10000
    assert "Full tank" in booking.notes

    booking = services.record_return(booking, owner, mileage=10500)
    assert booking.status == Booking.STATUS_RETURNED
    assert booking.km_driven == 500
    assert booking.extra_km == 50
    assert booking.extra_km_charge == Decimal("1000")
    assert booking.total_amount == Decimal("13000")

    booking = services.complete_booking(booking, owner)
    assert booking.status == Booking.STATUS_COMPLETED
    assert booking.completed_at is not None


@pytest.mark.django_db
def test_pickup_requires_confirmation(three_day_booking, owner):
    with pytest.raises(errors.InvalidTransition):
        services.record_pickup(three_day_booking, owner, mileage=10000)
    three_day_booking.refresh_from_db()
    assert three_day_booking.status == Booking.STATUS_PENDING
    assert three_day_booking.pickup_mileage is None


@pytest.mark.django_db
def test_terminal_states_accept_nothing(three_day_booking, owner):
    services.cancel_booking(three_day_booking, owner, reason="Customer changed plans")
    for operation in (services.confirm_booking, services.cancel_booking, services.mark_no_show):
        with pytest.raises(errors.InvalidTransition):
            operation(three_day_booking, owner)
    three_day_booking.refresh_from_db()
    assert three_day_booking.status == Booking.STATUS_CANCELLED
    assert three_day_booking.cancellation_reason == "Customer changed plans"


@pytest.mark.django_db
def test_confirmed_booking_can_be_cancelled(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    booking = services.cancel_booking(three_day_booking, owner)
    assert booking.status == Booking.STATUS_CANCELLED
    assert booking.cancelled_at is not None


@pytest.mark.django_db
def test_picked_up_booking_cannot_be_cancelled(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    services.record_pickup(three_day_booking, owner, mileage=100)
    with pytest.raises(errors.InvalidTransition):
        services.cancel_booking(three_day_booking, owner)


@pytest.mark.django_db
def test_only_the_owner_or_staff_manage_bookings(three_day_booking, stranger, staff):
    with pytest.raises(errors.NotAllowed):
        services.confirm_booking(three_day_booking, stranger)
    three_day_booking.refresh_from_db()
    assert three_day_booking.status == Booking.STATUS_PENDING

    assert services.confirm_booking(three_day_booking, staff).status == Booking.STATUS_CONFIRMED


@pytest.mark.django_db
def test_return_mileage_below_pickup_is_refused(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    services.record_pickup(three_day_booking, owner, mileage=10000)

    with pytest.raises(errors.InvalidMileage):
        services.record_return(three_day_booking, owner, mileage=9999)

    three_day_booking.refresh_from_db()
    assert three_day_booking.status == Booking.STATUS_PICKED_UP
    assert three_day_booking.return_mileage is None


@pytest.mark.django_db
def test_negative_pickup_mileage_is_refused(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    with pytest.raises(errors.InvalidMileage):
        services.record_pickup(three_day_booking, owner, mileage=-5)


@pytest.mark.django_db
def test_mileage_within_allowance_costs_nothing(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    services.record_pickup(three_day_booking, owner, mileage=10000)
    booking = services.record_return(three_day_booking, owner, mileage=10450)
    assert booking.km_driven == 450
    assert booking.extra_km == 0
    assert booking.extra_km_charge == Decimal("0")
    assert booking.total_amount == Decimal("12000")


@pytest.mark.django_db
def test_unlimited_mileage_never_charges(book, vehicle, owner):
    vehicle.mileage_limit = None
    vehicle.save()
    booking = book(datetime(2024, 7, 1, 10), datetime(2024, 7, 2, 10))
    services.confirm_booking(booking, owner)
    services.record_pickup(booking, owner, mileage=0)
    booking = services.record_return(booking, owner, mileage=5000)
    assert booking.extra_km == 0
    assert booking.total_amount == Decimal("4000")


@pytest.mark.django_db
def test_extra_charges_are_added_to_the_total(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    services.record_pickup(three_day_booking, owner, mileage=10000)
    booking = services.record_return(
        three_day_booking,
        owner,
        mileage=10100,
        extra_charges=Decimal("2500"),
        extra_charges_description="Fuel refill",
    )
    assert booking.extra_charges == Decimal("2500")
    assert booking.extra_charges_description == "Fuel refill"
    assert booking.total_amount == Decimal("14500")
    assert booking.total_amount == booking.compute_total()


@pytest.mark.django_db
def test_negative_extra_charges_are_refused(three_day_booking, owner):
    services.confirm_booking(three_day_booking, owner)
    services.record_pickup(three_day_booking, owner, mileage=10000)
    with pytest.raises(errors.ValidationError):
        services.record_return(three_day_booking, owner, mileage=10100, extra_charges=Decimal("-1"))


@pytest.mark.django_db
def test_completing_twice_is_refused(returned_booking, owner):
    services.complete_booking(returned_booking, owner)
    with pytest.raises(errors.InvalidTransition):
        services.complete_booking(returned_booking, owner)
    assert returned_booking.transactions.count() == 1


@pytest.mark.django_db
def test_extra_kilometres_over_a_four_day_allowance(book, business, owner):
    van = Vehicle.objects.create(
        business=business,
        brand="Hyundai",
        model="H1",
        license_plate="09999-118-16",
        price_per_day=Decimal("6000"),
        mileage_limit=100,
        extra_km_price=Decimal("25"),
    )
    booking = book(datetime(2024, 1, 10, 9), datetime(2024, 1, 14, 9), on=van)
    assert booking.rental_days == 4
    assert booking.total_km_allowed == 400

    services.confirm_booking(booking, owner)
    services.record_pickup(booking, owner, mileage=10000)
    booking = services.record_return(booking, owner, mileage=10450)
    assert booking.km_driven == 450
    assert booking.extra_km == 50
    assert booking.extra_km_charge == Decimal("1250")
    assert booking.total_amount == Decimal("25250")


@pytest.mark.django_db
def test_pickup_from_pending_is_a_transition_error_whatever_the_mileage(three_day_booking, owner):
    with pytest.raises(errors.InvalidTransition):
        services.record_pickup(three_day_booking, owner, mileage=-5)
    three_day_booking.refresh_from_db()
    assert three_day_booking.status == Booking.STATUS_PENDING
