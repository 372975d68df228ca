"""
Booking lifecycle.

    pending -> confirmed -> picked_up -> returned -> completed
    pending|confirmed -> cancelled
    confirmed -> no_show

Each transition runs in one database transaction with the booking row
locked, checks the current status first and leaves the row untouched when
the check fails.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from api import errors
from api.booking.availability import overlapping_bookings, price_quote
from api.booking.email_service import Email
from api.booking.models import Booking
from api.garage.models import Vehicle

logger = logging.getLogger(__name__)

TRANSITIONS = {
    'confirm': ([Booking.STATUS_PENDING], Booking.STATUS_CONFIRMED),
    'cancel': ([Booking.STATUS_PENDING, Booking.STATUS_CONFIRMED], Booking.STATUS_CANCELLED),
    'no_show': ([Booking.STATUS_CONFIRMED], Booking.STATUS_NO_SHOW),
    'pick_up': ([Booking.STATUS_CONFIRMED], Booking.STATUS_PICKED_UP),
    'return': ([Booking.STATUS_PICKED_UP], Booking.STATUS_RETURNED),
    'complete': ([Booking.STATUS_RETURNED], Booking.STATUS_COMPLETED),
}


def ensure_can_manage(actor, business):
    if not business.is_managed_by(actor):
        raise errors.NotAllowed()


def _locked(booking):
    return Booking.objects.select_for_update().select_related('vehicle__business').get(pk=booking.pk)


def _begin(booking, action, actor):
    """Lock the row and check that ``action`` is allowed from its current status."""
    locked = _locked(booking)
    ensure_can_manage(actor, locked.vehicle.business)
    allowed_from, _ = TRANSITIONS[action]
    if locked.status not in allowed_from:
        raise errors.InvalidTransition(
            f"Cannot {action.replace('_', ' ')} a booking that is {locked.get_status_display().lower()}."
        )
    return locked


def _finish(locked, action, **changes):
    _, target = TRANSITIONS[action]
    previous = locked.status
    for name, value in changes.items():
        setattr(locked, name, value)
    locked.status = target
    locked.save()
    logger.info("Booking %s: %s -> %s", locked.pk, previous, target)
    return locked


def _append_note(locked, label, notes):
    if not notes:
        return locked.notes
    line = f"{label}: {notes}"
    return f"{locked.notes}\n{line}" if locked.notes else line


def create_booking(vehicle, pickup_at, return_at, customer, user=None, notes=''):
    """
    Reserve ``vehicle`` for ``[pickup_at, return_at)``.

    The vehicle row is locked while the overlap is checked and the booking
    inserted, so two concurrent requests for the same dates cannot both win.
    """
    with transaction.atomic():
        vehicle = Vehicle.objects.select_for_update().select_related('business').get(pk=vehicle.pk)
        quote = price_quote(vehicle, pickup_at, return_at)

        if not vehicle.is_available or not vehicle.business.is_active:
            raise errors.Conflict("This vehicle is not offered for rent at the moment.")
        if overlapping_bookings(vehicle, pickup_at, return_at).exists():
            logger.warning(
                "Double booking refused for vehicle %s (%s -> %s)", vehicle.pk, pickup_at, return_at
            )
            raise errors.Conflict()

        booking = Booking.objects.create(
            vehicle=vehicle,
            user=user if user is not None and user.is_authenticated else None,
            pickup_date=pickup_at.date(),
            pickup_time=pickup_at.time(),
            return_date=return_at.date(),
            return_time=return_at.time(),
            rental_days=quote['rental_days'],
            price_per_day=quote['price_per_day'],
            subtotal=quote['subtotal'],
            deposit_amount=quote['deposit_amount'],
            total_km_allowed=quote['total_km_allowed'],
            extra_km_price=vehicle.extra_km_price,
            total_amount=quote['subtotal'],
            notes=notes or '',
            **customer,
        )
        logger.info(
            "Booking %s created for vehicle %s: %s day(s), subtotal %s",
            booking.pk, vehicle.pk, booking.rental_days, booking.subtotal,
        )
        transaction.on_commit(lambda: Email().send_booking_received_email(booking))
    return booking


def confirm_booking(booking, actor):
    with transaction.atomic():
        locked = _begin(booking, 'confirm', actor)
        locked = _finish(locked, 'confirm', confirmed_at=timezone.now())
        transaction.on_commit(lambda: Email().send_booking_confirmed_email(locked))
    return locked


def cancel_booking(booking, actor, reason=''):
    with transaction.atomic():
        locked = _begin(booking, 'cancel', actor)
        locked = _finish(locked, 'cancel', cancelled_at=timezone.now(), cancellation_reason=reason or '')
        transaction.on_commit(lambda: Email().send_booking_cancellation_email(locked))
    return locked


def mark_no_show(booking, actor):
    with transaction.atomic():
        locked = _begin(booking, 'no_show', actor)
        return _finish(locked, 'no_show')


def record_pickup(booking, actor, mileage, notes=''):
    """First odometer reading; stored as given."""
    with transaction.atomic():
        locked = _begin(booking, 'pick_up', actor)
        if mileage is None or int(mileage) < 0:
            raise errors.InvalidMileage("Pickup mileage must be a non-negative number.")
        return _finish(
            locked,
            'pick_up',
            pickup_mileage=int(mileage),
            picked_up_at=timezone.now(),
            notes=_append_note(locked, 'Pickup', notes),
        )


def mileage_charges(booking, return_mileage):
    """Kilometres driven, kilometres over the allowance and their charge."""
    km_driven = return_mileage - booking.pickup_mileage
    if booking.total_km_allowed is not None and km_driven > booking.total_km_allowed:
        extra_km = km_driven - booking.total_km_allowed
        extra_km_charge = extra_km * Decimal(booking.extra_km_price or 0)
    else:
        extra_km = 0
        extra_km_charge = Decimal('0')
    return km_driven, extra_km, extra_km_charge


def record_return(booking, actor, mileage, notes='', extra_charges=None, extra_charges_description=''):
    extra_charges = Decimal(extra_charges or 0)
    if extra_charges < 0:
        raise errors.ValidationError("Extra charges cannot be negative.")

    with transaction.atomic():
        locked = _begin(booking, 'return', actor)
        if mileage is None:
            raise errors.InvalidMileage("Return mileage is required.")
        if int(mileage) < locked.pickup_mileage:
            raise errors.InvalidMileage(
                f"Return mileage ({mileage}) is lower than pickup mileage ({locked.pickup_mileage})."
            )
        km_driven, extra_km, extra_km_charge = mileage_charges(locked, int(mileage))
        locked.extra_km_charge = extra_km_charge
        locked.extra_charges = extra_charges
        return _finish(
            locked,
            'return',
            return_mileage=int(mileage),
            km_driven=km_driven,
            extra_km=extra_km,
            extra_charges_description=extra_charges_description or '',
            total_amount=locked.compute_total(),
            returned_at=timezone.now(),
            notes=_append_note(locked, 'Return', notes),
        )


def complete_booking(booking, actor):
    """Close the rental and credit the business wallet in the same transaction."""
    from payments.ledger import record_earning

    with transaction.atomic():
        locked = _begin(booking, 'complete', actor)
        locked = _finish(locked, 'complete', completed_at=timezone.now())
        record_earning(locked)
    return locked
