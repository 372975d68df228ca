"""
Wallet ledger for businesses.

Every change to a Wallet is written in the same database transaction as the
Transaction row that records it, with the wallet row locked, so balances
never drift from the transaction stream.
"""
import logging
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from api import errors
from api.booking.email_service import Email
from api.booking.services import ensure_can_manage
from payments.models import Transaction, Wallet, WithdrawalRequest

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
HUNDRED = Decimal('100')


def to_money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def get_wallet(business):
    wallet, _ = Wallet.objects.get_or_create(business=business)
    return wallet


def _locked_wallet(business):
    get_wallet(business)
    return Wallet.objects.select_for_update().get(business=business)


def commission_breakdown(total_amount, commission_rate):
    """Split a gross amount into platform commission and the business's net."""
    total_amount = to_money(total_amount)
    commission = to_money(total_amount * Decimal(commission_rate) / HUNDRED)
    return commission, total_amount - commission


def record_earning(booking):
    """
    Credit the business for a completed booking, net of commission.
    Returns the existing credit when the booking was already credited.
    """
    business = booking.vehicle.business
    with transaction.atomic():
        wallet = _locked_wallet(business)
        existing = Transaction.objects.filter(
            booking=booking, type=Transaction.TYPE_BOOKING_CREDIT
        ).first()
        if existing is not None:
            logger.warning("Booking %s already credited by transaction %s", booking.pk, existing.pk)
            return existing

        rate = business.effective_commission_rate
        commission, net = commission_breakdown(booking.total_amount, rate)

        held_until = None
        if settings.EARNINGS_HOLD_DAYS > 0:
            held_until = timezone.now() + timedelta(days=settings.EARNINGS_HOLD_DAYS)
            balance_before = wallet.pending_balance
            wallet.pending_balance += net
            balance_after = wallet.pending_balance
        else:
            balance_before = wallet.available_balance
            wallet.available_balance += net
            balance_after = wallet.available_balance
        wallet.total_earned += net

        vehicle = booking.vehicle
        credit = Transaction.objects.create(
            business=business,
            type=Transaction.TYPE_BOOKING_CREDIT,
            amount=net,
            description=f"Car booking #{booking.pk} - {vehicle.brand} {vehicle.model}",
            balance_before=balance_before,
            balance_after=balance_after,
            booking=booking,
            held_until=held_until,
            metadata={
                'booking_id': booking.pk,
                'car': f"{vehicle.brand} {vehicle.model}",
                'customer': booking.customer_name,
                'pickup_date': booking.pickup_date,
                'return_date': booking.return_date,
                'rental_days': booking.rental_days,
                'total_amount': to_money(booking.total_amount),
                'commission_rate': rate,
                'commission_amount': commission,
                'net_amount': net,
            },
        )
        wallet.save()

    logger.info(
        "Credited %s to business %s for booking %s (gross %s, commission %s%%)",
        net, business.pk, booking.pk, booking.total_amount, rate,
    )
    return credit


def release_held_earnings(now=None):
    """Move credits whose hold period has passed from pending to available."""
    now = now or timezone.now()
    matured = (
        Transaction.objects
        .filter(type=Transaction.TYPE_BOOKING_CREDIT, held_until__lte=now)
        .exclude(follow_ups__type=Transaction.TYPE_BALANCE_RELEASE)
        .select_related('business')
        .order_by('held_until')
    )

    released = []
    for credit in matured:
        with transaction.atomic():
            wallet = _locked_wallet(credit.business)
            if credit.follow_ups.filter(type=Transaction.TYPE_BALANCE_RELEASE).exists():
                continue
            balance_before = wallet.available_balance
            wallet.pending_balance -= credit.amount
            wallet.available_balance += credit.amount
            release = Transaction.objects.create(
                business=credit.business,
                type=Transaction.TYPE_BALANCE_RELEASE,
                amount=credit.amount,
                description=f"Release of held earnings from transaction #{credit.pk}",
                balance_before=balance_before,
                balance_after=wallet.available_balance,
                booking=None,
                related_transaction=credit,
                metadata={'booking_id': credit.booking_id},
            )
            wallet.save()
        released.append(release)
        logger.info("Released %s to business %s", credit.amount, credit.business_id)
    return released


def request_withdrawal(business, amount, bank_name, account_number, account_holder_name, actor):
    """
    Reserve ``amount`` from the available balance and open a withdrawal request.
    The balance check and the reservation happen under the same wallet lock.
    """
    ensure_can_manage(actor, business)
    amount = to_money(amount)
    if amount <= 0:
        raise errors.ValidationError("Withdrawal amount must be positive.")
    if amount < settings.MIN_WITHDRAWAL_AMOUNT:
        raise errors.ValidationError(
            f"The minimum withdrawal is {settings.MIN_WITHDRAWAL_AMOUNT} {settings.CURRENCY}."
        )

    with transaction.atomic():
        wallet = _locked_wallet(business)
        if amount > wallet.available_balance:
            logger.warning(
                "Withdrawal of %s refused for business %s: %s available",
                amount, business.pk, wallet.available_balance,
            )
            raise errors.InsufficientBalance(
                f"Insufficient balance: {wallet.available_balance} {settings.CURRENCY} available."
            )

        withdrawal = WithdrawalRequest.objects.create(
            business=business,
            amount=amount,
            bank_name=bank_name,
            account_number=account_number,
            account_holder_name=account_holder_name,
        )
        balance_before = wallet.available_balance
        wallet.available_balance -= amount
        wallet.total_withdrawn += amount
        Transaction.objects.create(
            business=business,
            type=Transaction.TYPE_WITHDRAWAL,
            amount=amount,
            description=f"Withdrawal request #{withdrawal.pk} to {bank_name}",
            balance_before=balance_before,
            balance_after=wallet.available_balance,
            withdrawal_request=withdrawal,
        )
        wallet.save()
        transaction.on_commit(lambda: Email().send_withdrawal_requested_email(withdrawal))

    logger.info("Withdrawal #%s of %s requested by business %s", withdrawal.pk, amount, business.pk)
    return withdrawal


def _review(withdrawal, actor, allowed_from, target, notes=''):
    if actor is None or not actor.is_staff:
        raise errors.NotAllowed("Only platform administrators can review withdrawals.")
    locked = WithdrawalRequest.objects.select_for_update().select_related('business').get(pk=withdrawal.pk)
    if locked.status not in allowed_from:
        raise errors.InvalidTransition(
            f"Cannot mark a {locked.status} withdrawal as {target}."
        )
    locked.status = target
    locked.processed_at = timezone.now()
    if notes:
        locked.admin_notes = notes
    locked.save()
    logger.info("Withdrawal #%s marked %s by %s", locked.pk, target, actor)
    return locked


def approve_withdrawal(withdrawal, actor, notes=''):
    with transaction.atomic():
        return _review(withdrawal, actor, [WithdrawalRequest.STATUS_PENDING], WithdrawalRequest.STATUS_APPROVED, notes)


def complete_withdrawal(withdrawal, actor, notes=''):
    """The payout left the platform; the amount was already reserved at request time."""
    with transaction.atomic():
        locked = _review(
            withdrawal, actor, [WithdrawalRequest.STATUS_APPROVED], WithdrawalRequest.STATUS_COMPLETED, notes
        )
        transaction.on_commit(lambda: Email().send_withdrawal_processed_email(locked))
    return locked


def reject_withdrawal(withdrawal, actor, notes=''):
    """Refuse the payout and give the reserved amount back to the available balance."""
    with transaction.atomic():
        locked = _review(
            withdrawal,
            actor,
            [WithdrawalRequest.STATUS_PENDING, WithdrawalRequest.STATUS_APPROVED],
            WithdrawalRequest.STATUS_REJECTED,
            notes,
        )
        wallet = _locked_wallet(locked.business)
        balance_before = wallet.available_balance
        wallet.available_balance += locked.amount
        wallet.total_withdrawn -= locked.amount
        Transaction.objects.create(
            business=locked.business,
            type=Transaction.TYPE_WITHDRAWAL_REVERSAL,
            amount=locked.amount,
            description=f"Withdrawal request #{locked.pk} rejected",
            balance_before=balance_before,
            balance_after=wallet.available_balance,
            withdrawal_request=locked,
            metadata={'reason': notes} if notes else {},
        )
        wallet.save()
        transaction.on_commit(lambda: Email().send_withdrawal_processed_email(locked))
    return locked


def recompute_wallet(business):
    """Balances rebuilt from the transaction stream alone."""
    totals = {
        row['type']: row['total']
        for row in Transaction.objects.filter(business=business).order_by().values('type').annotate(total=Sum('amount'))
    }
    held = Transaction.objects.filter(
        business=business, type=Transaction.TYPE_BOOKING_CREDIT, held_until__isnull=False
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0')

    def total(kind):
        return totals.get(kind) or Decimal('0')

    earned = (
        total(Transaction.TYPE_BOOKING_CREDIT)
        + total(Transaction.TYPE_EARNING)
        - total(Transaction.TYPE_REFUND)
        - total(Transaction.TYPE_COMMISSION_DEDUCTION)
    )
    withdrawn = total(Transaction.TYPE_WITHDRAWAL) - total(Transaction.TYPE_WITHDRAWAL_REVERSAL)
    pending = held - total(Transaction.TYPE_BALANCE_RELEASE)
    return {
        'available_balance': earned - withdrawn - pending,
        'pending_balance': pending,
        'total_earned': earned,
        'total_withdrawn': withdrawn,
    }
