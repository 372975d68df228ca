from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from api.booking.models import Booking
from api.business.models import Business


class Wallet(models.Model):
    """
    Running balances of one business. Only ``payments.ledger`` writes here,
    always together with the Transaction that explains the change.
    """

    business = models.OneToOneField(Business, on_delete=models.CASCADE, related_name='wallet')
    available_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    pending_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    total_earned = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    total_withdrawn = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Wallet of {self.business.name} - {self.available_balance} available"


class WithdrawalRequest(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_COMPLETED = 'completed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    business = models.ForeignKey(Business, on_delete=models.PROTECT, related_name='withdrawal_requests')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    bank_name = models.CharField(max_length=100)
    account_number = models.CharField(max_length=50)
    account_holder_name = models.CharField(max_length=150)
    admin_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Withdrawal #{self.pk} {self.business.name} - {self.amount} ({self.status})"


class Transaction(models.Model):
    """
    One immutable wallet movement. ``balance_before``/``balance_after`` are
    the balance the movement was applied to, captured at write time.
    """

    TYPE_BOOKING_CREDIT = 'booking_credit'
    TYPE_EARNING = 'earning'
    TYPE_WITHDRAWAL = 'withdrawal'
    TYPE_WITHDRAWAL_REVERSAL = 'withdrawal_reversal'
    TYPE_REFUND = 'refund'
    TYPE_BALANCE_RELEASE = 'balance_release'
    TYPE_COMMISSION_DEDUCTION = 'commission_deduction'

    TYPE_CHOICES = [
        (TYPE_BOOKING_CREDIT, 'Booking credit'),
        (TYPE_EARNING, 'Earning'),
        (TYPE_WITHDRAWAL, 'Withdrawal'),
        (TYPE_WITHDRAWAL_REVERSAL, 'Withdrawal reversal'),
        (TYPE_REFUND, 'Refund'),
        (TYPE_BALANCE_RELEASE, 'Balance release'),
        (TYPE_COMMISSION_DEDUCTION, 'Commission deduction'),
    ]

    CREDIT_TYPES = [TYPE_BOOKING_CREDIT, TYPE_EARNING, TYPE_BALANCE_RELEASE, TYPE_WITHDRAWAL_REVERSAL]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('failed', 'Failed'),
    ]

    business = models.ForeignKey(Business, on_delete=models.PROTECT, related_name='transactions')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed')
    description = models.CharField(max_length=255)
    balance_before = models.DecimalField(max_digits=14, decimal_places=2)
    balance_after = models.DecimalField(max_digits=14, decimal_places=2)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    booking = models.ForeignKey(
        Booking, on_delete=models.PROTECT, null=True, blank=True, related_name='transactions'
    )
    withdrawal_request = models.ForeignKey(
        WithdrawalRequest, on_delete=models.PROTECT, null=True, blank=True, related_name='transactions'
    )
    related_transaction = models.ForeignKey(
        'self', on_delete=models.PROTECT, null=True, blank=True, related_name='follow_ups'
    )
    held_until = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['booking'],
                condition=models.Q(type='booking_credit'),
                name='one_credit_per_booking',
            ),
            models.UniqueConstraint(
                fields=['related_transaction'],
                condition=models.Q(type='balance_release'),
                name='one_release_per_credit',
            ),
        ]

    def __str__(self):
        return f"{self.get_type_display()} {self.amount} for {self.business.name}"

    @property
    def is_credit(self):
        return self.type in self.CREDIT_TYPES

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Ledger transactions cannot be modified once recorded.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Ledger transactions cannot be deleted.")
