from datetime import datetime

from django.conf import settings
from django.db import models

from api.garage.models import Vehicle


class Booking(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_PICKED_UP = 'picked_up'
    STATUS_RETURNED = 'returned'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no_show'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_PICKED_UP, 'Picked up'),
        (STATUS_RETURNED, 'Returned'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]

    # Bookings in these states no longer hold the vehicle.
    RELEASED_STATUSES = [STATUS_CANCELLED]

    vehicle = models.ForeignKey(Vehicle, on_delete=models.PROTECT, related_name="bookings")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="car_bookings",
    )

    customer_name = models.CharField(max_length=150)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=20)
    customer_id_number = models.CharField(max_length=50, blank=True)
    driver_license_number = models.CharField(max_length=50)

    pickup_date = models.DateField()
    pickup_time = models.TimeField()
    return_date = models.DateField()
    return_time = models.TimeField()
    # Combined from the date/time pairs on save; used for overlap queries.
    pickup_at = models.DateTimeField(db_index=True, editable=False)
    return_at = models.DateTimeField(db_index=True, editable=False)
    pickup_location = models.CharField(max_length=255, blank=True)
    return_location = models.CharField(max_length=255, blank=True)

    rental_days = models.PositiveIntegerField()
    price_per_day = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_km_allowed = models.PositiveIntegerField(null=True, blank=True)
    extra_km_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    pickup_mileage = models.PositiveIntegerField(null=True, blank=True)
    return_mileage = models.PositiveIntegerField(null=True, blank=True)
    km_driven = models.PositiveIntegerField(null=True, blank=True)
    extra_km = models.PositiveIntegerField(null=True, blank=True)
    extra_km_charge = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    extra_charges = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    extra_charges_description = models.CharField(max_length=255, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    picked_up_at = models.DateTimeField(null=True, blank=True)
    returned_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-pickup_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(return_at__gt=models.F('pickup_at')),
                name='booking_return_after_pickup',
            ),
        ]

    def __str__(self):
        return (
            f"Booking #{self.pk} {self.customer_name} - {self.vehicle} "
            f"from {self.pickup_date} {self.pickup_time:%H:%M} "
            f"to {self.return_date} {self.return_time:%H:%M} ({self.status})"
        )

    @property
    def business(self):
        return self.vehicle.business

    def compute_total(self):
        return self.subtotal + (self.extra_km_charge or 0) + (self.extra_charges or 0)

    def save(self, *args, **kwargs):
        self.pickup_at = datetime.combine(self.pickup_date, self.pickup_time)
        self.return_at = datetime.combine(self.return_date, self.return_time)
        super().save(*args, **kwargs)
