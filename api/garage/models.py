from django.core.exceptions import ValidationError
from django.db import models

from api.business.models import Business


class Vehicle(models.Model):
    """
    A rentable car listed by a car-rental business.
    ``is_available`` is the owner's manual switch and is independent of bookings.
    """

    VEHICLE_TYPE_CHOICES = [
        ("suv", "SUV"),
        ("sedan", "Sedan"),
        ("hatchback", "Hatchback"),
        ("convertible", "Convertible"),
        ("van", "Van"),
        ("pickup", "Pickup"),
    ]

    TRANSMISSION_CHOICES = [
        ("automatic", "Automatic"),
        ("manual", "Manual"),
    ]

    FUEL_TYPE_CHOICES = [
        ("petrol", "Petrol"),
        ("diesel", "Diesel"),
        ("hybrid", "Hybrid"),
        ("electric", "Electric"),
        ("lpg", "LPG"),
    ]

    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name='vehicles'
    )

    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveIntegerField(null=True, blank=True)
    vehicle_type = models.CharField(
        max_length=20,
        choices=VEHICLE_TYPE_CHOICES,
        default="sedan"
    )
    transmission = models.CharField(
        max_length=10,
        choices=TRANSMISSION_CHOICES,
        default="manual",
    )
    fuel_type = models.CharField(
        max_length=10,
        choices=FUEL_TYPE_CHOICES,
        default="petrol",
    )
    seats = models.PositiveIntegerField(
        default=5,
        help_text="Number of passengers the car can accommodate."
    )
    doors = models.PositiveIntegerField(default=4)
    color = models.CharField(max_length=30, blank=True)
    license_plate = models.CharField(max_length=30, unique=True)
    features = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)

    price_per_day = models.DecimalField(max_digits=12, decimal_places=2)
    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    mileage_limit = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Kilometres allowed per rental day. Empty means unlimited."
    )
    extra_km_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Charged per kilometre beyond the allowance."
    )
    min_rental_days = models.PositiveIntegerField(null=True, blank=True)
    max_rental_days = models.PositiveIntegerField(null=True, blank=True)

    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["brand", "model"]

    def clean(self):
        if self.price_per_day is not None and self.price_per_day < 0:
            raise ValidationError("Price per day cannot be negative.")
        if self.deposit_amount is not None and self.deposit_amount < 0:
            raise ValidationError("Deposit amount cannot be negative.")
        if self.extra_km_price is not None and self.extra_km_price < 0:
            raise ValidationError("Extra kilometre price cannot be negative.")
        if self.mileage_limit is not None and self.extra_km_price is None:
            raise ValidationError("Extra kilometre price is required when a mileage limit is set.")
        if self.min_rental_days is not None and self.min_rental_days < 1:
            raise ValidationError("Minimum rental days must be at least 1.")
        if (
            self.min_rental_days is not None
            and self.max_rental_days is not None
            and self.min_rental_days > self.max_rental_days
        ):
            raise ValidationError("Minimum rental days cannot exceed maximum rental days.")
        if self.business_id and self.business.business_type != Business.TYPE_CAR_RENTAL:
            raise ValidationError("Vehicles can only be listed by car-rental businesses.")

    def __str__(self):
        return f"{self.brand} {self.model} ({self.license_plate})"
