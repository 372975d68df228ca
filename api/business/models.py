from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Business(models.Model):
    """
    A hotel, restaurant or car-rental company listed on the marketplace.
    Every business has one owner account and one wallet.
    """

    TYPE_HOTEL = "hotel"
    TYPE_RESTAURANT = "restaurant"
    TYPE_CAR_RENTAL = "car_rental"

    TYPE_CHOICES = [
        (TYPE_HOTEL, "Hotel"),
        (TYPE_RESTAURANT, "Restaurant"),
        (TYPE_CAR_RENTAL, "Car rental"),
    ]

    VERIFICATION_CHOICES = [
        ("pending", "Pending"),
        ("verified", "Verified"),
        ("rejected", "Rejected"),
    ]

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="businesses",
    )
    name = models.CharField(max_length=150)
    business_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_CAR_RENTAL)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    verification_status = models.CharField(max_length=20, choices=VERIFICATION_CHOICES, default="pending")
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Platform commission in percent. Empty means the platform default.",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_business_type_display()})"

    @property
    def effective_commission_rate(self):
        if self.commission_rate is not None:
            return self.commission_rate
        return Decimal(settings.PLATFORM_COMMISSION_RATE)

    def is_managed_by(self, user):
        if user is None or not user.is_authenticated:
            return False
        return user.is_staff or user.pk == self.owner_id

    def clean(self):
        if self.commission_rate is not None and not (0 <= self.commission_rate <= 100):
            raise ValidationError("Commission rate must be between 0 and 100.")
