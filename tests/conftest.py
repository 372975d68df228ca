from datetime import datetime
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from api.booking import services
from api.business.models import Business
from api.garage.models import Vehicle

User = get_user_model()


@pytest.fixture
def owner(db):
    return User.objects.create_user(username="atlas-owner", password="pass1234", email="owner@atlas.dz")


@pytest.fixture
def stranger(db):
    return User.objects.create_user(username="someone-else", password="pass1234")


@pytest.fixture
def staff(db):
    return User.objects.create_user(username="backoffice", password="pass1234", is_staff=True)


@pytest.fixture
def business(owner):
    return Business.objects.create(
        owner=owner,
        name="Atlas Cars",
        business_type=Business.TYPE_CAR_RENTAL,
        city="Algiers",
        email="contact@atlas.dz",
    )


@pytest.fixture
def vehicle(business):
    return Vehicle.objects.create(
        business=business,
        brand="Renault",
        model="Clio",
        license_plate="01234-116-16",
        price_per_day=Decimal("4000"),
        deposit_amount=Decimal("20000"),
        mileage_limit=150,
        extra_km_price=Decimal("20"),
    )


@pytest.fixture
def customer():
    return {
        "customer_name": "Amine Benali",
        "customer_email": "amine@example.com",
        "customer_phone": "0555123456",
        "driver_license_number": "DL-778812",
    }


@pytest.fixture
def book(vehicle, customer):
    """Create a booking on the default vehicle from two datetimes."""

    def make(pickup_at, return_at, on=None):
        return services.create_booking(on or vehicle, pickup_at, return_at, customer=dict(customer))

    return make


@pytest.fixture
def three_day_booking(book):
    return book(datetime(2024, 6, 1, 10, 0), datetime(2024, 6, 4, 10, 0))


@pytest.fixture
def returned_booking(three_day_booking, owner):
    """Three days, 500 km driven against a 450 km allowance."""
    services.confirm_booking(three_day_booking, owner)
    services.record_pickup(three_day_booking, owner, mileage=10000)
    return services.record_return(three_day_booking, owner, mileage=10500)


@pytest.fixture
def api_client():
    return APIClient()
