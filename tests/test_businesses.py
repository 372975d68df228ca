from decimal import Decimal
from unittest import mock

import pytest
from django.contrib import admin
from django.core.exceptions import ValidationError

from api.booking import services
from api.booking.email_service import Email
from api.booking.models import Booking
from api.business.kinds import CarRentalKind, HotelKind, kind_for
from api.business.models import Business
from api.garage.models import Vehicle


@pytest.mark.django_db
def test_kind_follows_business_type(business, owner):
    assert isinstance(kind_for(business), CarRentalKind)
    hotel = Business.objects.create(owner=owner, name="Hotel El Djazair", business_type=Business.TYPE_HOTEL)
    assert isinstance(kind_for(hotel), HotelKind)
    assert list(kind_for(hotel).resources()) == []


@pytest.mark.django_db
def test_car_rental_dashboard(business, vehicle, returned_booking, owner):
    services.complete_booking(returned_booking, owner)
    summary = kind_for(business).dashboard_summary()
    assert summary["business_type"] == Business.TYPE_CAR_RENTAL
    assert summary["vehicles_total"] == 1
    assert summary["vehicles_available"] == 1
    assert summary["bookings_by_status"] == {"completed": 1}
    assert summary["completed_revenue"] == Decimal("13000")


@pytest.mark.django_db
def test_dashboard_endpoint_is_private(api_client, business, owner, stranger):
    api_client.force_authenticate(owner)
    assert api_client.get(f"/api/businesses/{business.pk}/dashboard/").status_code == 200
    api_client.force_authenticate(stranger)
    assert api_client.get(f"/api/businesses/{business.pk}/dashboard/").status_code == 403


@pytest.mark.django_db
def test_creating_a_business_makes_the_caller_owner(api_client, owner):
    api_client.force_authenticate(owner)
    response = api_client.post(
        "/api/businesses/", {"name": "Sahara Rent", "business_type": "car_rental"}, format="json"
    )
    assert response.status_code == 201
    assert response.json()["owner"] == owner.pk
    assert response.json()["effective_commission_rate"] == 10


@pytest.mark.django_db
def test_inactive_businesses_are_hidden_from_the_public(api_client, business):
    business.is_active = False
    business.save()
    assert api_client.get("/api/businesses/").json()["count"] == 0


@pytest.mark.django_db
def test_commission_rate_must_be_a_percentage(business):
    business.commission_rate = Decimal("150")
    with pytest.raises(ValidationError):
        business.clean()


@pytest.mark.django_db
def test_vehicles_belong_to_car_rental_businesses(owner):
    restaurant = Business.objects.create(owner=owner, name="Le Tantonville", business_type=Business.TYPE_RESTAURANT)
    vehicle = Vehicle(business=restaurant, brand="Kia", model="Picanto", license_plate="1", price_per_day=Decimal("1"))
    with pytest.raises(ValidationError):
        vehicle.clean()


@pytest.mark.django_db
def test_email_is_skipped_without_api_key(three_day_booking, settings):
    settings.BREVO_API_KEY = ""
    with mock.patch("api.booking.email_service.sib_api_v3_sdk.TransactionalEmailsApi") as api:
        assert Email().send_booking_received_email(three_day_booking) is None
    api.assert_not_called()


@pytest.mark.django_db
def test_email_goes_through_brevo(three_day_booking, settings):
    settings.BREVO_API_KEY = "xkeysib-test"
    with mock.patch("api.booking.email_service.sib_api_v3_sdk.ApiClient"), \
            mock.patch("api.booking.email_service.sib_api_v3_sdk.TransactionalEmailsApi") as api:
        Email().send_booking_confirmed_email(three_day_booking)
    message = api.return_value.send_transac_email.call_args.args[0]
    assert message.to == [{"email": "amine@example.com"}]
    assert "Confirmed" in message.subject


@pytest.mark.django_db
def test_customer_text_is_escaped_in_emails(three_day_booking, settings):
    settings.BREVO_API_KEY = "xkeysib-test"
    three_day_booking.customer_name = "<script>alert(1)</script>"
    three_day_booking.cancellation_reason = "<b>late</b>"
    with mock.patch("api.booking.email_service.sib_api_v3_sdk.ApiClient"), \
            mock.patch("api.booking.email_service.sib_api_v3_sdk.TransactionalEmailsApi") as api:
        Email().send_booking_cancellation_email(three_day_booking)
    html = api.return_value.send_transac_email.call_args.args[0].html_content
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "&lt;b&gt;late&lt;/b&gt;" in html


@pytest.mark.django_db
def test_booking_admin_keeps_dates_and_amounts_read_only(rf, staff):
    booking_admin = admin.site._registry[Booking]
    request = rf.get("/admin/api/booking/")
    request.user = staff
    readonly = booking_admin.get_readonly_fields(request)
    for name in (
        "vehicle", "pickup_date", "pickup_time", "return_date", "return_time",
        "pickup_mileage", "return_mileage", "extra_charges", "subtotal", "total_amount", "status",
    ):
        assert name in readonly
    assert not booking_admin.has_add_permission(request)
