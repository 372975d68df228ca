from datetime import datetime, time
from decimal import Decimal

from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import serializers

from api.booking.availability import default_return_at
from api.booking.models import Booking


class CalendarDateTimeField(serializers.Field):
    """
    ISO 8601 date or date-time. A bare date means midnight; an offset, if
    given, is dropped rather than converted.
    """

    default_error_messages = {
        'invalid': 'Expected an ISO 8601 date or date-time.',
    }

    def to_internal_value(self, data):
        value = str(data).strip()
        try:
            parsed = parse_datetime(value)
        except ValueError:
            self.fail('invalid')
        if parsed is not None:
            return parsed.replace(tzinfo=None)
        try:
            day = parse_date(value)
        except ValueError:
            self.fail('invalid')
        if day is None:
            self.fail('invalid')
        return datetime.combine(day, time.min)

    def to_representation(self, value):
        return value.isoformat()


class AvailabilityQuerySerializer(serializers.Serializer):
    pickup = CalendarDateTimeField()

    def get_fields(self):
        fields = super().get_fields()
        # "return" is a Python keyword and cannot be declared as an attribute.
        fields["return"] = CalendarDateTimeField()
        return fields

    def validate(self, data):
        if data['return'] <= data['pickup']:
            raise serializers.ValidationError("Return must be after pickup.")
        return data


class VehicleSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    brand = serializers.CharField()
    model = serializers.CharField()
    license_plate = serializers.CharField()
    mileage_limit = serializers.IntegerField(allow_null=True)
    extra_km_price = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)


class BookingSerializer(serializers.ModelSerializer):
    vehicle = VehicleSummarySerializer(read_only=True)
    business = serializers.IntegerField(source='vehicle.business_id', read_only=True)
    business_name = serializers.CharField(source='vehicle.business.name', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id',
            'vehicle',
            'business',
            'business_name',
            'user',
            'customer_name',
            'customer_email',
            'customer_phone',
            'customer_id_number',
            'driver_license_number',
            'pickup_date',
            'pickup_time',
            'return_date',
            'return_time',
            'pickup_location',
            'return_location',
            'rental_days',
            'price_per_day',
            'subtotal',
            'deposit_amount',
            'total_km_allowed',
            'pickup_mileage',
            'return_mileage',
            'km_driven',
            'extra_km',
            'extra_km_charge',
            'extra_charges',
            'extra_charges_description',
            'total_amount',
            'status',
            'notes',
            'cancellation_reason',
            'confirmed_at',
            'picked_up_at',
            'returned_at',
            'completed_at',
            'cancelled_at',
            'created_at',
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=150)
    customer_email = serializers.EmailField()
    customer_phone = serializers.CharField(max_length=20)
    customer_id_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    driver_license_number = serializers.CharField(max_length=50)
    pickup_date = serializers.DateField()
    pickup_time = serializers.TimeField()
    return_date = serializers.DateField()
    return_time = serializers.TimeField(required=False, allow_null=True)
    pickup_location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    return_location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    CUSTOMER_FIELDS = [
        'customer_name',
        'customer_email',
        'customer_phone',
        'customer_id_number',
        'driver_license_number',
        'pickup_location',
        'return_location',
    ]

    def validate(self, data):
        pickup_at = datetime.combine(data['pickup_date'], data['pickup_time'])
        if data.get('return_time') is None:
            return_at = default_return_at(data['return_date'], data['pickup_time'])
        else:
            return_at = datetime.combine(data['return_date'], data['return_time'])

        if return_at <= pickup_at:
            raise serializers.ValidationError("Return date and time must be after pickup.")

        data['pickup_at'] = pickup_at
        data['return_at'] = return_at
        return data

    def customer_data(self):
        return {
            name: self.validated_data[name]
            for name in self.CUSTOMER_FIELDS
            if name in self.validated_data
        }


class MileageSerializer(serializers.Serializer):
    mileage = serializers.IntegerField(min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    # Field names used by the professional console.
    aliases = {'pickup_mileage': 'mileage'}

    def to_internal_value(self, data):
        data = dict(data.items())
        for alias, name in self.aliases.items():
            if name not in data and alias in data:
                data[name] = data[alias]
        return super().to_internal_value(data)


class ReturnSerializer(MileageSerializer):
    extra_charges = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    extra_charges_description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=''
    )

    aliases = {
        'return_mileage': 'mileage',
        'extra_charges_reason': 'extra_charges_description',
    }


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
