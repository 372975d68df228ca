from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from api.business.models import Business
from .models import Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    business = serializers.PrimaryKeyRelatedField(queryset=Business.objects.all())
    business_name = serializers.CharField(source='business.name', read_only=True)

    class Meta:
        model = Vehicle
        fields = '__all__'
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, data):
        instance = Vehicle(**{**self._current_values(), **data})
        try:
            instance.clean()
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages)
        return data

    def _current_values(self):
        if self.instance is None:
            return {}
        return {
            field.name: getattr(self.instance, field.name)
            for field in Vehicle._meta.concrete_fields
            if not field.primary_key
        }
