from rest_framework import serializers

from .models import Business


class BusinessSerializer(serializers.ModelSerializer):
    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    effective_commission_rate = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    vehicles_count = serializers.SerializerMethodField()

    class Meta:
        model = Business
        fields = [
            'id',
            'owner',
            'name',
            'business_type',
            'description',
            'address',
            'city',
            'phone',
            'email',
            'is_active',
            'verification_status',
            'commission_rate',
            'effective_commission_rate',
            'vehicles_count',
            'created_at',
        ]
        read_only_fields = ['verification_status', 'commission_rate', 'created_at']

    def get_vehicles_count(self, obj):
        return obj.vehicles.count()
