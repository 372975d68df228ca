from rest_framework import serializers

from payments.models import Transaction, Wallet, WithdrawalRequest


class WalletSerializer(serializers.ModelSerializer):
    business = serializers.PrimaryKeyRelatedField(read_only=True)
    business_name = serializers.CharField(source='business.name', read_only=True)
    commission_rate = serializers.DecimalField(
        source='business.effective_commission_rate', max_digits=5, decimal_places=2, read_only=True
    )

    class Meta:
        model = Wallet
        fields = [
            'business',
            'business_name',
            'available_balance',
            'pending_balance',
            'total_earned',
            'total_withdrawn',
            'commission_rate',
            'updated_at',
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    is_credit = serializers.BooleanField(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'type',
            'amount',
            'status',
            'description',
            'balance_before',
            'balance_after',
            'metadata',
            'is_credit',
            'booking',
            'withdrawal_request',
            'related_transaction',
            'held_until',
            'created_at',
        ]
        read_only_fields = fields


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.name', read_only=True)

    class Meta:
        model = WithdrawalRequest
        fields = [
            'id',
            'business',
            'business_name',
            'amount',
            'status',
            'bank_name',
            'account_number',
            'account_holder_name',
            'admin_notes',
            'created_at',
            'processed_at',
        ]
        read_only_fields = fields


class WithdrawSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    bank_name = serializers.CharField(max_length=100)
    account_number = serializers.CharField(max_length=50)
    account_holder_name = serializers.CharField(max_length=150)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Please enter a valid amount.")
        return value


class ReviewSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        # The back-office sends the rejection text as "reason".
        data = dict(data.items())
        if 'notes' not in data and 'reason' in data:
            data['notes'] = data['reason']
        return super().to_internal_value(data)
