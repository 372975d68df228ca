from django.contrib import admin
from django.contrib import messages

from api import errors
from payments import ledger
from payments.models import Transaction, Wallet, WithdrawalRequest


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ('business', 'available_balance', 'pending_balance', 'total_earned', 'total_withdrawn', 'updated_at')
    search_fields = ('business__name',)
    readonly_fields = ('business', 'available_balance', 'pending_balance', 'total_earned', 'total_withdrawn')
    actions = ['check_against_ledger']

    def has_add_permission(self, request):
        return False

    @admin.action(description="Compare balances with the transaction history")
    def check_against_ledger(self, request, queryset):
        for wallet in queryset:
            expected = ledger.recompute_wallet(wallet.business)
            drift = {
                name: (getattr(wallet, name), value)
                for name, value in expected.items()
                if getattr(wallet, name) != value
            }
            if drift:
                self.message_user(request, f"{wallet.business.name}: mismatch {drift}", messages.ERROR)
            else:
                self.message_user(request, f"{wallet.business.name}: balances match", messages.SUCCESS)


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'business', 'type', 'amount', 'balance_before', 'balance_after', 'status')
    list_filter = ('type', 'status', 'created_at')
    search_fields = ('business__name', 'description', 'booking__id')
    ordering = ('-created_at',)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'business', 'amount', 'status', 'bank_name', 'account_holder_name', 'created_at', 'processed_at')
    list_filter = ('status', 'created_at')
    search_fields = ('business__name', 'account_holder_name', 'account_number')
    readonly_fields = ('business', 'amount', 'status', 'bank_name', 'account_number', 'account_holder_name', 'processed_at')
    actions = ['approve_selected', 'reject_selected', 'complete_selected']

    def has_add_permission(self, request):
        return False

    def _review(self, request, queryset, operation, done):
        for withdrawal in queryset:
            try:
                operation(withdrawal, request.user)
                self.message_user(request, f"Withdrawal #{withdrawal.pk} {done}.", messages.SUCCESS)
            except errors.MarketplaceError as e:
                self.message_user(request, f"Withdrawal #{withdrawal.pk}: {e.detail}", messages.WARNING)

    @admin.action(description="Approve selected withdrawals")
    def approve_selected(self, request, queryset):
        self._review(request, queryset, ledger.approve_withdrawal, "approved")

    @admin.action(description="Reject selected withdrawals (restores the balance)")
    def reject_selected(self, request, queryset):
        self._review(request, queryset, ledger.reject_withdrawal, "rejected")

    @admin.action(description="Mark selected withdrawals as paid out")
    def complete_selected(self, request, queryset):
        self._review(request, queryset, ledger.complete_withdrawal, "completed")
