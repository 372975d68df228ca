from django.contrib import admin
from django.contrib import messages

from api import errors
from api.booking import services
from api.booking.models import Booking
from api.business.models import Business
from api.garage.models import Vehicle

admin.site.site_header = "Marketplace Back Office"
admin.site.site_title = "Admin Portal"
admin.site.index_title = "Dashboard"


class VehicleInline(admin.TabularInline):
    model = Vehicle
    fields = ('brand', 'model', 'license_plate', 'price_per_day', 'is_available')
    extra = 0
    show_change_link = True


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ('name', 'business_type', 'owner', 'city', 'is_active', 'verification_status', 'commission_rate')
    list_filter = ('business_type', 'is_active', 'verification_status')
    search_fields = ('name', 'email', 'phone', 'owner__username')
    raw_id_fields = ('owner',)
    inlines = [VehicleInline]


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ('brand', 'model', 'license_plate', 'business', 'price_per_day', 'mileage_limit', 'is_available')
    list_filter = ('is_available', 'vehicle_type', 'transmission', 'fuel_type')
    search_fields = ('brand', 'model', 'license_plate', 'business__name')
    raw_id_fields = ('business',)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'customer_name', 'vehicle', 'pickup_date', 'return_date',
        'rental_days', 'total_amount', 'status',
    )
    list_filter = ('status', 'pickup_date')
    search_fields = ('customer_name', 'customer_email', 'customer_phone', 'vehicle__license_plate')
    raw_id_fields = ('user',)
    date_hierarchy = 'pickup_date'
    # Dates, mileage and charges only change through the booking services,
    # which re-check overlap and keep the amounts consistent.
    readonly_fields = (
        'vehicle', 'pickup_date', 'pickup_time', 'return_date', 'return_time',
        'rental_days', 'price_per_day', 'subtotal', 'deposit_amount', 'total_km_allowed', 'extra_km_price',
        'pickup_mileage', 'return_mileage', 'km_driven', 'extra_km', 'extra_km_charge',
        'extra_charges', 'total_amount', 'status',
        'confirmed_at', 'picked_up_at', 'returned_at', 'completed_at', 'cancelled_at',
    )
    actions = ['confirm_selected', 'cancel_selected']

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('vehicle', 'vehicle__business')

    def _run(self, request, queryset, operation, done):
        for booking in queryset:
            try:
                operation(booking, request.user)
                self.message_user(request, f"Booking #{booking.pk} {done}.", messages.SUCCESS)
            except errors.MarketplaceError as e:
                self.message_user(request, f"Booking #{booking.pk}: {e.detail}", messages.ERROR)

    @admin.action(description="Confirm selected bookings")
    def confirm_selected(self, request, queryset):
        self._run(request, queryset, services.confirm_booking, "confirmed")

    @admin.action(description="Cancel selected bookings")
    def cancel_selected(self, request, queryset):
        self._run(request, queryset, services.cancel_booking, "cancelled")
