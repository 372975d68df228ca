import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150)),
                ('business_type', models.CharField(choices=[('hotel', 'Hotel'), ('restaurant', 'Restaurant'), ('car_rental', 'Car rental')], default='car_rental', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('is_active', models.BooleanField(default=True)),
                ('verification_status', models.CharField(choices=[('pending', 'Pending'), ('verified', 'Verified'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('commission_rate', models.DecimalField(blank=True, decimal_places=2, help_text='Platform commission in percent. Empty means the platform default.', max_digits=5, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='businesses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(max_length=100)),
                ('model', models.CharField(max_length=100)),
                ('year', models.PositiveIntegerField(blank=True, null=True)),
                ('vehicle_type', models.CharField(choices=[('suv', 'SUV'), ('sedan', 'Sedan'), ('hatchback', 'Hatchback'), ('convertible', 'Convertible'), ('van', 'Van'), ('pickup', 'Pickup')], default='sedan', max_length=20)),
                ('transmission', models.CharField(choices=[('automatic', 'Automatic'), ('manual', 'Manual')], default='manual', max_length=10)),
                ('fuel_type', models.CharField(choices=[('petrol', 'Petrol'), ('diesel', 'Diesel'), ('hybrid', 'Hybrid'), ('electric', 'Electric'), ('lpg', 'LPG')], default='petrol', max_length=10)),
                ('seats', models.PositiveIntegerField(default=5, help_text='Number of passengers the car can accommodate.')),
                ('doors', models.PositiveIntegerField(default=4)),
                ('color', models.CharField(blank=True, max_length=30)),
                ('license_plate', models.CharField(max_length=30, unique=True)),
                ('features', models.JSONField(blank=True, default=list)),
                ('description', models.TextField(blank=True)),
                ('price_per_day', models.DecimalField(decimal_places=2, max_digits=12)),
                ('deposit_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('mileage_limit', models.PositiveIntegerField(blank=True, help_text='Kilometres allowed per rental day. Empty means unlimited.', null=True)),
                ('extra_km_price', models.DecimalField(blank=True, decimal_places=2, help_text='Charged per kilometre beyond the allowance.', max_digits=12, null=True)),
                ('min_rental_days', models.PositiveIntegerField(blank=True, null=True)),
                ('max_rental_days', models.PositiveIntegerField(blank=True, null=True)),
                ('is_available', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='vehicles', to='api.business')),
            ],
            options={
                'ordering': ['brand', 'model'],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_name', models.CharField(max_length=150)),
                ('customer_email', models.EmailField(max_length=254)),
                ('customer_phone', models.CharField(max_length=20)),
                ('customer_id_number', models.CharField(blank=True, max_length=50)),
                ('driver_license_number', models.CharField(max_length=50)),
                ('pickup_date', models.DateField()),
                ('pickup_time', models.TimeField()),
                ('return_date', models.DateField()),
                ('return_time', models.TimeField()),
                ('pickup_at', models.DateTimeField(db_index=True, editable=False)),
                ('return_at', models.DateTimeField(db_index=True, editable=False)),
                ('pickup_location', models.CharField(blank=True, max_length=255)),
                ('return_location', models.CharField(blank=True, max_length=255)),
                ('rental_days', models.PositiveIntegerField()),
                ('price_per_day', models.DecimalField(decimal_places=2, max_digits=12)),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=12)),
                ('deposit_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('total_km_allowed', models.PositiveIntegerField(blank=True, null=True)),
                ('extra_km_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('pickup_mileage', models.PositiveIntegerField(blank=True, null=True)),
                ('return_mileage', models.PositiveIntegerField(blank=True, null=True)),
                ('km_driven', models.PositiveIntegerField(blank=True, null=True)),
                ('extra_km', models.PositiveIntegerField(blank=True, null=True)),
                ('extra_km_charge', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('extra_charges', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('extra_charges_description', models.CharField(blank=True, max_length=255)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('picked_up', 'Picked up'), ('returned', 'Returned'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('no_show', 'No show')], db_index=True, default='pending', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('cancellation_reason', models.CharField(blank=True, max_length=255)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('picked_up_at', models.DateTimeField(blank=True, null=True)),
                ('returned_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='car_bookings', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='api.vehicle')),
            ],
            options={
                'ordering': ['-pickup_at'],
                'constraints': [models.CheckConstraint(condition=models.Q(('return_at__gt', models.F('pickup_at'))), name='booking_return_after_pickup')],
            },
        ),
    ]
