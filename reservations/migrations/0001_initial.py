import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

ROOM_TYPE_CHOICES = [
    ('classic-single', 'Classic Single'),
    ('deluxe', 'Deluxe'),
    ('deluxe-large', 'Deluxe Large'),
    ('business-suite', 'Business Suite'),
    ('executive-suite', 'Executive Suite'),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('room_type_id', models.CharField(choices=ROOM_TYPE_CHOICES, max_length=50)),
                ('guest_name', models.CharField(max_length=150)),
                ('guest_email', models.EmailField(max_length=254)),
                ('guest_phone', models.CharField(max_length=50)),
                ('check_in', models.DateField()),
                ('check_out', models.DateField()),
                ('guests', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('confirmed', 'Confirmed'),
                        ('checked_in', 'Checked In'),
                        ('checked_out', 'Checked Out'),
                        ('completed', 'Completed'),
                        ('cancelled', 'Cancelled'),
                        ('no_show', 'No Show'),
                        ('voided', 'Voided'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('payment_status', models.CharField(
                    choices=[('pending', 'Pending'), ('paid', 'Paid')], default='pending', max_length=10,
                )),
                ('payment_method', models.CharField(
                    choices=[('flutterwave', 'Flutterwave'), ('manual', 'Manual')], default='manual', max_length=20,
                )),
                ('base_total', models.DecimalField(decimal_places=2, max_digits=12)),
                ('transaction_fee', models.DecimalField(decimal_places=2, max_digits=12)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('created_by_role', models.CharField(
                    choices=[
                        ('client', 'Client'),
                        ('receptionist', 'Receptionist'),
                        ('superadmin', 'Superadmin'),
                        ('supervisor', 'Supervisor'),
                    ],
                    max_length=20,
                )),
                ('transaction_ref', models.CharField(max_length=100, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['room_type_id', 'check_in', 'check_out'], name='booking_room_dates_idx'),
                    models.Index(fields=['status'], name='booking_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(check_out__gt=models.F('check_in')),
                        name='booking_check_out_after_check_in',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='RoomInventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('room_type_id', models.CharField(choices=ROOM_TYPE_CHOICES, max_length=50)),
                ('total_rooms', models.PositiveIntegerField()),
                ('available_rooms', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(
                    choices=[
                        ('Available', 'Available'),
                        ('Maintenance', 'Maintenance'),
                        ('Unavailable', 'Unavailable'),
                    ],
                    default='Available',
                    max_length=20,
                )),
                ('is_active', models.BooleanField(default=True)),
                ('version', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'room inventory',
                'ordering': ['room_type_id'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(is_active=True),
                        fields=('room_type_id',),
                        name='unique_active_inventory_per_room_type',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='StaffProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(
                    choices=[
                        ('superadmin', 'Superadmin'),
                        ('supervisor', 'Supervisor'),
                        ('receptionist', 'Receptionist'),
                    ],
                    max_length=20,
                )),
                ('user', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='staff_profile',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
        ),
    ]
