import uuid

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from .catalog import ROOM_TYPE_CHOICES


class StaffProfile(models.Model):
    class Role(models.TextChoices):
        SUPERADMIN = "superadmin"
        SUPERVISOR = "supervisor"
        RECEPTIONIST = "receptionist"
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="staff_profile")
    role = models.CharField(max_length=20, choices=Role.choices)

    def __str__(self):
        return f"{self.user.get_username()} ({self.role})"


class RoomInventory(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "Available"
        MAINTENANCE = "Maintenance"
        UNAVAILABLE = "Unavailable"
    room_type_id = models.CharField(max_length=50, choices=ROOM_TYPE_CHOICES)
    total_rooms = models.PositiveIntegerField()
    # Denormalised hint; capacity decisions recompute from bookings
    available_rooms = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["room_type_id"]
        verbose_name_plural = "room inventory"
        constraints = [
            models.UniqueConstraint(
                fields=["room_type_id"],
                condition=Q(is_active=True),
                name="unique_active_inventory_per_room_type",
            ),
        ]

    def __str__(self):
        return f"{self.room_type_id}: {self.available_rooms}/{self.total_rooms}"


class Booking(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending"
        CONFIRMED = "confirmed"
        CHECKED_IN = "checked_in"
        CHECKED_OUT = "checked_out"
        COMPLETED = "completed"
        CANCELLED = "cancelled"
        NO_SHOW = "no_show"
        VOIDED = "voided"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending"
        PAID = "paid"

    class PaymentMethod(models.TextChoices):
        FLUTTERWAVE = "flutterwave"
        MANUAL = "manual"

    class CreatedBy(models.TextChoices):
        CLIENT = "client"
        RECEPTIONIST = "receptionist"
        SUPERADMIN = "superadmin"
        SUPERVISOR = "supervisor"

    # A booking in any of these no longer holds a room
    ROOM_FREEING_STATUSES = frozenset({
        Status.CHECKED_OUT,
        Status.COMPLETED,
        Status.CANCELLED,
        Status.NO_SHOW,
        Status.VOIDED,
    })

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room_type_id = models.CharField(max_length=50, choices=ROOM_TYPE_CHOICES)
    guest_name = models.CharField(max_length=150)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=50)
    check_in = models.DateField()
    check_out = models.DateField()  # exclusive
    guests = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.MANUAL)
    base_total = models.DecimalField(max_digits=12, decimal_places=2)
    transaction_fee = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_by_role = models.CharField(max_length=20, choices=CreatedBy.choices)
    transaction_ref = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["room_type_id", "check_in", "check_out"], name="booking_room_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(check_out__gt=F("check_in")),
                name="booking_check_out_after_check_in",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_ref} {self.room_type_id} ({self.check_in} to {self.check_out})"

    @property
    def holds_room(self):
        return self.status not in self.ROOM_FREEING_STATUSES
