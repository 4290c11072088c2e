from rest_framework import serializers

from . import catalog
from .exceptions import InvalidDateRange
from .models import Booking, RoomInventory

SOURCE_LABELS = {
    Booking.CreatedBy.CLIENT: 'Client Booking',
    Booking.CreatedBy.SUPERADMIN: 'SuperAdmin Booking',
    Booking.CreatedBy.RECEPTIONIST: 'Receptionist Booking',
    Booking.CreatedBy.SUPERVISOR: 'Supervisor Booking',
}


class RoomTypeSerializer(serializers.Serializer):
    id = serializers.CharField()
    room_type = serializers.CharField(source='display_name')
    price_per_night = serializers.DecimalField(source='nightly_rate', max_digits=12, decimal_places=2)
    max_occupancy = serializers.IntegerField()
    amenities = serializers.CharField()
    description = serializers.CharField()
    image = serializers.CharField()


class BookingSerializer(serializers.ModelSerializer):

    class Meta:
        model = Booking
        fields = '__all__'
        read_only_fields = [f.name for f in Booking._meta.fields]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        room_type = catalog.ROOM_TYPES.get(instance.room_type_id)
        data['room_type'] = room_type.display_name if room_type else 'Unknown Room'
        data['price_per_night'] = str(room_type.nightly_rate) if room_type else None
        data['booking_source'] = instance.created_by_role
        data['source_label'] = SOURCE_LABELS.get(instance.created_by_role, 'Manual Booking')
        return data


class BookingRequestSerializer(serializers.Serializer):
    """Incoming booking; presence of guest details is checked by the lifecycle."""
    room_type_id = serializers.CharField()
    guest_name = serializers.CharField(required=False, allow_blank=True, default='')
    guest_email = serializers.EmailField(required=False, allow_blank=True, default='')
    guest_phone = serializers.CharField(required=False, allow_blank=True, default='')
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(required=False, default=1, min_value=1)
    transaction_ref = serializers.CharField(required=False, allow_blank=True, max_length=100)
    payment_status = serializers.ChoiceField(choices=Booking.PaymentStatus.choices, required=False)

    def validate(self, data):
        if data['check_out'] <= data['check_in']:
            raise InvalidDateRange()
        return data

    def guest(self):
        return {f: self.validated_data[f] for f in ('guest_name', 'guest_email', 'guest_phone')}


class BookingCreatedSerializer(serializers.Serializer):
    success = serializers.BooleanField(default=True)
    message = serializers.CharField()
    booking = BookingSerializer()
    base_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class AvailabilityQuerySerializer(serializers.Serializer):
    room_type_id = serializers.CharField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, data):
        if data['check_out'] <= data['check_in']:
            raise InvalidDateRange()
        return data


class AvailabilitySerializer(serializers.Serializer):
    success = serializers.BooleanField(default=True)
    available = serializers.BooleanField()
    free_rooms = serializers.IntegerField()
    total_rooms = serializers.IntegerField()
    booked_rooms = serializers.IntegerField()


class RoomInventorySerializer(serializers.ModelSerializer):

    class Meta:
        model = RoomInventory
        fields = '__all__'
        read_only_fields = [f.name for f in RoomInventory._meta.fields]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        room_type = catalog.ROOM_TYPES.get(instance.room_type_id)
        data['room_type_details'] = RoomTypeSerializer(room_type).data if room_type else None
        return data


class RoomInventoryWriteSerializer(serializers.Serializer):
    room_type_id = serializers.CharField()
    total_rooms = serializers.IntegerField(min_value=0)
    available_rooms = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=RoomInventory.Status.choices, required=False)


class RoomInventoryUpdateSerializer(RoomInventoryWriteSerializer):
    """Room type is fixed once a record exists; when sent it must match."""
    room_type_id = serializers.CharField(required=False)


class DashboardRowSerializer(serializers.Serializer):
    inventory = RoomInventorySerializer()
    booked_rooms = serializers.IntegerField()
    free_rooms = serializers.IntegerField()
    upcoming_bookings = serializers.IntegerField()


class PaymentInitiateSerializer(serializers.Serializer):
    transaction_ref = serializers.CharField(max_length=100)
    redirect_url = serializers.URLField()
