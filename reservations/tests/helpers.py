import uuid
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from reservations.models import Booking, RoomInventory, StaffProfile


def make_inventory(room_type_id='deluxe', total_rooms=3, available_rooms=None, **extra):
    return RoomInventory.objects.create(
        room_type_id=room_type_id,
        total_rooms=total_rooms,
        available_rooms=total_rooms if available_rooms is None else available_rooms,
        **extra,
    )


def make_booking(room_type_id='deluxe', check_in=date(2024, 3, 1), check_out=date(2024, 3, 3),
                 status=Booking.Status.CONFIRMED, ref=None, **extra):
    fields = dict(
        room_type_id=room_type_id,
        guest_name='Ada Obi',
        guest_email='ada@example.com',
        guest_phone='08030000000',
        check_in=check_in,
        check_out=check_out,
        status=status,
        base_total=Decimal('61000.00'),
        transaction_fee=Decimal('1220.00'),
        total_amount=Decimal('62220.00'),
        created_by_role=Booking.CreatedBy.RECEPTIONIST,
        transaction_ref=ref or f'BK-TEST-{uuid.uuid4().hex[:12]}',
    )
    fields.update(extra)
    return Booking.objects.create(**fields)


def make_staff(role, username=None):
    user = get_user_model().objects.create_user(username=username or f'{role}-user', password='secret-pass')
    StaffProfile.objects.create(user=user, role=role)
    return user


GUEST = {
    'guest_name': 'Chidi Okafor',
    'guest_email': 'chidi@example.com',
    'guest_phone': '08031234567',
}
