import logging
from dataclasses import dataclass

from .exceptions import InvalidDateRange, RoomTypeNotFound
from .models import Booking, RoomInventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Availability:
    available: bool
    free_rooms: int
    total_rooms: int
    booked_rooms: int


def overlapping_bookings(room_type_id, check_in, check_out):
    """Bookings still holding a room of this type on any night of the range.

    Ranges are half-open: a check-out on day N does not clash with a
    check-in on day N.
    """
    return Booking.objects.filter(
        room_type_id=room_type_id,
        check_in__lt=check_out,
        check_out__gt=check_in,
    ).exclude(status__in=Booking.ROOM_FREEING_STATUSES)


def active_inventory(room_type_id, for_update=False):
    qs = RoomInventory.objects.filter(room_type_id=room_type_id, is_active=True)
    if for_update:
        qs = qs.select_for_update()
    inventory = qs.first()
    if inventory is None:
        raise RoomTypeNotFound(room_type_id)
    return inventory


def check(room_type_id, check_in, check_out, inventory=None):
    if check_out <= check_in:
        raise InvalidDateRange()
    if inventory is None:
        inventory = active_inventory(room_type_id)

    booked = overlapping_bookings(room_type_id, check_in, check_out).count()
    free = max(0, inventory.total_rooms - booked)
    available = free >= 1 and inventory.status == RoomInventory.Status.AVAILABLE

    logger.debug(
        'Availability %s %s..%s: total=%s booked=%s free=%s status=%s',
        room_type_id, check_in, check_out, inventory.total_rooms, booked, free, inventory.status,
    )
    return Availability(
        available=available,
        free_rooms=free,
        total_rooms=inventory.total_rooms,
        booked_rooms=booked,
    )
