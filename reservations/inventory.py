"""Room inventory store.

``total_rooms`` is the physical capacity per room type and the only figure
availability is computed from. ``available_rooms`` is a cached hint that
lifecycle side effects nudge up or down; it is allowed to lag.
"""
import logging
from datetime import date, timedelta

from django.db import IntegrityError, transaction
from django.db.models import F, IntegerField, Value
from django.db.models.functions import Greatest, Least
from django.utils import timezone

from . import catalog
from .availability import overlapping_bookings
from .exceptions import DuplicateInventory, InventoryNotFound, ValidationError
from .models import RoomInventory

logger = logging.getLogger(__name__)


def get_by_room_type(room_type_id):
    inventory = RoomInventory.objects.filter(room_type_id=room_type_id, is_active=True).first()
    if inventory is None:
        raise InventoryNotFound(f"No active inventory for room type '{room_type_id}'")
    return inventory


def get(pk):
    try:
        return RoomInventory.objects.get(pk=pk, is_active=True)
    except (RoomInventory.DoesNotExist, ValueError):
        raise InventoryNotFound() from None


def _clamp(value, total):
    return max(0, min(int(value), total))


def create(room_type_id, total_rooms, available_rooms=None, status=RoomInventory.Status.AVAILABLE):
    catalog.get(room_type_id)
    if RoomInventory.objects.filter(room_type_id=room_type_id, is_active=True).exists():
        raise DuplicateInventory(room_type_id)

    if available_rooms is None:
        available_rooms = total_rooms
    try:
        with transaction.atomic():
            inventory = RoomInventory.objects.create(
                room_type_id=room_type_id,
                total_rooms=total_rooms,
                available_rooms=_clamp(available_rooms, total_rooms),
                status=status,
            )
    except IntegrityError:
        # lost a race against another create for the same room type
        raise DuplicateInventory(room_type_id) from None

    logger.info('Inventory created for %s: %s rooms', room_type_id, total_rooms)
    return inventory


def update(pk, total_rooms=None, available_rooms=None, status=None, room_type_id=None):
    with transaction.atomic():
        try:
            inventory = RoomInventory.objects.select_for_update().get(pk=pk, is_active=True)
        except (RoomInventory.DoesNotExist, ValueError):
            raise InventoryNotFound() from None
        if room_type_id is not None and room_type_id != inventory.room_type_id:
            raise ValidationError(
                f"Inventory {pk} is for room type '{inventory.room_type_id}' and cannot be moved to '{room_type_id}'",
                code='room_type_mismatch',
                room_type_id=inventory.room_type_id,
            )

        if total_rooms is not None:
            inventory.total_rooms = total_rooms
        if available_rooms is not None:
            inventory.available_rooms = available_rooms
        inventory.available_rooms = _clamp(inventory.available_rooms, inventory.total_rooms)
        if status is not None:
            inventory.status = status
        inventory.version += 1
        inventory.save()

    logger.info(
        'Inventory %s updated: total=%s available=%s status=%s',
        inventory.room_type_id, inventory.total_rooms, inventory.available_rooms, inventory.status,
    )
    return inventory


def deactivate(pk):
    inventory = get(pk)
    inventory.is_active = False
    inventory.version += 1
    inventory.save(update_fields=['is_active', 'version', 'updated_at'])
    logger.info('Inventory %s deactivated', inventory.room_type_id)
    return inventory


def increment_available(room_type_id, delta):
    """Nudge the cached counter by ``delta``, clamped to ``[0, total_rooms]``.

    Runs as a single relative UPDATE so concurrent callers never overwrite
    each other. Returns False when there is no active row to adjust.
    """
    adjusted = Least(
        F('total_rooms'),
        F('available_rooms') + Value(delta),
        output_field=IntegerField(),
    )
    updated = RoomInventory.objects.filter(room_type_id=room_type_id, is_active=True).update(
        available_rooms=Greatest(Value(0), adjusted, output_field=IntegerField()),
        version=F('version') + 1,
        updated_at=timezone.now(),
    )
    if updated:
        logger.debug('Inventory %s cached availability adjusted by %+d', room_type_id, delta)
    else:
        logger.warning('No active inventory for %s; cached availability not adjusted', room_type_id)
    return bool(updated)


def dashboard(today=None):
    """Active inventory with tonight's occupancy computed from bookings."""
    today = today or timezone.localdate()
    tomorrow = today + timedelta(days=1)
    rows = []
    for inventory in RoomInventory.objects.filter(is_active=True):
        booked = overlapping_bookings(inventory.room_type_id, today, tomorrow).count()
        upcoming = overlapping_bookings(inventory.room_type_id, today, date.max).count()
        room_type = catalog.ROOM_TYPES.get(inventory.room_type_id)
        rows.append({
            'inventory': inventory,
            'booked_rooms': booked,
            'free_rooms': max(0, inventory.total_rooms - booked),
            'upcoming_bookings': upcoming,
            'room_type_details': room_type.as_dict() if room_type else None,
        })
    return rows


def public_listing():
    """Bookable room types with their catalogue details."""
    rows = []
    inventories = RoomInventory.objects.filter(
        is_active=True,
        status=RoomInventory.Status.AVAILABLE,
        total_rooms__gt=0,
    )
    for inventory in inventories:
        room_type = catalog.ROOM_TYPES.get(inventory.room_type_id)
        if room_type is None:
            continue
        rows.append({
            **room_type.as_dict(),
            'total_rooms': inventory.total_rooms,
            'available_rooms': inventory.available_rooms,
            'status': inventory.status,
        })
    return rows