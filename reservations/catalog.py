"""Static room-type catalogue shared by pricing, inventory and reporting."""
from dataclasses import dataclass
from decimal import Decimal

from .exceptions import UnknownRoomType


@dataclass(frozen=True)
class RoomType:
    id: str
    display_name: str
    nightly_rate: Decimal
    max_occupancy: int
    amenities: str = ''
    description: str = ''
    image: str = ''

    def as_dict(self):
        return {
            'id': self.id,
            'room_type': self.display_name,
            'price_per_night': self.nightly_rate,
            'max_occupancy': self.max_occupancy,
            'amenities': self.amenities,
            'description': self.description,
            'image': self.image,
        }


_SMALL_ROOM_AMENITIES = 'Complimentary breakfast, free Wi-Fi, gym and pool (1 guest)'
_SUITE_AMENITIES = 'Complimentary breakfast, free Wi-Fi, gym and pool (2 guests)'
_SUITE_DESCRIPTION = 'Sitting room and bedroom with quality sofa, intercom and smart TV in each room.'

ROOM_TYPES = {
    rt.id: rt for rt in (
        RoomType(
            id='classic-single',
            display_name='Classic Single',
            nightly_rate=Decimal('24900.00'),
            max_occupancy=2,
            amenities=_SMALL_ROOM_AMENITIES,
            description='Just a bed, smart TV and active intercom.',
            image='/assets/images/classic_single_room.jpg',
        ),
        RoomType(
            id='deluxe',
            display_name='Deluxe',
            nightly_rate=Decimal('30500.00'),
            max_occupancy=2,
            amenities=_SMALL_ROOM_AMENITIES,
            description='Just a bed, smart TV and active intercom.',
            image='/assets/images/deluxe_room.jpg',
        ),
        RoomType(
            id='deluxe-large',
            display_name='Deluxe Large',
            nightly_rate=Decimal('35900.00'),
            max_occupancy=2,
            amenities=_SMALL_ROOM_AMENITIES,
            description='Just a bed, smart TV and active intercom.',
            image='/assets/images/deluxe_large_room.jpg',
        ),
        RoomType(
            id='business-suite',
            display_name='Business Suite',
            nightly_rate=Decimal('49900.00'),
            max_occupancy=4,
            amenities=_SUITE_AMENITIES,
            description=_SUITE_DESCRIPTION,
            image='/assets/images/business_suite_room.jpg',
        ),
        RoomType(
            id='executive-suite',
            display_name='Executive Suite',
            nightly_rate=Decimal('54900.00'),
            max_occupancy=4,
            amenities=_SUITE_AMENITIES,
            description=_SUITE_DESCRIPTION,
            image='/assets/images/executive_suite_room.jpg',
        ),
    )
}

ROOM_TYPE_CHOICES = [(rt.id, rt.display_name) for rt in ROOM_TYPES.values()]


def exists(room_type_id):
    return room_type_id in ROOM_TYPES


def get(room_type_id):
    try:
        return ROOM_TYPES[room_type_id]
    except (KeyError, TypeError):
        raise UnknownRoomType(room_type_id) from None


def all_room_types():
    return list(ROOM_TYPES.values())
