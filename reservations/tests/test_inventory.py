from datetime import date

from django.test import TestCase

from reservations import inventory
from reservations.exceptions import DuplicateInventory, InventoryNotFound, UnknownRoomType, ValidationError
from reservations.models import Booking, RoomInventory

from .helpers import make_booking, make_inventory


class InventoryStoreTestCase(TestCase):

    def test_create_defaults_available_to_total(self):
        record = inventory.create('deluxe', 4)
        self.assertEqual(record.total_rooms, 4)
        self.assertEqual(record.available_rooms, 4)
        self.assertEqual(record.status, RoomInventory.Status.AVAILABLE)
        self.assertTrue(record.is_active)

    def test_create_clamps_available(self):
        record = inventory.create('deluxe', 2, available_rooms=9)
        self.assertEqual(record.available_rooms, 2)

    def test_create_rejects_unknown_room_type(self):
        with self.assertRaises(UnknownRoomType):
            inventory.create('penthouse', 2)

    def test_one_active_record_per_room_type(self):
        inventory.create('deluxe', 2)
        with self.assertRaises(DuplicateInventory):
            inventory.create('deluxe', 5)

    def test_deactivated_record_can_be_replaced(self):
        first = inventory.create('deluxe', 2)
        inventory.deactivate(first.pk)

        second = inventory.create('deluxe', 5)
        self.assertEqual(inventory.get_by_room_type('deluxe').pk, second.pk)

    def test_get_by_room_type_missing(self):
        with self.assertRaises(InventoryNotFound):
            inventory.get_by_room_type('deluxe')

    def test_get_with_malformed_id(self):
        with self.assertRaises(InventoryNotFound):
            inventory.get('abc')

    def test_update_clamps_and_bumps_version(self):
        record = make_inventory('deluxe', total_rooms=5, available_rooms=5)

        updated = inventory.update(record.pk, total_rooms=3)
        self.assertEqual(updated.total_rooms, 3)
        self.assertEqual(updated.available_rooms, 3)
        self.assertEqual(updated.version, record.version + 1)

        updated = inventory.update(record.pk, available_rooms=-2, status=RoomInventory.Status.MAINTENANCE)
        self.assertEqual(updated.available_rooms, 0)
        self.assertEqual(updated.status, RoomInventory.Status.MAINTENANCE)

    def test_update_ignores_bookings(self):
        record = make_inventory('deluxe', total_rooms=3)
        make_booking()
        make_booking()

        updated = inventory.update(record.pk, total_rooms=1)
        self.assertEqual(updated.total_rooms, 1)
        self.assertEqual(Booking.objects.count(), 2)

    def test_update_keeps_room_type(self):
        record = make_inventory('deluxe', total_rooms=5)

        with self.assertRaises(ValidationError) as ctx:
            inventory.update(record.pk, total_rooms=3, room_type_id='business-suite')
        self.assertEqual(ctx.exception.get_codes(), 'room_type_mismatch')
        record.refresh_from_db()
        self.assertEqual((record.room_type_id, record.total_rooms), ('deluxe', 5))

        updated = inventory.update(record.pk, total_rooms=3, room_type_id='deluxe')
        self.assertEqual(updated.total_rooms, 3)

    def test_update_missing(self):
        with self.assertRaises(InventoryNotFound):
            inventory.update(999, total_rooms=3)

    def test_deactivated_record_is_hidden(self):
        record = make_inventory('deluxe')
        inventory.deactivate(record.pk)
        with self.assertRaises(InventoryNotFound):
            inventory.get(record.pk)


class IncrementTestCase(TestCase):

    def setUp(self):
        self.record = make_inventory('deluxe', total_rooms=3, available_rooms=1)

    def current(self):
        self.record.refresh_from_db()
        return self.record.available_rooms

    def test_increment_and_decrement(self):
        self.assertTrue(inventory.increment_available('deluxe', +1))
        self.assertEqual(self.current(), 2)
        self.assertTrue(inventory.increment_available('deluxe', -1))
        self.assertEqual(self.current(), 1)

    def test_clamped_to_bounds(self):
        inventory.increment_available('deluxe', +10)
        self.assertEqual(self.current(), 3)
        inventory.increment_available('deluxe', -10)
        self.assertEqual(self.current(), 0)

    def test_bumps_version(self):
        version = self.record.version
        inventory.increment_available('deluxe', +1)
        self.record.refresh_from_db()
        self.assertEqual(self.record.version, version + 1)

    def test_missing_record(self):
        with self.assertLogs('reservations.inventory', level='WARNING'):
            self.assertFalse(inventory.increment_available('business-suite', +1))

    def test_inactive_record_is_not_touched(self):
        self.record.is_active = False
        self.record.save()
        with self.assertLogs('reservations.inventory', level='WARNING'):
            self.assertFalse(inventory.increment_available('deluxe', +1))
        self.assertEqual(self.current(), 1)


class ReadModelTestCase(TestCase):

    def test_dashboard_counts_from_bookings(self):
        make_inventory('deluxe', total_rooms=3, available_rooms=3)
        make_inventory('classic-single', total_rooms=2)
        make_booking(check_in=date(2024, 3, 1), check_out=date(2024, 3, 3))
        make_booking(check_in=date(2024, 3, 2), check_out=date(2024, 3, 4))
        make_booking(check_in=date(2024, 3, 5), check_out=date(2024, 3, 6))
        make_booking(check_in=date(2024, 3, 1), check_out=date(2024, 3, 4), status=Booking.Status.CANCELLED)

        rows = {row['inventory'].room_type_id: row for row in inventory.dashboard(today=date(2024, 3, 2))}

        deluxe = rows['deluxe']
        self.assertEqual(deluxe['booked_rooms'], 2)
        self.assertEqual(deluxe['free_rooms'], 1)
        self.assertEqual(deluxe['upcoming_bookings'], 3)
        self.assertEqual(deluxe['room_type_details']['room_type'], 'Deluxe')
        self.assertEqual(rows['classic-single']['booked_rooms'], 0)

    def test_public_listing_only_bookable_types(self):
        make_inventory('deluxe', total_rooms=3)
        make_inventory('classic-single', total_rooms=2, status=RoomInventory.Status.MAINTENANCE)
        make_inventory('business-suite', total_rooms=0)
        make_inventory('executive-suite', total_rooms=2, is_active=False)

        listing = inventory.public_listing()

        self.assertEqual([row['id'] for row in listing], ['deluxe'])
        self.assertEqual(listing[0]['total_rooms'], 3)
        self.assertEqual(listing[0]['room_type'], 'Deluxe')
        self.assertEqual(str(listing[0]['price_per_night']), '30500.00')
