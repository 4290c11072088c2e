from datetime import date

from django.test import TestCase

from reservations import availability
from reservations.exceptions import InvalidDateRange, RoomTypeNotFound
from reservations.models import Booking, RoomInventory

from .helpers import make_booking, make_inventory


class OverlapTestCase(TestCase):
    """Half-open date ranges against bookings that still hold a room"""

    def setUp(self):
        make_inventory('deluxe', total_rooms=1)
        make_booking(check_in=date(2024, 1, 5), check_out=date(2024, 1, 10))

    def test_overlapping_ranges_conflict(self):
        scenarios = [
            (date(2024, 1, 3), date(2024, 1, 6), 'starts before and overlaps'),
            (date(2024, 1, 7), date(2024, 1, 12), 'starts during existing booking'),
            (date(2024, 1, 6), date(2024, 1, 8), 'completely within existing booking'),
            (date(2024, 1, 1), date(2024, 1, 15), 'completely encompasses existing booking'),
        ]
        for check_in, check_out, description in scenarios:
            with self.subTest(scenario=description):
                result = availability.check('deluxe', check_in, check_out)
                self.assertFalse(result.available)
                self.assertEqual(result.free_rooms, 0)
                self.assertEqual(result.booked_rooms, 1)

    def test_touching_ranges_do_not_conflict(self):
        scenarios = [
            (date(2024, 1, 10), date(2024, 1, 12), 'check-in on existing check-out day'),
            (date(2024, 1, 1), date(2024, 1, 5), 'check-out on existing check-in day'),
        ]
        for check_in, check_out, description in scenarios:
            with self.subTest(scenario=description):
                result = availability.check('deluxe', check_in, check_out)
                self.assertTrue(result.available)
                self.assertEqual(result.free_rooms, 1)

    def test_every_room_freeing_status_is_ignored(self):
        Booking.objects.all().delete()
        for status in Booking.ROOM_FREEING_STATUSES:
            make_booking(check_in=date(2024, 1, 5), check_out=date(2024, 1, 10), status=status)

        result = availability.check('deluxe', date(2024, 1, 6), date(2024, 1, 7))
        self.assertTrue(result.available)
        self.assertEqual(result.booked_rooms, 0)

    def test_holding_statuses_count(self):
        Booking.objects.all().delete()
        for status in (Booking.Status.PENDING, Booking.Status.CONFIRMED, Booking.Status.CHECKED_IN):
            with self.subTest(status=status):
                booking = make_booking(check_in=date(2024, 1, 5), check_out=date(2024, 1, 10), status=status)
                self.assertFalse(availability.check('deluxe', date(2024, 1, 6), date(2024, 1, 7)).available)
                booking.delete()

    def test_other_room_types_do_not_count(self):
        make_inventory('business-suite', total_rooms=1)
        result = availability.check('business-suite', date(2024, 1, 6), date(2024, 1, 7))
        self.assertTrue(result.available)


class CapacityTestCase(TestCase):

    def test_free_count_is_total_minus_overlapping(self):
        make_inventory('deluxe', total_rooms=3)
        make_booking(check_in=date(2024, 3, 1), check_out=date(2024, 3, 3))
        make_booking(check_in=date(2024, 3, 2), check_out=date(2024, 3, 4))

        result = availability.check('deluxe', date(2024, 3, 2), date(2024, 3, 3))
        self.assertEqual(result.total_rooms, 3)
        self.assertEqual(result.booked_rooms, 2)
        self.assertEqual(result.free_rooms, 1)
        self.assertTrue(result.available)

    def test_cached_counter_is_not_consulted(self):
        make_inventory('deluxe', total_rooms=2, available_rooms=0)
        result = availability.check('deluxe', date(2024, 3, 1), date(2024, 3, 2))
        self.assertTrue(result.available)
        self.assertEqual(result.free_rooms, 2)

    def test_free_count_never_negative(self):
        make_inventory('deluxe', total_rooms=1)
        make_booking()
        make_booking()
        result = availability.check('deluxe', date(2024, 3, 1), date(2024, 3, 3))
        self.assertEqual(result.free_rooms, 0)
        self.assertEqual(result.booked_rooms, 2)

    def test_room_type_under_maintenance_is_unavailable(self):
        make_inventory('deluxe', total_rooms=3, status=RoomInventory.Status.MAINTENANCE)
        result = availability.check('deluxe', date(2024, 3, 1), date(2024, 3, 2))
        self.assertFalse(result.available)
        self.assertEqual(result.free_rooms, 3)

    def test_missing_inventory(self):
        with self.assertRaises(RoomTypeNotFound):
            availability.check('deluxe', date(2024, 3, 1), date(2024, 3, 2))

    def test_inactive_inventory_is_missing(self):
        make_inventory('deluxe', total_rooms=3, is_active=False)
        with self.assertRaises(RoomTypeNotFound):
            availability.check('deluxe', date(2024, 3, 1), date(2024, 3, 2))

    def test_invalid_range(self):
        make_inventory('deluxe', total_rooms=3)
        with self.assertRaises(InvalidDateRange):
            availability.check('deluxe', date(2024, 3, 1), date(2024, 3, 1))
