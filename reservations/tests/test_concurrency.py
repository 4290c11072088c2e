from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date

from django.db import connection
from django.test import TransactionTestCase

from reservations import lifecycle
from reservations.exceptions import NoRoomsAvailable
from reservations.models import Booking

from .helpers import make_inventory


class RaceConditionTestCase(TransactionTestCase):
    """Concurrent booking attempts for the last rooms of a type"""

    def setUp(self):
        self.inventory = make_inventory('deluxe', total_rooms=3)

    def attempt(self, n):
        try:
            lifecycle.create_booking(
                'deluxe',
                {
                    'guest_name': f'Guest {n}',
                    'guest_email': f'guest{n}@example.com',
                    'guest_phone': '08030000000',
                },
                date(2024, 3, 1),
                date(2024, 3, 3),
                'client',
            )
            return 'booked'
        except NoRoomsAvailable:
            return 'full'
        finally:
            connection.close()

    def test_concurrent_bookings_never_exceed_capacity(self):
        num_attempts = 8
        with ThreadPoolExecutor(max_workers=num_attempts) as executor:
            futures = [executor.submit(self.attempt, n) for n in range(num_attempts)]
            results = [future.result() for future in as_completed(futures)]

        self.assertEqual(results.count('booked'), 3,
                         f'Expected exactly 3 successful bookings, got {results.count("booked")}')
        self.assertEqual(results.count('full'), num_attempts - 3)
        self.assertEqual(Booking.objects.filter(room_type_id='deluxe').count(), 3)

    def test_inventory_counter_untouched_by_creation(self):
        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(self.attempt, range(4)))

        self.inventory.refresh_from_db()
        self.assertEqual(self.inventory.available_rooms, 3)
