from concurrent.futures import ThreadPoolExecutor

from django.core.cache import cache
from django.test import SimpleTestCase

from reservations.cache import (
    BOOKING_LIST,
    BOOKINGS,
    INVENTORY,
    INVENTORY_DASHBOARD,
    PUBLIC_ROOMS,
    CacheService,
)


class CacheServiceTestCase(SimpleTestCase):

    def setUp(self):
        cache.clear()
        self.service = CacheService(ttl=60)

    def test_get_or_set_calls_producer_once(self):
        calls = []

        def produce():
            calls.append(1)
            return ['row']

        self.assertEqual(self.service.get_or_set(BOOKING_LIST, produce), ['row'])
        self.assertEqual(self.service.get_or_set(BOOKING_LIST, produce), ['row'])
        self.assertEqual(len(calls), 1)

    def test_invalidate_namespace(self):
        self.service.set(f'{BOOKING_LIST}::', [1])
        self.service.set(f'{BOOKING_LIST}:pending:', [2])
        self.service.set(PUBLIC_ROOMS, [3])
        self.service.set(INVENTORY_DASHBOARD, [4])

        self.service.invalidate(BOOKINGS)

        self.assertIsNone(self.service.get(f'{BOOKING_LIST}::'))
        self.assertIsNone(self.service.get(f'{BOOKING_LIST}:pending:'))
        self.assertEqual(self.service.get(PUBLIC_ROOMS), [3])
        self.assertEqual(self.service.get(INVENTORY_DASHBOARD), [4])

    def test_invalidate_before_anything_is_cached(self):
        self.service.invalidate(INVENTORY)
        self.service.set(PUBLIC_ROOMS, [1])
        self.assertEqual(self.service.get(PUBLIC_ROOMS), [1])

    def test_instances_share_generations(self):
        self.service.set(PUBLIC_ROOMS, [1])

        CacheService(ttl=60).invalidate(INVENTORY)

        self.assertIsNone(self.service.get(PUBLIC_ROOMS))

    def test_prefixes_are_isolated(self):
        other = CacheService(ttl=60, prefix='reports')
        self.service.set(PUBLIC_ROOMS, [1])
        other.set(PUBLIC_ROOMS, [2])

        other.invalidate(INVENTORY)

        self.assertEqual(self.service.get(PUBLIC_ROOMS), [1])
        self.assertIsNone(other.get(PUBLIC_ROOMS))

    def test_concurrent_writes_are_all_invalidated(self):
        names = [f'{BOOKING_LIST}:filter-{n}:' for n in range(40)]
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(lambda name: CacheService(ttl=60).set(name, [name]), names))

        self.service.invalidate(BOOKINGS)

        self.assertEqual([self.service.get(name) for name in names], [None] * len(names))

    def test_result_produced_across_an_invalidation_is_not_served(self):
        def produce_while_a_writer_invalidates():
            CacheService(ttl=60).invalidate(BOOKINGS)
            return ['stale']

        self.service.get_or_set(BOOKING_LIST, produce_while_a_writer_invalidates)

        self.assertIsNone(self.service.get(BOOKING_LIST))
