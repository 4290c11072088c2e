import logging
import time

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)

BOOKINGS = 'bookings'
INVENTORY = 'inventory'

BOOKING_LIST = f'{BOOKINGS}:list'
PUBLIC_ROOMS = f'{INVENTORY}:available'
INVENTORY_DASHBOARD = f'{INVENTORY}:dashboard'


class CacheService:
    """Read-through cache for list endpoints.

    Entry names are ``<namespace>:<rest>``. Every namespace has a generation
    counter kept in the backend and baked into the stored key, so
    :meth:`invalidate` is a single atomic ``incr``: entries written under an
    older generation are never read again and age out with their TTL.
    """

    def __init__(self, alias='default', ttl=None, prefix='hotel'):
        self.backend = caches[alias]
        self.ttl = settings.CACHE_TTL_SECONDS if ttl is None else ttl
        self.prefix = prefix

    def _generation_key(self, namespace):
        return f'{self.prefix}:{namespace}:__generation__'

    def _generation(self, namespace):
        key = self._generation_key(namespace)
        generation = self.backend.get(key)
        if generation is None:
            # seeded from the clock rather than 0
            self.backend.add(key, int(time.time()), None)
            generation = self.backend.get(key)
        return generation

    def _key(self, name):
        namespace = name.split(':', 1)[0]
        return f'{self.prefix}:{namespace}:{self._generation(namespace)}:{name}'

    def get(self, name):
        return self.backend.get(self._key(name))

    def set(self, name, value, ttl=None):
        self.backend.set(self._key(name), value, self.ttl if ttl is None else ttl)

    def get_or_set(self, name, producer, ttl=None):
        # the key is fixed before producing, so a result computed across an
        # invalidation lands in the retired generation
        key = self._key(name)
        value = self.backend.get(key)
        if value is None:
            value = producer()
            self.backend.set(key, value, self.ttl if ttl is None else ttl)
        return value

    def invalidate(self, *namespaces):
        for namespace in namespaces:
            key = self._generation_key(namespace)
            try:
                self.backend.incr(key)
            except ValueError:
                # no counter yet: nothing cached under this namespace
                self.backend.add(key, int(time.time()), None)
        logger.debug('Invalidated cache namespaces: %s', ', '.join(namespaces))
        return len(namespaces)
