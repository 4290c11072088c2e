import threading
from contextlib import contextmanager

_registry_lock = threading.Lock()
_room_type_locks = {}


def _lock_for(room_type_id):
    with _registry_lock:
        lock = _room_type_locks.get(room_type_id)
        if lock is None:
            lock = _room_type_locks[room_type_id] = threading.Lock()
        return lock


@contextmanager
def room_type_lock(room_type_id):
    """Serialise the check-and-insert critical section for one room type
    within this process. Cross-process safety comes from the row lock taken
    on the inventory record inside the same section.
    """
    lock = _lock_for(room_type_id)
    with lock:
        yield
