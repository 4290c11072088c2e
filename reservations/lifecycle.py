"""Booking creation, status transitions and deletion.

Capacity is always derived from the bookings table at admission time, so
nothing here writes the inventory counter when a booking is created. The
counter is only nudged back up when a booking stops holding a room.
"""
import logging
import secrets
import time
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction

from . import availability, catalog, inventory, pricing, tasks
from .exceptions import (
    AuthorizationError,
    BookingNotFound,
    CannotDeleteFreedBooking,
    ConflictError,
    InvalidStatus,
    MissingGuestFields,
    NoRoomsAvailable,
    RoomTypeNotFound,
    ValidationError,
)
from .locks import room_type_lock
from .models import Booking

logger = logging.getLogger(__name__)

Status = Booking.Status

REQUIRED_GUEST_FIELDS = ('guest_name', 'guest_email', 'guest_phone')

# The regular path through a stay. Anything else is an administrative
# correction: allowed, but logged.
FORWARD_TRANSITIONS = {
    Status.PENDING: {Status.CONFIRMED, Status.CANCELLED, Status.NO_SHOW, Status.VOIDED},
    Status.CONFIRMED: {Status.CHECKED_IN, Status.CANCELLED, Status.NO_SHOW, Status.VOIDED},
    Status.CHECKED_IN: {Status.CHECKED_OUT, Status.CANCELLED, Status.NO_SHOW, Status.VOIDED},
    Status.CHECKED_OUT: {Status.COMPLETED},
}


@dataclass
class BookingResult:
    booking: Booking
    quote: pricing.Quote
    created: bool = True


def generate_transaction_ref():
    return f'BK-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}'


def is_room_freeing(status):
    return status in Booking.ROOM_FREEING_STATUSES


def get_booking(booking_id, for_update=False):
    qs = Booking.objects.select_for_update() if for_update else Booking.objects.all()
    try:
        return qs.get(pk=booking_id)
    except (Booking.DoesNotExist, DjangoValidationError, ValueError):
        raise BookingNotFound() from None


def _find_by_reference(transaction_ref):
    return Booking.objects.filter(transaction_ref=transaction_ref).first()


def _replay(existing, room_type_id, guest, check_in, check_out):
    same_request = (
        existing.room_type_id == room_type_id
        and existing.check_in == check_in
        and existing.check_out == check_out
        and existing.guest_email.lower() == guest['guest_email'].lower()
    )
    if not same_request:
        raise ConflictError(
            f"Transaction reference '{existing.transaction_ref}' is already in use",
            code='duplicate_transaction_ref',
        )
    logger.info('Replayed booking request for %s; returning existing booking', existing.transaction_ref)
    return BookingResult(
        booking=existing,
        quote=pricing.Quote(
            nights=pricing.count_nights(existing.check_in, existing.check_out),
            nightly_rate=catalog.get(existing.room_type_id).nightly_rate,
            base_total=existing.base_total,
            transaction_fee=existing.transaction_fee,
            total_amount=existing.total_amount,
        ),
        created=False,
    )


def create_booking(room_type_id, guest, check_in, check_out, actor_role,
                   guests=1, transaction_ref=None, payment_status=None):
    missing = [f for f in REQUIRED_GUEST_FIELDS if not guest.get(f)]
    if missing:
        raise MissingGuestFields(missing)

    room_type = catalog.get(room_type_id)
    quote = pricing.quote(room_type_id, check_in, check_out)
    if guests < 1 or guests > room_type.max_occupancy:
        raise ValidationError(
            f'{room_type.display_name} takes between 1 and {room_type.max_occupancy} guests',
            code='invalid_guest_count',
        )

    if transaction_ref:
        existing = _find_by_reference(transaction_ref)
        if existing is not None:
            return _replay(existing, room_type_id, guest, check_in, check_out)
    else:
        transaction_ref = generate_transaction_ref()

    from_client = actor_role == Booking.CreatedBy.CLIENT
    try:
        with room_type_lock(room_type_id), transaction.atomic():
            try:
                held = availability.active_inventory(room_type_id, for_update=True)
            except RoomTypeNotFound as exc:
                raise ValidationError(exc.detail, code='room_type_not_found', room_type_id=room_type_id)

            result = availability.check(room_type_id, check_in, check_out, inventory=held)
            if not result.available:
                logger.info(
                    'Rejected %s booking for %s %s..%s: %s/%s rooms booked',
                    actor_role, room_type_id, check_in, check_out, result.booked_rooms, result.total_rooms,
                )
                raise NoRoomsAvailable(room_type_id, check_in, check_out, result.total_rooms, result.booked_rooms)

            booking = Booking.objects.create(
                room_type_id=room_type_id,
                guest_name=guest['guest_name'],
                guest_email=guest['guest_email'],
                guest_phone=guest['guest_phone'],
                check_in=check_in,
                check_out=check_out,
                guests=guests,
                status=Status.PENDING if from_client else Status.CONFIRMED,
                payment_status=payment_status or Booking.PaymentStatus.PENDING,
                payment_method=Booking.PaymentMethod.FLUTTERWAVE if from_client else Booking.PaymentMethod.MANUAL,
                base_total=quote.base_total,
                transaction_fee=quote.transaction_fee,
                total_amount=quote.total_amount,
                created_by_role=actor_role,
                transaction_ref=transaction_ref,
            )
    except IntegrityError:
        # a concurrent request with the same reference committed first
        existing = _find_by_reference(transaction_ref)
        if existing is not None:
            return _replay(existing, room_type_id, guest, check_in, check_out)
        raise ConflictError(
            f"Transaction reference '{transaction_ref}' is already in use",
            code='duplicate_transaction_ref',
        ) from None

    logger.info(
        'Booking %s created by %s: %s %s..%s (%s/%s rooms now booked), total %s',
        booking.transaction_ref, actor_role, room_type_id, check_in, check_out,
        result.booked_rooms + 1, result.total_rooms, quote.total_amount,
    )
    if not from_client:
        tasks.notify_booking_confirmed(booking)
    return BookingResult(booking=booking, quote=quote)


def _restore_inventory(booking, operation):
    """Best-effort cache increment after a booking releases its room.

    The booking write has already committed; a failure here leaves the cached
    counter behind and is logged for manual reconciliation.
    """
    try:
        return inventory.increment_available(booking.room_type_id, +1)
    except DatabaseError:
        logger.exception(
            'Inventory restore failed after %s of booking %s (%s %s..%s); cached availability needs reconciling',
            operation, booking.pk, booking.room_type_id, booking.check_in, booking.check_out,
        )
        return False


def transition(booking_id, new_status, actor_role):
    if new_status not in Status.values:
        raise InvalidStatus(new_status, Status.values)

    with transaction.atomic():
        booking = get_booking(booking_id, for_update=True)
        previous = booking.status
        booking.status = new_status
        booking.save(update_fields=['status', 'updated_at'])

    logger.info('Booking %s: %s -> %s by %s', booking.transaction_ref, previous, new_status, actor_role)

    if previous != new_status and new_status not in FORWARD_TRANSITIONS.get(previous, ()):
        logger.warning(
            'Booking %s moved outside the normal flow (%s -> %s) by %s',
            booking.transaction_ref, previous, new_status, actor_role,
        )

    was_freeing, now_freeing = is_room_freeing(previous), is_room_freeing(new_status)
    if now_freeing and not was_freeing:
        _restore_inventory(booking, 'transition')
    elif was_freeing and not now_freeing:
        # no automatic decrement; the room may already have been re-let
        logger.warning(
            'Booking %s re-occupies a %s room (%s -> %s); cached availability left unchanged',
            booking.transaction_ref, booking.room_type_id, previous, new_status,
        )
    return booking


def delete_booking(booking_id, actor_role):
    if actor_role != Booking.CreatedBy.SUPERADMIN:
        raise AuthorizationError('Only a superadmin may delete bookings.')

    with transaction.atomic():
        booking = get_booking(booking_id, for_update=True)
        if not booking.holds_room:
            raise CannotDeleteFreedBooking(booking.status)
        snapshot = Booking(
            pk=booking.pk,
            room_type_id=booking.room_type_id,
            check_in=booking.check_in,
            check_out=booking.check_out,
            transaction_ref=booking.transaction_ref,
        )
        booking.delete()

    logger.warning('Booking %s (%s) deleted by %s', snapshot.transaction_ref, snapshot.room_type_id, actor_role)
    _restore_inventory(snapshot, 'deletion')


def apply_payment_success(transaction_ref):
    """Record a successful payment. Safe to apply any number of times."""
    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(transaction_ref=transaction_ref)
        except Booking.DoesNotExist:
            raise BookingNotFound(f"No booking with reference '{transaction_ref}'") from None

        changed = []
        if booking.payment_status != Booking.PaymentStatus.PAID:
            booking.payment_status = Booking.PaymentStatus.PAID
            changed.append('payment_status')
        if booking.status == Status.PENDING:
            booking.status = Status.CONFIRMED
            changed.append('status')
        elif is_room_freeing(booking.status) and changed:
            logger.warning(
                'Payment received for booking %s which is already %s; status left as is',
                transaction_ref, booking.status,
            )
        if changed:
            booking.save(update_fields=changed + ['updated_at'])
            if 'status' in changed:
                tasks.notify_booking_confirmed(booking)

    if changed:
        logger.info('Payment applied to booking %s (%s)', transaction_ref, ', '.join(changed))
    else:
        logger.info('Payment for booking %s already applied', transaction_ref)
    return booking, bool(changed)
