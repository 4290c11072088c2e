import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BookingError(APIException):
    """Base for every error raised by the booking engine.

    ``extra`` is merged into the JSON body so callers can return diagnostics
    next to the message.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Booking request failed.'
    default_code = 'booking_error'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail=detail, code=code)
        self.extra = extra


# 400: client-correctable input

class ValidationError(BookingError):
    default_code = 'validation_error'


class InvalidDateRange(ValidationError):
    default_detail = 'Check-out date must be after check-in date.'
    default_code = 'invalid_date_range'


class InvalidStatus(ValidationError):
    default_code = 'invalid_status'

    def __init__(self, value, valid):
        super().__init__(
            f"Invalid status '{value}'. Valid statuses: {', '.join(valid)}",
            valid_statuses=list(valid),
        )


class MissingGuestFields(ValidationError):
    default_code = 'missing_fields'

    def __init__(self, fields):
        super().__init__(f"Missing required fields: {', '.join(fields)}", fields=list(fields))


class UnknownRoomType(ValidationError):
    default_code = 'unknown_room_type'

    def __init__(self, room_type_id):
        super().__init__(f"Invalid room type '{room_type_id}'", room_type_id=room_type_id)


# 404

class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class BookingNotFound(NotFoundError):
    default_detail = 'Booking not found.'
    default_code = 'booking_not_found'


class InventoryNotFound(NotFoundError):
    default_detail = 'Room inventory not found.'
    default_code = 'inventory_not_found'


class RoomTypeNotFound(NotFoundError):
    default_code = 'room_type_not_found'

    def __init__(self, room_type_id):
        super().__init__(
            f"Room type '{room_type_id}' not found in active inventory",
            room_type_id=room_type_id,
        )


# 400: capacity and conflicts

class CapacityError(BookingError):
    default_code = 'capacity_error'


class NoRoomsAvailable(CapacityError):
    default_code = 'no_rooms_available'

    def __init__(self, room_type_id, check_in, check_out, total_rooms, booked_rooms):
        super().__init__(
            f'No rooms available for the selected dates. '
            f'{booked_rooms} out of {total_rooms} rooms already booked.',
            debug={
                'room_type_id': room_type_id,
                'check_in': check_in.isoformat(),
                'check_out': check_out.isoformat(),
                'total_rooms': total_rooms,
                'booked_rooms': booked_rooms,
            },
        )


class ConflictError(BookingError):
    default_code = 'conflict'


class DuplicateInventory(ConflictError):
    default_code = 'duplicate_inventory'

    def __init__(self, room_type_id):
        super().__init__(
            f"Inventory for room type '{room_type_id}' already exists",
            room_type_id=room_type_id,
        )


class CannotDeleteFreedBooking(ConflictError):
    default_code = 'cannot_delete_freed_booking'

    def __init__(self, booking_status):
        super().__init__(
            f"Booking is already '{booking_status}' and its room has been released; "
            f"it cannot be deleted",
            status=booking_status,
        )


# 403 / 5xx

class AuthorizationError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden: insufficient privileges.'
    default_code = 'forbidden'


class StoreError(BookingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'The booking store rejected the operation.'
    default_code = 'store_error'


class PaymentGatewayError(BookingError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Payment gateway request failed.'
    default_code = 'payment_gateway_error'


def api_exception_handler(exc, context):
    """Render every API error as ``{"success": false, "message": ...}``."""
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(
            'Store error in %s %s',
            view.__class__.__name__ if view else 'unknown view',
            getattr(context.get('request'), 'path', ''),
        )
        exc = StoreError()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, BookingError):
        body = {'success': False, 'message': str(exc.detail), 'code': exc.get_codes()}
        body.update(exc.extra)
        if response.status_code >= 500:
            logger.error('%s: %s %s', exc.__class__.__name__, exc.detail, exc.extra)
    elif isinstance(response.data, dict) and 'detail' in response.data:
        body = {'success': False, 'message': str(response.data['detail'])}
    else:
        body = {'success': False, 'message': 'Invalid request.', 'errors': response.data}

    response.data = body
    return response
