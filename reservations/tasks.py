import logging
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from . import catalog
from .models import Booking

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(SMTPException, OSError),
    retry_backoff=True,
    max_retries=3,
)
def send_booking_confirmation(self, booking_id):
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        logger.warning('Booking %s vanished before its confirmation email was sent', booking_id)
        return False

    room_type = catalog.ROOM_TYPES.get(booking.room_type_id)
    lines = [
        'Your booking is confirmed.',
        '',
        f'Reference: {booking.transaction_ref}',
        f'Guest name: {booking.guest_name}',
        f'Room: {room_type.display_name if room_type else booking.room_type_id}',
        f'Check-in: {booking.check_in.isoformat()}',
        f'Check-out: {booking.check_out.isoformat()}',
        f'Total: {settings.PAYMENT_CURRENCY} {booking.total_amount}',
        '',
        'Please present this email at reception for check-in.',
    ]
    send_mail(
        subject=f'Booking Confirmation - {booking.transaction_ref}',
        message='\n'.join(lines),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[booking.guest_email],
    )
    logger.info('Confirmation email sent for booking %s (attempt %s)', booking.transaction_ref, self.request.retries + 1)
    return True


def _enqueue_confirmation(booking_id):
    try:
        send_booking_confirmation.delay(booking_id)
    except Exception:
        # the booking is committed; a missing email must not surface as a failed request
        logger.exception('Could not enqueue confirmation email for booking %s', booking_id)


def notify_booking_confirmed(booking):
    """Queue the confirmation email once the surrounding transaction commits."""
    booking_id = str(booking.pk)
    transaction.on_commit(lambda: _enqueue_confirmation(booking_id))
