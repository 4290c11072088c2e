import hmac
import logging
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings

from .exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


class FlutterwaveClient:
    """Thin client for the two gateway calls bookings depend on."""

    def __init__(self, secret_key=None, base_url=None, timeout=None, session=None):
        self.secret_key = secret_key if secret_key is not None else settings.FLUTTERWAVE_SECRET_KEY
        self.base_url = (base_url or settings.FLUTTERWAVE_BASE_URL).rstrip('/')
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _request(self, method, path, **kwargs):
        headers = {'Authorization': f'Bearer {self.secret_key}'}
        try:
            response = self.session.request(
                method, f'{self.base_url}{path}', headers=headers, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error('Flutterwave %s %s failed: %s', method, path, exc)
            raise PaymentGatewayError(str(exc)) from exc

    def initiate(self, booking, redirect_url):
        payload = {
            'tx_ref': booking.transaction_ref,
            'amount': str(booking.total_amount),
            'currency': settings.PAYMENT_CURRENCY,
            'redirect_url': redirect_url,
            'payment_options': 'card',
            'customer': {'email': booking.guest_email, 'name': booking.guest_name},
            'customizations': {'title': 'Hotel Booking', 'description': 'Room Booking Payment'},
        }
        return self._request('POST', '/payments', json=payload)

    def verify(self, transaction_ref):
        return self._request('GET', '/transactions/verify_by_reference', params={'tx_ref': transaction_ref})


def is_successful(payload, booking):
    """True when a verify/webhook payload settles ``booking`` in full."""
    data = payload.get('data') or {}
    if data.get('status') != 'successful' or data.get('tx_ref') != booking.transaction_ref:
        return False
    if data.get('currency', settings.PAYMENT_CURRENCY) != settings.PAYMENT_CURRENCY:
        return False
    try:
        paid = Decimal(str(data.get('amount')))
    except InvalidOperation:
        return False
    if paid < booking.total_amount:
        logger.warning(
            'Underpayment for %s: paid %s, due %s', booking.transaction_ref, paid, booking.total_amount
        )
        return False
    return True


def valid_webhook_signature(received):
    expected = settings.FLUTTERWAVE_SECRET_HASH
    if not expected or not received:
        return False
    return hmac.compare_digest(str(received).encode(), expected.encode())
