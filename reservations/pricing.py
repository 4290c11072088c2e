import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from . import catalog
from .exceptions import InvalidDateRange

CENTS = Decimal('0.01')
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Quote:
    nights: int
    nightly_rate: Decimal
    base_total: Decimal
    transaction_fee: Decimal
    total_amount: Decimal


def round2(amount):
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def count_nights(check_in, check_out):
    """Whole nights between two dates; partial days round up."""
    seconds = (check_out - check_in).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def fee_rate():
    return Decimal(str(settings.TRANSACTION_FEE_RATE))


def quote(room_type_id, check_in, check_out):
    room_type = catalog.get(room_type_id)
    nights = count_nights(check_in, check_out)
    if nights <= 0:
        raise InvalidDateRange()

    # base and fee are rounded separately before summing; gateway amounts
    # are reconciled against this exact order
    base_total = round2(room_type.nightly_rate * nights)
    transaction_fee = round2(base_total * fee_rate())
    return Quote(
        nights=nights,
        nightly_rate=room_type.nightly_rate,
        base_total=base_total,
        transaction_fee=transaction_fee,
        total_amount=base_total + transaction_fee,
    )
