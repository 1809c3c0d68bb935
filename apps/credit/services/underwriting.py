"""Credit limit underwriting from score and declared income."""

from decimal import Decimal, ROUND_DOWN
from typing import Optional, Tuple

from django.conf import settings


# (minimum score, monthly income multiplier, band)
SCORE_BANDS = [
    (800, Decimal('4.0'), 'excellent'),
    (740, Decimal('3.0'), 'very_good'),
    (670, Decimal('2.0'), 'good'),
    (580, Decimal('1.0'), 'fair'),
    (500, Decimal('0.5'), 'poor'),
]


def score_band(credit_score: int) -> Tuple[Decimal, str]:
    """
    Map a credit score (300-850) to an income multiplier.

    Score bands:
    - 800+:    4x monthly income
    - 740-799: 3x
    - 670-739: 2x
    - 580-669: 1x
    - 500-579: 0.5x
    - < 500:   declined

    Returns: (multiplier, band_name)
    """
    for minimum, multiplier, band in SCORE_BANDS:
        if credit_score >= minimum:
            return multiplier, band
    return Decimal('0'), 'declined'


def compute_credit_limit(
    *,
    credit_score: int,
    monthly_income: Optional[Decimal],
    default_count: int = 0
) -> Decimal:
    """
    Credit limit for a borrower.

    Users in default (default_count at or above MAX_DEFAULTS) and users
    without declared income get no credit. Otherwise the limit is the
    band multiplier times monthly income, capped at CREDIT_LIMIT_CEILING
    and truncated to whole units.
    """
    kredika = settings.KREDIKA
    if default_count >= kredika['MAX_DEFAULTS'] or not monthly_income:
        return Decimal('0.00')

    multiplier, _ = score_band(credit_score)
    limit = min(monthly_income * multiplier, kredika['CREDIT_LIMIT_CEILING'])
    return limit.quantize(Decimal('1'), rounding=ROUND_DOWN).quantize(Decimal('0.01'))
