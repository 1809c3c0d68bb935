"""Installment amount splitting and due-date generation."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import List

from apps.core.date_utils import add_periods

CENT = Decimal('0.01')


@dataclass(frozen=True)
class Installment:
    number: int
    due_date: date
    amount: Decimal


def split_amount(total: Decimal, count: int) -> List[Decimal]:
    """
    Split `total` into `count` cent-precise installments.

    Every installment gets total / count rounded down to the cent; the
    last one absorbs the remainder so the parts always sum to `total`.

    Example:
        split_amount(Decimal('100.00'), 3) -> [33.33, 33.33, 33.34]
    """
    if count < 1:
        raise ValueError("Installment count must be at least 1")
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    last = total - base * (count - 1)
    return [base] * (count - 1) + [last]


def build_schedule(
    *,
    total: Decimal,
    count: int,
    start_date: date,
    periods_per_month: int
) -> List[Installment]:
    """
    Generate the due installments of a plan.

    The first installment falls one period after `start_date`.
    """
    return [
        Installment(
            number=index,
            due_date=add_periods(start_date, periods_per_month=periods_per_month, count=index),
            amount=amount,
        )
        for index, amount in enumerate(split_amount(total, count), start=1)
    ]
