"""Credit offer lookup and installment quotes."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.db.models import F

from ..models import CreditSettings, Frequency, INSTALLMENTS_PER_MONTH
from .exceptions import CreditNotAllowedError, CreditSettingsNotFoundError
from .schedule import split_amount


@dataclass(frozen=True)
class InstallmentQuote:
    principal_amount: Decimal
    duration_months: int
    frequency_code: str
    commission_rate: Decimal
    commission_amount: Decimal
    total_amount: Decimal
    total_installments: int
    installment_amount: Decimal
    last_installment_amount: Decimal


def get_settings_for(*, duration_months: int, amount: Decimal) -> CreditSettings:
    """
    Active settings for a duration that accept `amount`.

    When several match, the tightest bracket wins (highest min_amount,
    then lowest max_amount; open bounds rank last).

    Raises:
        CreditSettingsNotFoundError: If no active settings apply
    """
    candidates = (
        CreditSettings.objects
        .filter(duration_months=duration_months, is_active=True)
        .order_by(
            F('min_amount').desc(nulls_last=True),
            F('max_amount').asc(nulls_last=True),
        )
    )
    for candidate in candidates:
        if candidate.is_amount_valid(amount):
            return candidate
    raise CreditSettingsNotFoundError(
        f"No active credit offer for {amount} over {duration_months} months"
    )


def installments_per_month(frequency_code: str) -> int:
    """
    Raises:
        CreditNotAllowedError: If the frequency is unknown
    """
    try:
        return INSTALLMENTS_PER_MONTH[Frequency(frequency_code)]
    except ValueError:
        raise CreditNotAllowedError(f"Unknown installment frequency '{frequency_code}'")


def quote_installments(
    *,
    principal: Decimal,
    duration_months: int,
    frequency_code: str = Frequency.MONTHLY,
    credit_settings: Optional[CreditSettings] = None
) -> InstallmentQuote:
    """
    Price a credit purchase without committing anything.

    Example:
        1000.00 over 3 months monthly at 0.0500:
        commission 50.00, total 1050.00, 3 x 350.00

    Raises:
        CreditNotAllowedError: If the frequency is unknown, or the total is
            too small to give every installment at least one cent
        CreditSettingsNotFoundError: If no offer covers the duration and amount
    """
    if credit_settings is None:
        credit_settings = get_settings_for(duration_months=duration_months, amount=principal)

    count = duration_months * installments_per_month(frequency_code)
    commission = credit_settings.calculate_commission(principal)
    total = principal + commission
    parts = split_amount(total, count)
    if parts[0] <= 0:
        raise CreditNotAllowedError(
            f"{total} cannot be split into {count} installments of at least 0.01"
        )

    return InstallmentQuote(
        principal_amount=principal,
        duration_months=duration_months,
        frequency_code=frequency_code,
        commission_rate=credit_settings.commission_rate,
        commission_amount=commission,
        total_amount=total,
        total_installments=count,
        installment_amount=parts[0],
        last_installment_amount=parts[-1],
    )
