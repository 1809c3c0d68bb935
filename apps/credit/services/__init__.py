"""Services for credit lines, offers and installment plans."""

from .exceptions import (
    CreditServiceError,
    CreditProfileNotFoundError,
    DuplicateCreditProfileError,
    InsufficientCreditError,
    CreditDefaultError,
    CreditNotAllowedError,
    CreditSettingsNotFoundError,
    PlanNotFoundError,
    InvalidPlanStateError,
    OverpaymentError,
    InvalidAmountError,
)
from .underwriting import (
    compute_credit_limit,
    score_band,
)
from .profile_management import (
    get_credit_profile,
    open_credit_profile,
    review_credit_profile,
    reserve_credit,
    release_credit,
    add_debt,
    record_default,
)
from .settings_management import (
    InstallmentQuote,
    get_settings_for,
    quote_installments,
)
from .schedule import (
    split_amount,
    build_schedule,
)
from .plan_management import (
    get_plan_by_id,
    get_user_plans,
    get_open_plans_for_order,
    create_installment_plan,
    apply_payment_to_plan,
    reverse_payment_on_plan,
    cancel_installment_plan,
    get_plan_summary,
)
from .penalties import (
    accrue_late_penalties,
    compute_schedule_penalty,
)

__all__ = [
    # Exceptions
    'CreditServiceError',
    'CreditProfileNotFoundError',
    'DuplicateCreditProfileError',
    'InsufficientCreditError',
    'CreditDefaultError',
    'CreditNotAllowedError',
    'CreditSettingsNotFoundError',
    'PlanNotFoundError',
    'InvalidPlanStateError',
    'OverpaymentError',
    'InvalidAmountError',
    # Underwriting
    'compute_credit_limit',
    'score_band',
    # Profiles
    'get_credit_profile',
    'open_credit_profile',
    'review_credit_profile',
    'reserve_credit',
    'release_credit',
    'add_debt',
    'record_default',
    # Offers
    'InstallmentQuote',
    'get_settings_for',
    'quote_installments',
    # Schedules
    'split_amount',
    'build_schedule',
    # Plans
    'get_plan_by_id',
    'get_user_plans',
    'get_open_plans_for_order',
    'create_installment_plan',
    'apply_payment_to_plan',
    'reverse_payment_on_plan',
    'cancel_installment_plan',
    'get_plan_summary',
    # Penalties
    'accrue_late_penalties',
    'compute_schedule_penalty',
]
