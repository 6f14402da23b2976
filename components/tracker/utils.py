"""Helpers for plan names and payment schedules."""

import re
from typing import List, Optional

MAX_INPUT_LENGTH = 1000

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_HTML_TAGS = re.compile(r"<[^>]*>")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLERS = re.compile(r"on\w+\s*=", re.IGNORECASE)


def sanitize_input(value: str) -> str:
    """Trim, drop control characters and cap the length of free text."""
    if not isinstance(value, str):
        return ""
    sanitized = _CONTROL_CHARS.sub("", value.strip())
    return sanitized[:MAX_INPUT_LENGTH]


def sanitize_plan_name(plan_name: str) -> str:
    """Strip markup, script protocols and inline event handlers from a plan name."""
    sanitized = sanitize_input(plan_name)
    sanitized = _HTML_TAGS.sub("", sanitized)
    sanitized = _JS_PROTOCOL.sub("", sanitized)
    sanitized = _EVENT_HANDLERS.sub("", sanitized)
    return sanitized.strip()


def calculate_monthly_payment(total_amount: float, number_of_months: Optional[int]) -> float:
    """Installment size; a plan without a month count is paid at once."""
    if not number_of_months or number_of_months == 1:
        return total_amount
    return round(total_amount / number_of_months, 2)


def installment_amounts(
    total_amount: float, number_of_months: Optional[int], monthly_payment: float
) -> List[float]:
    """
    Amount due per month index.

    The schedule always sums to ``total_amount``: the last installment
    absorbs the rounding difference, and when ``monthly_payment`` overshoots
    the schedule ends at the month that covers the total.
    """
    if not number_of_months:
        return [total_amount]
    amounts = []
    remaining = round(total_amount, 2)
    for _ in range(number_of_months - 1):
        if remaining <= monthly_payment:
            break
        amounts.append(monthly_payment)
        remaining = round(remaining - monthly_payment, 2)
    amounts.append(remaining)
    return amounts
