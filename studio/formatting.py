"""Display formatting for money, numbers and dates."""

import math
from datetime import datetime
from typing import Optional, Union

from .config import settings


def format_currency(amount: Optional[float], prefix: Optional[str] = None) -> str:
    """Format as `Ksh 1,234.50`. None / NaN render as zero."""
    prefix = prefix or settings.CURRENCY_PREFIX
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0
    if math.isnan(value) or math.isinf(value):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{prefix} {abs(value):,.2f}"


def format_number(value: Optional[float], decimals: int = 1) -> str:
    """Thousands separators, at most `decimals` places, trailing zeros dropped."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return "0"
    if math.isnan(value):
        return "0"
    text = f"{value:,.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_date(value: Union[datetime, str]) -> str:
    """`March 05, 2026`: accepts datetimes or ISO strings."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%B %d, %Y")
