"""
Common utilities and shared functions.
Precision rounding, tolerant date parsing, id generation and catalog ordering.
"""

import logging
import math
import random
import string
import sys
import time
from datetime import date, datetime, time as dt_time
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)

MONEY_DECIMALS = 2
QUANTITY_DECIMALS = 3

_ID_ALPHABET = string.digits + string.ascii_lowercase


def round_to_precision(value: float, decimals: int = QUANTITY_DECIMALS) -> float:
    """
    Round a float to a fixed number of decimals, removing binary drift.

    Machine epsilon is added before scaling and halves round toward
    positive infinity, matching how the stored ledgers were rounded.
    NaN and infinities are returned unchanged.

    Args:
        value: Value to round
        decimals: Number of decimal places (money uses 2, quantities 3)

    Returns:
        Rounded value

    Examples:
        >>> round_to_precision(0.1 + 0.2, 2)
        0.3
        >>> round_to_precision(-2.5, 0)
        -2.0
    """
    if not math.isfinite(value):
        return value

    factor = 10 ** decimals
    rounded = math.floor((value + sys.float_info.epsilon) * factor + 0.5) / factor
    # Avoid returning -0.0
    return rounded + 0.0


def round_money(value: float) -> float:
    return round_to_precision(value, MONEY_DECIMALS)


def round_quantity(value: float) -> float:
    return round_to_precision(value, QUANTITY_DECIMALS)


def to_naive_local(value: datetime) -> datetime:
    """Convert a timezone-aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_date(value: Any, context: Optional[str] = None) -> datetime:
    """
    Deserialize a stored timestamp without ever failing.

    Accepts datetime and date objects, ISO-8601 strings (a trailing "Z" is
    allowed) and millisecond epoch numbers. Anything missing or unparseable
    is replaced by the current time and a warning is logged.

    Args:
        value: Raw stored value
        context: Optional description of the owning record for the log line

    Returns:
        Naive local datetime
    """
    where = f" for {context}" if context else ""

    if value is None or value == "":
        logger.warning(f"Missing date{where}, using current time")
        return datetime.now()

    if isinstance(value, datetime):
        return to_naive_local(value)

    if isinstance(value, date):
        return datetime.combine(value, dt_time.min)

    if isinstance(value, bool):
        logger.warning(f"Unknown date format{where}: {value!r}, using current time")
        return datetime.now()

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Invalid timestamp{where}: {value!r}, using current time")
            return datetime.now()

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_naive_local(datetime.fromisoformat(text))
        except ValueError:
            logger.warning(f"Invalid date string{where}: {value!r}, using current time")
            return datetime.now()

    logger.warning(f"Unknown date format{where}: {value!r}, using current time")
    return datetime.now()


def normalize_cutoff(as_of: Any) -> Optional[datetime]:
    """
    Turn an as-of argument into an inclusive datetime cutoff.
    A plain date covers the whole of that day.
    """
    if as_of is None:
        return None
    if isinstance(as_of, datetime):
        return to_naive_local(as_of)
    if isinstance(as_of, date):
        return datetime.combine(as_of, dt_time.max)
    return parse_date(as_of, context="as-of cutoff")


def generate_id() -> str:
    """
    Generate a best-effort unique opaque id.
    Millisecond clock followed by nine random base-36 characters.
    """
    suffix = ''.join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}{suffix}"


def sort_product_types(product_types: Iterable[Any]) -> List[Any]:
    """
    Sort commodities for display.
    Ordered entries come first by display_order; the rest keep their input order.
    """
    return sorted(
        product_types,
        key=lambda pt: (pt.display_order is None, pt.display_order if pt.display_order is not None else 0)
    )
