"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount string into a positive Decimal.

    Handles formats such as:
    - "123.45"
    - "$123.45"
    - "1,234.56"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount with at most two decimal places

    Raises:
        ValueError: If the string is not a positive amount in cents
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[$€£¥,\s]", "", amount_str)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be greater than zero, got '{amount_str}'")
    if amount.as_tuple().exponent < -2:
        raise ValueError(f"Amount '{amount_str}' has more than two decimal places")
    return amount


def parse_share(share_str: str) -> tuple[str, Decimal]:
    """Parse a "USER=AMOUNT" share option.

    Args:
        share_str: User email or ID and amount separated by "="

    Returns:
        Tuple of (user, amount)

    Raises:
        ValueError: If the string is not in USER=AMOUNT form
    """
    user, sep, amount = share_str.rpartition("=")
    if not sep or not user.strip():
        raise ValueError(f"Share '{share_str}' must look like USER=AMOUNT")
    return user.strip(), parse_amount(amount)
