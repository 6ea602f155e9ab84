"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from pocketbook.domain.entities import TransactionType


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def split_signed_amount(
    amount: Decimal, transaction_type: TransactionType | None = None
) -> tuple[Decimal, TransactionType]:
    """Split a signed amount into a magnitude and a transaction type.

    An explicit type wins; otherwise negative amounts are expenses and
    positive ones income.
    """
    if transaction_type is None:
        transaction_type = TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME
    return abs(amount), TransactionType(transaction_type)


def has_sub_cent_digits(amount: Decimal) -> bool:
    """Return True if the amount cannot be stored in whole cents.

    Trailing zeros don't count: "10.500" is fine, "10.005" is not.
    """
    return amount.normalize().as_tuple().exponent < -2
