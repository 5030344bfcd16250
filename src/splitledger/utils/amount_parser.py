"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

# Locales whose statements write "1.234,56"
COMMA_DECIMAL_LOCALES = {
    "pt-br",
    "pt-pt",
    "de-de",
    "es-es",
    "fr-fr",
    "it-it",
    "nl-nl",
}


def separators_for_locale(
    locale: Optional[str],
    decimal_separator: Optional[str] = None,
    grouping_separator: Optional[str] = None,
) -> tuple[str, str]:
    """Resolve the decimal and grouping separators for a locale tag.

    Explicit separators win over the locale defaults.

    Args:
        locale: Locale tag such as "pt-BR" or "en_US"
        decimal_separator: Optional decimal separator override
        grouping_separator: Optional grouping separator override

    Returns:
        Tuple of (decimal_separator, grouping_separator)
    """
    tag = (locale or "").strip().replace("_", "-").lower()
    if tag in COMMA_DECIMAL_LOCALES:
        decimal, grouping = ",", "."
    else:
        decimal, grouping = ".", ","

    if decimal_separator:
        decimal = decimal_separator
        if not grouping_separator and grouping == decimal:
            grouping = "," if decimal == "." else "."
    if grouping_separator:
        grouping = grouping_separator
    return decimal, grouping


def parse_amount(
    amount_str: str,
    locale: Optional[str] = None,
    decimal_separator: Optional[str] = None,
    grouping_separator: Optional[str] = None,
) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45" / "123,45" (depending on locale)
    - "R$ 1.234,56", "$1,234.56"
    - "-123.45", "+123.45", "123.45-"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string
        locale: Locale tag used to pick separators (e.g. "pt-BR")
        decimal_separator: Optional decimal separator override
        grouping_separator: Optional grouping separator override

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not amount_str.strip():
        raise ValueError("Empty amount string")

    decimal, grouping = separators_for_locale(
        locale, decimal_separator, grouping_separator
    )
    raw = amount_str
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and whitespace
    amount_str = re.sub(r"R\$|[$€£¥]|\s", "", amount_str)

    if amount_str.endswith("-"):
        is_negative = True
        amount_str = amount_str[:-1]
    if amount_str.startswith("+"):
        amount_str = amount_str[1:]
    elif amount_str.startswith("-"):
        is_negative = True
        amount_str = amount_str[1:]

    if decimal not in amount_str and grouping in amount_str:
        # "100.00" under pt-BR: a lone separator that does not split
        # thousands is the decimal point
        groups = amount_str.split(grouping)
        if not all(len(group) == 3 for group in groups[1:]):
            amount_str = "".join(groups[:-1]) + decimal + groups[-1]

    amount_str = amount_str.replace(grouping, "")
    if decimal != ".":
        amount_str = amount_str.replace(decimal, ".")

    if not re.fullmatch(r"\d+(\.\d+)?|\.\d+", amount_str):
        raise ValueError(f"Could not parse amount '{raw.strip()}'")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{raw.strip()}': {e}")
    return -amount if is_negative else amount
