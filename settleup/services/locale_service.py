"""Locale-aware formatting of amounts for CLI and log output.

Uses babel. The currency is derived from the locale territory.

Example:
    >>> format_amount(Decimal("1234.5"), "en_US")
    '$1,234.50'
"""

import logging
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency, format_decimal, get_territory_currencies

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en_US"
DEFAULT_CURRENCY = "USD"


def currency_for_locale(locale_str: str) -> str:
    """Derive currency code from locale territory.

    Args:
        locale_str: Locale string (e.g., 'en_IN')

    Returns:
        ISO 4217 currency code (e.g., 'INR'), USD if it cannot be derived
    """
    try:
        territory = Locale.parse(locale_str).territory
        if territory:
            currencies = get_territory_currencies(territory)
            if currencies:
                return currencies[0]
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Could not derive currency from locale '{locale_str}': {e}")
    return DEFAULT_CURRENCY


def format_amount(
    amount: Decimal, locale: str = DEFAULT_LOCALE, include_symbol: bool = True
) -> str:
    """Format monetary amount according to locale.

    Args:
        amount: Amount to format
        locale: Locale string
        include_symbol: Whether to include currency symbol (default True)

    Returns:
        Formatted string (e.g., '$45.00' or '45.00')
    """
    if include_symbol:
        return format_currency(amount, currency_for_locale(locale), locale=locale)
    return format_decimal(amount, format="#,##0.00", locale=locale)


__all__ = ["DEFAULT_LOCALE", "currency_for_locale", "format_amount"]
