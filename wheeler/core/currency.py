"""Currency table and presentational formatting.

Currency is stored per symbol and displayed, never converted.
"""

from dataclasses import dataclass
from typing import Dict, List

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class Currency:
    """ISO 4217 code with its English name and display symbol."""

    code: str
    name: str
    symbol: str
    position: str  # before, after


CURRENCIES: List[Currency] = [
    Currency("USD", "US Dollar", "$", "before"),
    Currency("EUR", "Euro", "€", "after"),
    Currency("GBP", "British Pound", "£", "before"),
    Currency("JPY", "Japanese Yen", "¥", "before"),
    Currency("CHF", "Swiss Franc", "CHF", "after"),
    Currency("CAD", "Canadian Dollar", "C$", "before"),
    Currency("AUD", "Australian Dollar", "A$", "before"),
    Currency("NZD", "New Zealand Dollar", "NZ$", "before"),
    Currency("CNY", "Chinese Yuan", "¥", "before"),
    Currency("HKD", "Hong Kong Dollar", "HK$", "before"),
    Currency("SGD", "Singapore Dollar", "S$", "before"),
    Currency("INR", "Indian Rupee", "₹", "before"),
    Currency("MXN", "Mexican Peso", "$", "before"),
    Currency("BRL", "Brazilian Real", "R$", "before"),
    Currency("KRW", "South Korean Won", "₩", "before"),
    Currency("SEK", "Swedish Krona", "kr", "after"),
    Currency("NOK", "Norwegian Krone", "kr", "after"),
    Currency("DKK", "Danish Krone", "kr", "after"),
    Currency("PLN", "Polish Zloty", "zł", "after"),
    Currency("RUB", "Russian Ruble", "₽", "before"),
    Currency("ZAR", "South African Rand", "R", "before"),
    Currency("TRY", "Turkish Lira", "₺", "before"),
]

_BY_CODE: Dict[str, Currency] = {c.code: c for c in CURRENCIES}


def is_valid_currency(code: str) -> bool:
    return code in _BY_CODE


def get_currency_name(code: str) -> str:
    currency = _BY_CODE.get(code)
    return currency.name if currency else "Unknown"


def get_currency(code: str) -> Currency:
    """Look up a currency, falling back to USD for unknown codes."""
    return _BY_CODE.get(code, _BY_CODE[DEFAULT_CURRENCY])


def format_currency(value: float, code: str = DEFAULT_CURRENCY) -> str:
    """Format a value as a rounded integer with the currency symbol.

    Examples:
        format_currency(1234.6, "USD") -> "$1235"
        format_currency(1234.6, "EUR") -> "1235€"
    """
    currency = get_currency(code)
    formatted = f"{round(value):d}"
    if currency.position == "after":
        return f"{formatted}{currency.symbol}"
    return f"{currency.symbol}{formatted}"
