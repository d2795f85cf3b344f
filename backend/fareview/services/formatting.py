"""
Display helpers turning raw Amadeus fields into presentation strings.
"""
import re
from datetime import datetime
from typing import Optional, Union

DURATION_RE = re.compile(r"P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:\d+(?:\.\d+)?S)?)?")
WORD_SEPARATOR_RE = re.compile(r"([ -])")

# en-US rendering of the currencies Amadeus commonly prices in
CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "CNY": "CN¥",
    "CAD": "CA$",
    "AUD": "A$",
    "NZD": "NZ$",
    "HKD": "HK$",
    "MXN": "MX$",
    "BRL": "R$",
    "KRW": "₩",
    "ILS": "₪",
    "VND": "₫",
    "TWD": "NT$",
}
# Minor units as en-US Intl.NumberFormat renders them, 2 for everything else
CURRENCY_DECIMALS = {
    "JPY": 0, "KRW": 0, "VND": 0, "CLP": 0, "ISK": 0, "PYG": 0, "UGX": 0,
    "BHD": 3, "KWD": 3, "JOD": 3, "OMR": 3, "TND": 3, "IQD": 0, "LYD": 3,
}


def format_title_case(value: Optional[str]) -> str:
    """NEW YORK CITY -> New York City, SAINT-LOUIS -> Saint-Louis."""
    if not value:
        return ""
    parts = WORD_SEPARATOR_RE.split(value)
    return "".join(
        part if part in (" ", "-") else part[:1].upper() + part[1:].lower()
        for part in parts
    )


def parse_duration(value: Optional[str]):
    """Split an ISO-8601 duration (PT2H30M, P1DT2H) into (hours, minutes); either may be None."""
    if not value:
        return None, None
    match = DURATION_RE.fullmatch(value.strip())
    if not match:
        return None, None
    days, hours, minutes = match.groups()
    if days is not None:
        hours = int(days) * 24 + int(hours or 0)
    return (int(hours) if hours is not None else None,
            int(minutes) if minutes is not None else None)


def format_duration(value: Optional[str]) -> str:
    """PT2H30M -> "2 h 30 min", PT45M -> "45 min", PT5H -> "5 h"."""
    hours, minutes = parse_duration(value)
    if hours is not None and minutes is not None:
        return f"{hours} h {minutes} min"
    if minutes is not None:
        return f"{minutes} min"
    return f"{hours or 0} h"


def format_stop_duration(arrival_at: datetime, next_departure_at: datetime) -> str:
    """Layover between landing and the next take-off, as whole hours plus remaining minutes."""
    total_minutes = int((next_departure_at - arrival_at).total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours} h {minutes} min"


def format_date(value: datetime) -> str:
    """Monday, 10 June"""
    return f"{value:%A}, {value.day} {value:%B}"


def format_time(value: datetime) -> str:
    return value.strftime("%H:%M")


def format_currency(amount: Union[str, float], currency: str) -> str:
    """en-US money string: 1234.5 USD -> $1,234.50"""
    amount = float(amount)
    code = (currency or "").upper()
    decimals = CURRENCY_DECIMALS.get(code, 2)
    number = f"{abs(amount):,.{decimals}f}"
    sign = "-" if amount < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{number}"
    return f"{sign}{code} {number}".strip()
