"""
Formatting helpers for numbers, money and timestamps.
Numbers follow the Brazilian convention (1.234,56).
"""
from decimal import Decimal, InvalidOperation
from datetime import datetime, timezone
from typing import Union, Optional


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    ISO-8601 timestamp in UTC, sortable as text.

    Examples:
        utc_timestamp(datetime(2026, 1, 12, 15, 30, tzinfo=timezone.utc))
            -> "2026-01-12T15:30:00.000000+00:00"
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    # Fixed microsecond width keeps lexicographic order == chronological order
    return moment.astimezone(timezone.utc).isoformat(timespec='microseconds')


def num_br(value: Union[int, float, Decimal, str, None], decimals: Optional[int] = None) -> str:
    """
    Format a number Brazilian style:
    - Thousands separator: dot (.)
    - Decimal separator: comma (,)
    - Trailing decimal zeros are dropped unless `decimals` is given

    Examples:
        num_br(1500) -> "1.500"
        num_br(1500.5) -> "1.500,5"
        num_br(1500, decimals=2) -> "1.500,00"
        num_br(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        if isinstance(value, str):
            value = value.replace(",", ".")
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    if decimals is not None:
        num = num.quantize(Decimal(10) ** -decimals)

    num_str = f"{num:f}"

    if '.' in num_str:
        integer_part, decimal_part = num_str.split('.')
        if decimals is None:
            decimal_part = decimal_part.rstrip('0')
    else:
        integer_part = num_str
        decimal_part = ""

    if integer_part.startswith('-'):
        sign_str = '-'
        integer_part = integer_part[1:]
    else:
        sign_str = ''

    # Group thousands: reverse, chunk by 3, reverse again
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    integer_formatted = '.'.join(groups)[::-1]

    if decimal_part:
        return f"{sign_str}{integer_formatted},{decimal_part}"
    return f"{sign_str}{integer_formatted}"


def money_br(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format a money amount with the currency symbol and two decimals.

    Examples:
        money_br(1234.5) -> "R$ 1.234,50"
        money_br(0) -> "R$ 0,00"
    """
    formatted = num_br(value, decimals=2)
    if formatted == "-":
        return formatted
    return f"R$ {formatted}"


def datetime_br(value: Union[datetime, str, None], with_time: bool = True) -> str:
    """
    Format a datetime (or ISO-8601 text) as DD/MM/YYYY HH:MM.

    Examples:
        datetime_br("2026-01-12T15:30:00+00:00") -> "12/01/2026 15:30"
    """
    if value is None:
        return "-"

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return "-"

    if not isinstance(value, datetime):
        return "-"

    if with_time:
        return value.strftime("%d/%m/%Y %H:%M")
    return value.strftime("%d/%m/%Y")


def parse_price(value: Union[str, float, int, Decimal, None]) -> Optional[Decimal]:
    """
    Parse a price typed with comma or dot decimals; invalid input -> None.

    Examples:
        parse_price("59,90") -> Decimal("59.90")
        parse_price("") -> None
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value.quantize(Decimal('0.01'))
    val_str = str(value).strip()
    if not val_str:
        return None
    if ',' in val_str:
        val_str = val_str.replace('.', '').replace(',', '.')
    try:
        price = Decimal(val_str)
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price < 0:
        return None
    return price.quantize(Decimal('0.01'))
