"""Cell-level parsing of raw spreadsheet values into domain types

Serial dates use a single epoch: day 0 is 1899-12-30, so a serial N is
``date(1899, 12, 30) + N days`` (the same mapping as ``(N - 25569) * 86400``
UNIX seconds). Spreadsheets believe 1900 was a leap year, so serials 1-60 come
out one day earlier than the spreadsheet displays. That is left as is and
logged.
"""
import logging
import math
import numbers
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from src.sheet_import.errors import ParseError

logger = logging.getLogger(__name__)

SERIAL_EPOCH = date(1899, 12, 30)
LEAP_BUG_LAST_SERIAL = 60

DATE_PATTERN = re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4}|\d{2})$")


def parse_date(raw: Any) -> date:
    if raw is None or isinstance(raw, bool):
        raise ParseError(f"not a date: {raw!r}")

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    if isinstance(raw, numbers.Real):
        return _from_serial(float(raw))

    if isinstance(raw, str):
        return _from_day_first_string(raw)

    raise ParseError(f"not a date: {raw!r}")


def _from_serial(serial: float) -> date:
    if not math.isfinite(serial):
        raise ParseError(f"not a date serial: {serial!r}")
    days = int(serial)
    if days < 1:
        raise ParseError(f"date serial out of range: {serial!r}")
    if days <= LEAP_BUG_LAST_SERIAL:
        logger.warning(f"Date serial {days} precedes 1900-03-01; value is not leap-year corrected")
    try:
        return SERIAL_EPOCH + timedelta(days=days)
    except OverflowError as e:
        raise ParseError(f"date serial out of range: {serial!r}") from e


def _from_day_first_string(text: str) -> date:
    match = DATE_PATTERN.match(text.strip())
    if not match:
        raise ParseError(f"not a DD-MM-YYYY date: {text!r}")

    day, month, year = (int(part) for part in match.groups())
    if len(match.group(3)) == 2:
        year += 2000

    try:
        return date(year, month, day)
    except ValueError as e:
        raise ParseError(f"not a calendar date: {text!r}") from e


def parse_amount(raw: Any) -> Decimal:
    if raw is None or isinstance(raw, bool):
        raise ParseError(f"not a number: {raw!r}")

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, numbers.Integral):
        value = Decimal(int(raw))
    elif isinstance(raw, numbers.Real):
        value = Decimal(repr(float(raw)))
    elif isinstance(raw, str):
        try:
            value = Decimal(raw.strip())
        except InvalidOperation as e:
            raise ParseError(f"not a number: {raw!r}") from e
    else:
        raise ParseError(f"not a number: {raw!r}")

    if not value.is_finite():
        raise ParseError(f"not a finite number: {raw!r}")
    return value


def parse_name(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()
