"""Field-level validation of one decoded spreadsheet row"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, NamedTuple, Union

from src.sheet_import.errors import ParseError
from src.sheet_import.models.imported_record import AMOUNT_PRECISION, AMOUNT_SCALE
from src.sheet_import.schemas.preview import RejectedRecord, ValidatedRecord
from src.sheet_import.services.cell_parser import parse_amount, parse_date, parse_name

RawRow = Dict[str, Any]

NAME_COLUMN = "Name"
DATE_COLUMN = "Date"
AMOUNT_COLUMN = "Amount"
VERIFIED_COLUMN = "Verified"

EMPTY_NAME = "Empty name not allowed"
AMOUNT_NOT_NUMBER = "Amount must be a valid number"
AMOUNT_NOT_POSITIVE = "Amount must be greater than zero"
AMOUNT_TOO_PRECISE = f"Amount must have at most {AMOUNT_SCALE} decimal places"
DATE_INVALID_FORMAT = "Invalid date format (expected DD-MM-YYYY)"
DATE_NOT_CURRENT_MONTH = "Date must be in current month"

# exclusive upper bound of the imported_records.amount column
AMOUNT_LIMIT = Decimal(10) ** (AMOUNT_PRECISION - AMOUNT_SCALE)
AMOUNT_TOO_LARGE = f"Amount must be less than {AMOUNT_LIMIT:,}"


class ReferencePeriod(NamedTuple):
    """The month every row date has to fall in."""
    year: int
    month: int

    @classmethod
    def from_date(cls, value: date) -> "ReferencePeriod":
        return cls(year=value.year, month=value.month)

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month


def _decimal_places(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return -exponent if exponent < 0 else 0


def parse_verified(raw: Any) -> bool:
    if raw is True:
        return True
    if isinstance(raw, str):
        return raw.strip().lower() == "yes"
    return False


def validate_row(
    raw: RawRow,
    period: ReferencePeriod,
    row_number: int
) -> Union[ValidatedRecord, RejectedRecord]:
    errors: List[str] = []
    fields: Dict[str, Any] = {}

    name = parse_name(raw.get(NAME_COLUMN))
    fields["name"] = name
    if not name:
        errors.append(EMPTY_NAME)

    try:
        amount = parse_amount(raw.get(AMOUNT_COLUMN))
    except ParseError:
        errors.append(AMOUNT_NOT_NUMBER)
    else:
        if amount <= 0:
            errors.append(AMOUNT_NOT_POSITIVE)
        elif amount >= AMOUNT_LIMIT:
            errors.append(AMOUNT_TOO_LARGE)
        elif _decimal_places(amount) > AMOUNT_SCALE:
            errors.append(AMOUNT_TOO_PRECISE)
        if abs(amount) < AMOUNT_LIMIT:
            fields["amount"] = amount

    try:
        parsed_date = parse_date(raw.get(DATE_COLUMN))
    except ParseError:
        errors.append(DATE_INVALID_FORMAT)
    else:
        fields["date"] = parsed_date
        if not period.contains(parsed_date):
            errors.append(DATE_NOT_CURRENT_MONTH)

    fields["verified"] = parse_verified(raw.get(VERIFIED_COLUMN))

    if errors:
        return RejectedRecord(
            **fields,
            row_number=row_number,
            raw=dict(raw),
            errors=errors
        )

    return ValidatedRecord(**fields, row_number=row_number)
