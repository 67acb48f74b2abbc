"""Sheet-level validation: header preconditions, then every row in source order"""
import logging
from typing import List, Sequence

from src.sheet_import.schemas.preview import (
    RejectedRecord,
    SheetError,
    SheetOutcome,
    ValidatedRecord,
)
from src.sheet_import.services.row_validator import (
    AMOUNT_COLUMN,
    DATE_COLUMN,
    NAME_COLUMN,
    RawRow,
    ReferencePeriod,
    validate_row,
)
from src.sheet_import.services.workbook import DecodedWorkbook

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [NAME_COLUMN, DATE_COLUMN, AMOUNT_COLUMN]

HEADER_ROW = 1
FIRST_DATA_ROW = 2

EMPTY_SHEET = "Sheet is empty or missing headers"
NO_DATA_ROWS = "Sheet has no data rows"


def find_missing_columns(headers: Sequence[str]) -> List[str]:
    present = set(headers)
    return [col for col in REQUIRED_COLUMNS if col not in present]


def find_duplicate_columns(headers: Sequence[str]) -> List[str]:
    seen = set()
    duplicates: List[str] = []
    for header in headers:
        if header in seen and header not in duplicates:
            duplicates.append(header)
        seen.add(header)
    return duplicates


def _precondition_failure(sheet_name: str, message: str) -> SheetOutcome:
    logger.info(f"Sheet '{sheet_name}' rejected: {message}")
    return SheetOutcome(
        sheet_name=sheet_name,
        errors=[SheetError(row=HEADER_ROW, error=message)]
    )


def validate_sheet(
    sheet_name: str,
    rows: Sequence[RawRow],
    headers: Sequence[str],
    period: ReferencePeriod
) -> SheetOutcome:
    if not headers:
        return _precondition_failure(sheet_name, EMPTY_SHEET)

    duplicates = find_duplicate_columns(headers)
    if duplicates:
        return _precondition_failure(
            sheet_name, f"Duplicate columns: {', '.join(duplicates)}"
        )

    missing = find_missing_columns(headers)
    if missing:
        return _precondition_failure(
            sheet_name, f"Missing required columns: {', '.join(missing)}"
        )

    if not rows:
        return _precondition_failure(sheet_name, NO_DATA_ROWS)

    valid_rows: List[ValidatedRecord] = []
    invalid_rows: List[RejectedRecord] = []
    for idx, row in enumerate(rows):
        record = validate_row(row, period, row_number=idx + FIRST_DATA_ROW)
        if isinstance(record, RejectedRecord):
            invalid_rows.append(record)
        else:
            valid_rows.append(record)

    logger.info(
        f"Validated sheet '{sheet_name}': {len(valid_rows)} valid, {len(invalid_rows)} invalid"
    )
    return SheetOutcome(
        sheet_name=sheet_name,
        valid_rows=valid_rows,
        invalid_rows=invalid_rows
    )


def validate_workbook(workbook: DecodedWorkbook, period: ReferencePeriod) -> List[SheetOutcome]:
    return [
        validate_sheet(sheet.name, sheet.rows, sheet.headers, period)
        for sheet in workbook
    ]
