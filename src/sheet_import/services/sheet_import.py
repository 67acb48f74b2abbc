"""Sheet import workflow: preview, row deletion, import and export"""
import logging
from datetime import date
from typing import List, Sequence

from src.sheet_import.schemas.preview import SheetOutcome
from src.sheet_import.services.import_reconciler import ImportReconciler, ImportSummary
from src.sheet_import.services.row_validator import (
    AMOUNT_COLUMN,
    DATE_COLUMN,
    NAME_COLUMN,
    VERIFIED_COLUMN,
    RawRow,
    ReferencePeriod,
)
from src.sheet_import.services.session_store import ValidationSessionStore
from src.sheet_import.services.sheet_validator import validate_sheet, validate_workbook
from src.sheet_import.services.workbook import decode_workbook, write_workbook

logger = logging.getLogger(__name__)

EXPORT_SHEET_NAME = "Validated Data"
TEMPLATE_SHEET_NAME = "Sheet1"
EXPORT_COLUMNS = [NAME_COLUMN, DATE_COLUMN, AMOUNT_COLUMN, VERIFIED_COLUMN, "Row"]


def preview_workbook(
    store: ValidationSessionStore,
    session_id: str,
    content: bytes,
    period: ReferencePeriod
) -> List[SheetOutcome]:
    """Validate every sheet of an uploaded workbook and make it the session's preview.

    Raises:
        DecodeError: the upload is not a readable workbook; the previous preview is kept
    """
    workbook = decode_workbook(content)
    outcomes = validate_workbook(workbook, period)
    store.replace(session_id, outcomes)
    return outcomes


def preview_sheet(
    store: ValidationSessionStore,
    session_id: str,
    sheet_name: str,
    rows: Sequence[RawRow],
    headers: Sequence[str],
    period: ReferencePeriod
) -> SheetOutcome:
    outcome = validate_sheet(sheet_name, rows, headers, period)
    store.put_sheet(session_id, outcome)
    return outcome


def delete_row(
    store: ValidationSessionStore,
    session_id: str,
    sheet_name: str,
    row_number: int
) -> SheetOutcome:
    return store.remove_row(session_id, sheet_name, row_number)


async def import_sheet(
    reconciler: ImportReconciler,
    session_id: str,
    sheet_name: str
) -> ImportSummary:
    return await reconciler.commit(session_id, sheet_name)


def list_session(store: ValidationSessionStore, session_id: str) -> List[SheetOutcome]:
    return store.get(session_id)


def export_valid_rows(store: ValidationSessionStore, session_id: str, sheet_name: str) -> bytes:
    outcome = store.get_sheet(session_id, sheet_name)
    rows = [
        {
            NAME_COLUMN: record.name,
            DATE_COLUMN: record.date.strftime("%d-%m-%Y"),
            AMOUNT_COLUMN: record.amount,
            VERIFIED_COLUMN: "Yes" if record.verified else "No",
            "Row": record.row_number,
        }
        for record in outcome.valid_rows
    ]
    logger.info(f"Exporting {len(rows)} valid row(s) from sheet '{sheet_name}'")
    return write_workbook(rows, EXPORT_SHEET_NAME, columns=EXPORT_COLUMNS)


def build_template_workbook(today: date) -> bytes:
    """Sample workbook with the expected headers and rows dated in the current month."""
    sample_date = today.replace(day=1).strftime("%d-%m-%Y")
    rows = [
        {NAME_COLUMN: "Alice", DATE_COLUMN: sample_date, AMOUNT_COLUMN: 100, VERIFIED_COLUMN: "Yes"},
        {NAME_COLUMN: "Bob", DATE_COLUMN: sample_date, AMOUNT_COLUMN: 250.5, VERIFIED_COLUMN: "No"},
        {NAME_COLUMN: "Carol", DATE_COLUMN: sample_date, AMOUNT_COLUMN: 75, VERIFIED_COLUMN: ""},
    ]
    return write_workbook(
        rows,
        TEMPLATE_SHEET_NAME,
        columns=[NAME_COLUMN, DATE_COLUMN, AMOUNT_COLUMN, VERIFIED_COLUMN]
    )
