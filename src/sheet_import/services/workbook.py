"""Workbook decoding and writing (pandas with the openpyxl engine)

Every sheet is read without a header so the first row can be inspected:
row 1 holds the column names, rows 2.. are data rows. Fully blank rows are
dropped.
"""
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from src.sheet_import.errors import DecodeError
from src.sheet_import.services.row_validator import RawRow

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MAX_SHEET_NAME_LENGTH = 31


@dataclass
class DecodedSheet:
    name: str
    headers: List[str] = field(default_factory=list)
    rows: List[RawRow] = field(default_factory=list)


@dataclass
class DecodedWorkbook:
    sheet_names: List[str]
    sheets: Dict[str, DecodedSheet]

    def __iter__(self):
        for name in self.sheet_names:
            yield self.sheets[name]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _clean_cell(value: Any) -> Any:
    if _is_blank(value) and not isinstance(value, str):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _decode_sheet(name: str, df: pd.DataFrame) -> DecodedSheet:
    if df.empty:
        return DecodedSheet(name=name)

    headers: List[str] = []
    columns = []
    for pos, cell in enumerate(df.iloc[0].tolist()):
        if _is_blank(cell):
            continue
        header = str(cell)
        # a repeated header keeps the values of its first column
        if header not in headers:
            columns.append((pos, header))
        headers.append(header)

    rows: List[RawRow] = []
    for values in df.iloc[1:].itertuples(index=False, name=None):
        row = {header: _clean_cell(values[pos]) for pos, header in columns}
        if all(_is_blank(v) for v in row.values()):
            continue
        rows.append(row)

    return DecodedSheet(name=name, headers=headers, rows=rows)


def decode_workbook(content: bytes) -> DecodedWorkbook:
    """Decode an .xlsx payload into headers and raw rows per sheet.

    Raises:
        DecodeError: the bytes are not a readable workbook
    """
    try:
        with pd.ExcelFile(io.BytesIO(content), engine="openpyxl") as xls:
            sheet_names = [str(name) for name in xls.sheet_names]
            sheets = {
                str(name): _decode_sheet(str(name), xls.parse(name, header=None, dtype=object))
                for name in xls.sheet_names
            }
    except Exception as e:
        logger.warning(f"Failed to decode workbook: {type(e).__name__}: {e}")
        raise DecodeError(f"Error processing file: {e}") from e

    logger.info(f"Decoded workbook with sheets: {sheet_names}")
    return DecodedWorkbook(sheet_names=sheet_names, sheets=sheets)


def write_workbook(
    rows: Sequence[Dict[str, Any]],
    sheet_name: str,
    columns: Optional[Sequence[str]] = None
) -> bytes:
    df = pd.DataFrame(list(rows), columns=list(columns) if columns else None)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name[:MAX_SHEET_NAME_LENGTH], index=False)
    return buffer.getvalue()
