from __future__ import annotations

import io
from datetime import datetime

import pandas as pd
import pytest

from src.sheet_import.errors import DecodeError
from src.sheet_import.services.workbook import decode_workbook, write_workbook


def test_decode_reads_headers_and_rows(make_xlsx):
    content = make_xlsx({
        "Sheet1": [
            ["Name", "Date", "Amount", "Verified"],
            ["Alice", "01-03-2024", 100, "Yes"],
            ["Bob", "02-03-2024", 12.5, None],
        ]
    })

    workbook = decode_workbook(content)

    assert workbook.sheet_names == ["Sheet1"]
    sheet = workbook.sheets["Sheet1"]
    assert sheet.headers == ["Name", "Date", "Amount", "Verified"]
    assert sheet.rows == [
        {"Name": "Alice", "Date": "01-03-2024", "Amount": 100, "Verified": "Yes"},
        {"Name": "Bob", "Date": "02-03-2024", "Amount": 12.5, "Verified": None},
    ]


def test_decode_keeps_sheet_order(make_xlsx):
    content = make_xlsx({
        "Zeta": [["Name"], ["x"]],
        "Alpha": [["Name"], ["y"]],
    })
    assert decode_workbook(content).sheet_names == ["Zeta", "Alpha"]


def test_decode_skips_blank_rows(make_xlsx):
    content = make_xlsx({
        "Sheet1": [
            ["Name", "Date", "Amount"],
            [None, None, None],
            ["Alice", "01-03-2024", 5],
        ]
    })
    rows = decode_workbook(content).sheets["Sheet1"].rows
    assert rows == [{"Name": "Alice", "Date": "01-03-2024", "Amount": 5}]


def test_decode_empty_sheet(make_xlsx):
    content = make_xlsx({"Data": [["Name"], ["x"]], "Empty": []})
    sheet = decode_workbook(content).sheets["Empty"]
    assert sheet.headers == []
    assert sheet.rows == []


def test_decode_returns_native_datetimes():
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame({"Name": ["Alice"], "Date": [datetime(2024, 3, 1)], "Amount": [1]}).to_excel(
            writer, sheet_name="Sheet1", index=False
        )

    row = decode_workbook(buffer.getvalue()).sheets["Sheet1"].rows[0]
    assert isinstance(row["Date"], datetime)
    assert row["Date"].date().isoformat() == "2024-03-01"


def test_decode_rejects_non_workbook_bytes():
    with pytest.raises(DecodeError) as exc:
        decode_workbook(b"definitely not a zip archive")
    assert str(exc.value).startswith("Error processing file")


def test_write_workbook_round_trips_through_decoder():
    content = write_workbook(
        [{"Name": "Alice", "Amount": 3}],
        "A sheet name that is far longer than thirty-one characters",
        columns=["Name", "Amount"],
    )
    workbook = decode_workbook(content)

    assert workbook.sheet_names == ["A sheet name that is far longer"]
    assert workbook.sheets[workbook.sheet_names[0]].rows == [{"Name": "Alice", "Amount": 3}]


def test_decode_keeps_header_text_as_written(make_xlsx):
    content = make_xlsx({"Sheet1": [["Name", "Date", " Amount "], ["Alice", "01-03-2024", 5]]})
    sheet = decode_workbook(content).sheets["Sheet1"]

    assert sheet.headers == ["Name", "Date", " Amount "]
    assert sheet.rows == [{"Name": "Alice", "Date": "01-03-2024", " Amount ": 5}]


def test_decode_repeated_header_keeps_first_column(make_xlsx):
    content = make_xlsx({
        "Sheet1": [
            ["Name", "Date", "Amount", "Name"],
            ["Alice", "01-03-2024", 5, "Mallory"],
        ]
    })
    sheet = decode_workbook(content).sheets["Sheet1"]

    assert sheet.headers == ["Name", "Date", "Amount", "Name"]
    assert sheet.rows == [{"Name": "Alice", "Date": "01-03-2024", "Amount": 5}]
