"""Stored record schemas"""
import datetime as dt
from typing import List, Optional
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.sheet_import.schemas.preview import Amount, CamelModel


class RecordResponse(CamelModel):
    id: int
    name: str
    amount: Amount
    date: dt.date
    verified: bool
    sheet_name: Optional[str] = None
    row_number: Optional[int] = None
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Pagination(CamelModel):
    total: int
    page: int
    pages: int


class RecordListResponse(CamelModel):
    data: List[RecordResponse]
    pagination: Pagination


class DeleteRecordResponse(CamelModel):
    message: str
    data: RecordResponse
