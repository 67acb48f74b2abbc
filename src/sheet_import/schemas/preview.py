"""Validation preview schemas shared by the validators, the session store and the API"""
import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidatedRecord(CamelModel):
    name: str
    amount: Amount = Field(gt=0)
    date: dt.date
    row_number: int = Field(ge=2)
    verified: bool = False


class RejectedRecord(CamelModel):
    """A row that failed one or more rules.

    Fields that parsed are kept; `raw` carries the original cell values so the
    row can be shown to the user as it was uploaded.
    """
    name: str = ""
    amount: Optional[Amount] = None
    date: Optional[dt.date] = None
    row_number: int = Field(ge=2)
    verified: bool = False
    raw: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(min_length=1)


class SheetError(CamelModel):
    row: int
    error: str


class SheetOutcome(CamelModel):
    sheet_name: str
    valid_rows: List[ValidatedRecord] = Field(default_factory=list)
    invalid_rows: List[RejectedRecord] = Field(default_factory=list)
    errors: List[SheetError] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.valid_rows) + len(self.invalid_rows)


class PreviewResponse(CamelModel):
    message: str
    validation_results: List[SheetOutcome]


class DeleteRowRequest(CamelModel):
    sheet_name: str
    row_number: int


class ImportRequest(CamelModel):
    sheet_name: str


class ImportResponse(CamelModel):
    message: str
    imported_count: int
    skipped_count: int
