"""ImportedRecord model - rows committed from a validated sheet"""
import datetime as dt
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Boolean, Integer, Numeric, Date, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from src.sheet_import.models.base import Base

AMOUNT_PRECISION = 18
AMOUNT_SCALE = 4


class ImportedRecord(Base):
    __tablename__ = "imported_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(AMOUNT_PRECISION, AMOUNT_SCALE), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sheet_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    row_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
