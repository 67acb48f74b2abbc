"""Persistence of committed records"""
import logging
import math
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from src.sheet_import.models.imported_record import ImportedRecord
from src.sheet_import.schemas.preview import ValidatedRecord

logger = logging.getLogger(__name__)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class RecordRepository:
    def __init__(self, db: Session):
        self.db = db

    def insert_many(
        self,
        records: Sequence[ValidatedRecord],
        sheet_name: Optional[str] = None
    ) -> List[ImportedRecord]:
        """Stage records in the current transaction. The caller commits."""
        rows = [
            ImportedRecord(
                name=record.name,
                amount=record.amount,
                date=record.date,
                verified=record.verified,
                sheet_name=sheet_name,
                row_number=record.row_number
            )
            for record in records
        ]
        self.db.add_all(rows)
        self.db.flush()
        logger.info(f"Staged {len(rows)} record(s) from sheet '{sheet_name}'")
        return rows

    def list_records(self, page: int = 1, limit: int = 10) -> Tuple[List[ImportedRecord], int]:
        offset = (page - 1) * limit
        records = self.db.execute(
            select(ImportedRecord)
            .order_by(ImportedRecord.created_at.desc(), ImportedRecord.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        total = self.db.execute(select(func.count(ImportedRecord.id))).scalar_one()
        return list(records), total

    def delete_record(self, record_id: int) -> Optional[ImportedRecord]:
        record = self.db.get(ImportedRecord, record_id)
        if record is None:
            return None
        self.db.delete(record)
        self.db.flush()
        return record
