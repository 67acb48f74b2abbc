"""Import and stored-record endpoints"""
import logging
from fastapi import APIRouter, HTTPException, Query

from src.sheet_import.api.deps import DbSession, PreviewSessionId, Reconciler
from src.sheet_import.errors import NotFoundError, PersistenceError
from src.sheet_import.schemas.preview import ImportRequest, ImportResponse
from src.sheet_import.schemas.record import (
    DeleteRecordResponse,
    Pagination,
    RecordListResponse,
    RecordResponse,
)
from src.sheet_import.services.audit import log_action
from src.sheet_import.services.record_repository import RecordRepository, page_count
from src.sheet_import.services.sheet_import import import_sheet

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/import", response_model=ImportResponse)
async def import_previewed_sheet(
    request: ImportRequest,
    reconciler: Reconciler,
    session_id: PreviewSessionId
):
    """
    Save the valid rows of a previewed sheet.
    Invalid rows are skipped; the sheet leaves the preview once saved.
    """
    try:
        summary = await import_sheet(reconciler, session_id, request.sheet_name)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ImportResponse(
        message="Data imported successfully",
        imported_count=summary.imported_count,
        skipped_count=summary.skipped_count
    )


@router.get("/data", response_model=RecordListResponse)
def list_records(
    db: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100)
):
    records, total = RecordRepository(db).list_records(page=page, limit=limit)
    return RecordListResponse(
        data=[RecordResponse.model_validate(r) for r in records],
        pagination=Pagination(total=total, page=page, pages=page_count(total, limit))
    )


@router.delete("/data/{record_id}", response_model=DeleteRecordResponse)
def delete_record(record_id: int, db: DbSession, session_id: PreviewSessionId):
    record = RecordRepository(db).delete_record(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")

    deleted = RecordResponse.model_validate(record)
    log_action(
        db,
        action="record_deleted",
        target_type="imported_records",
        target_id=record_id,
        session_key=session_id
    )
    logger.info(f"Deleted record {record_id}")
    return DeleteRecordResponse(message="Record deleted successfully", data=deleted)
