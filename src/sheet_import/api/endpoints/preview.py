"""Upload preview endpoints: validate, inspect, delete rows, export"""
import logging
from fastapi import APIRouter, UploadFile, File, HTTPException, Query
from fastapi.responses import Response

from src.sheet_import.api.deps import AppSettings, Period, PreviewSessionId, PreviewStore, Today
from src.sheet_import.errors import DecodeError, NotFoundError
from src.sheet_import.schemas.preview import DeleteRowRequest, PreviewResponse
from src.sheet_import.services.sheet_import import (
    build_template_workbook,
    delete_row,
    export_valid_rows,
    list_session,
    preview_workbook,
)
from src.sheet_import.services.workbook import XLSX_CONTENT_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/preview", response_model=PreviewResponse)
async def preview_upload(
    settings: AppSettings,
    store: PreviewStore,
    session_id: PreviewSessionId,
    period: Period,
    file: UploadFile = File(...)
):
    """
    Validate every sheet of an uploaded workbook.
    Replaces any earlier preview held for this session.
    """
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Only .xlsx files are allowed")

    content = await file.read()
    if len(content) > settings.upload_max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size must be less than {settings.UPLOAD_MAX_MB}MB"
        )

    logger.info(f"Previewing {file.filename} ({len(content)} bytes) for session {session_id[:8]}")
    try:
        outcomes = preview_workbook(store, session_id, content, period)
    except DecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PreviewResponse(message="File validated successfully", validation_results=outcomes)


@router.get("/preview", response_model=PreviewResponse)
async def get_preview(store: PreviewStore, session_id: PreviewSessionId):
    try:
        outcomes = list_session(store, session_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PreviewResponse(message="Preview loaded", validation_results=outcomes)


@router.post("/preview/delete", response_model=PreviewResponse)
async def delete_preview_row(
    request: DeleteRowRequest,
    store: PreviewStore,
    session_id: PreviewSessionId
):
    try:
        delete_row(store, session_id, request.sheet_name, request.row_number)
        outcomes = list_session(store, session_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PreviewResponse(message="Row deleted successfully", validation_results=outcomes)


@router.get("/preview/export")
async def export_preview_sheet(
    store: PreviewStore,
    session_id: PreviewSessionId,
    sheet_name: str = Query(..., alias="sheetName")
):
    """
    Download the valid rows of a previewed sheet as .xlsx.
    """
    try:
        content = export_valid_rows(store, session_id, sheet_name)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _xlsx_response(content, "validated_data.xlsx")


@router.get("/template")
async def download_template(today: Today):
    """Sample workbook with the expected columns"""
    return _xlsx_response(build_template_workbook(today), "import_template.xlsx")
