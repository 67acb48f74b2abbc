"""API dependencies - preview session, stores and the reference clock"""
import uuid
from datetime import date, datetime
from typing import Annotated, Iterator
from zoneinfo import ZoneInfo
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.sheet_import.config import Settings
from src.sheet_import.services.import_reconciler import ImportReconciler
from src.sheet_import.services.row_validator import ReferencePeriod
from src.sheet_import.services.session_store import ValidationSessionStore

PREVIEW_SESSION_KEY = "preview_session_id"


def get_preview_session_id(request: Request) -> str:
    """Resolve the preview session id from the signed session cookie, issuing one if absent."""
    session_id = request.session.get(PREVIEW_SESSION_KEY)
    if not session_id:
        session_id = uuid.uuid4().hex
        request.session[PREVIEW_SESSION_KEY] = session_id
    return session_id


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_preview_store(request: Request) -> ValidationSessionStore:
    return request.app.state.preview_store


def get_reconciler(request: Request) -> ImportReconciler:
    return request.app.state.reconciler


def get_today(settings: Settings = Depends(get_app_settings)) -> date:
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def get_reference_period(today: date = Depends(get_today)) -> ReferencePeriod:
    return ReferencePeriod.from_date(today)


DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
PreviewSessionId = Annotated[str, Depends(get_preview_session_id)]
PreviewStore = Annotated[ValidationSessionStore, Depends(get_preview_store)]
Reconciler = Annotated[ImportReconciler, Depends(get_reconciler)]
Today = Annotated[date, Depends(get_today)]
Period = Annotated[ReferencePeriod, Depends(get_reference_period)]
