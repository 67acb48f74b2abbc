"""Health check endpoint"""
from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    db_status = "unknown"
    try:
        with request.app.state.session_factory() as db:
            db.execute(text("SELECT 1"))
            db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "ok",
        "environment": request.app.state.settings.APP_ENV,
        "database": db_status,
        "preview_sessions": len(request.app.state.preview_store)
    }
