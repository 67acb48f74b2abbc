# Shared pytest fixtures
from __future__ import annotations

import io
from datetime import date
from typing import Callable

import pandas as pd
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.sheet_import.api.deps import get_today
from src.sheet_import.config import Settings
from src.sheet_import.main import create_app
from src.sheet_import.models import Base
from src.sheet_import.services.row_validator import ReferencePeriod

REFERENCE_DAY = date(2024, 3, 15)


@pytest.fixture()
def period() -> ReferencePeriod:
    return ReferencePeriod.from_date(REFERENCE_DAY)


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def build_xlsx(sheets: dict[str, list[list[object]]]) -> bytes:
    """Write each sheet's rows verbatim (first row = header row)."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return buffer.getvalue()


@pytest.fixture()
def make_xlsx() -> Callable[[dict[str, list[list[object]]]], bytes]:
    return build_xlsx


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        SCHEDULER_ENABLED=False,
        SESSION_SECRET_KEY="test-secret",
        IMPORT_TIMEOUT_SECONDS=5,
    )


@pytest.fixture()
def app(test_settings, session_factory):
    application = create_app(settings=test_settings, session_factory=session_factory)
    application.dependency_overrides[get_today] = lambda: REFERENCE_DAY
    return application


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)
