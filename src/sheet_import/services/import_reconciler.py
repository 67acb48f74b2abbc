"""Commit one previewed sheet to the database

The sheet is checked out of the session store first, so a concurrent import or
row deletion on the same sheet sees SheetNotFound. If saving fails, times out
or is cancelled, the sheet goes back into the session and the import can be
retried without uploading the file again.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.sheet_import.errors import PersistenceError
from src.sheet_import.schemas.preview import SheetOutcome
from src.sheet_import.services.audit import log_action
from src.sheet_import.services.record_repository import RecordRepository
from src.sheet_import.services.session_store import SheetCheckout, ValidationSessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportSummary:
    sheet_name: str
    imported_count: int
    skipped_count: int
    record_ids: List[int] = field(default_factory=list)


class ImportReconciler:
    def __init__(
        self,
        store: ValidationSessionStore,
        session_factory: Callable[[], Session],
        timeout_seconds: Optional[float] = 30.0
    ):
        self.store = store
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    async def commit(self, session_id: str, sheet_name: str) -> ImportSummary:
        """Persist the valid rows of a sheet and drop it from the session.

        Raises:
            SessionNotFound, SheetNotFound: nothing to import
            PersistenceError: the database rejected the rows or did not answer in time
        """
        checkout = self.store.checkout_sheet(session_id, sheet_name)
        outcome = checkout.outcome
        skipped = len(outcome.invalid_rows)

        if not outcome.valid_rows:
            logger.info(f"Sheet '{sheet_name}' has no valid rows; skipped {skipped}")
            return ImportSummary(sheet_name=sheet_name, imported_count=0, skipped_count=skipped)

        abandoned = threading.Event()
        try:
            record_ids = await asyncio.wait_for(
                asyncio.to_thread(self._persist, session_id, outcome, abandoned),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            self._rollback(checkout, abandoned, "timed out")
            raise PersistenceError(
                f"Saving sheet '{sheet_name}' timed out after {self.timeout_seconds}s"
            ) from e
        except PersistenceError:
            self._rollback(checkout, abandoned, "failed")
            raise
        except BaseException:
            self._rollback(checkout, abandoned, "was interrupted")
            raise

        logger.info(
            f"Imported {len(record_ids)} row(s) from sheet '{sheet_name}', skipped {skipped}"
        )
        return ImportSummary(
            sheet_name=sheet_name,
            imported_count=len(record_ids),
            skipped_count=skipped,
            record_ids=record_ids
        )

    def _rollback(self, checkout: SheetCheckout, abandoned: threading.Event, reason: str) -> None:
        abandoned.set()
        restored = self.store.restore_sheet(checkout)
        logger.error(
            f"Import of sheet '{checkout.outcome.sheet_name}' {reason}; "
            f"preview {'restored' if restored else 'not restored'}"
        )

    def _persist(self, session_id: str, outcome: SheetOutcome, abandoned: threading.Event) -> List[int]:
        with self.session_factory() as db:
            try:
                saved = RecordRepository(db).insert_many(outcome.valid_rows, outcome.sheet_name)
                record_ids = [record.id for record in saved]
                log_action(
                    db,
                    action="sheet_imported",
                    target_type="imported_records",
                    meta={
                        "sheet": outcome.sheet_name,
                        "imported": len(record_ids),
                        "skipped": len(outcome.invalid_rows),
                    },
                    session_key=session_id,
                    commit=False
                )
                if abandoned.is_set():
                    db.rollback()
                    raise PersistenceError(f"Import of sheet '{outcome.sheet_name}' was abandoned")
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception(f"Database error while importing sheet '{outcome.sheet_name}'")
                raise PersistenceError(f"Error importing data: {e}") from e
        return record_ids
