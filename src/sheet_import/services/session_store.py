"""In-process store of validation previews, one ValidationSession per session key

Every operation on a key runs under that key's lock, so replace, remove_row and
consume_sheet never interleave for the same session while different sessions
proceed independently. Callers only ever receive copies of the stored outcomes.
"""
import itertools
import logging
import threading
import time
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from src.sheet_import.errors import RowNotFound, SessionNotFound, SheetNotFound
from src.sheet_import.schemas.preview import SheetOutcome

logger = logging.getLogger(__name__)


class _KeyLock:
    def __init__(self) -> None:
        self.lock = threading.Lock()


@dataclass
class _SessionEntry:
    outcomes: List[SheetOutcome]
    generation: int
    touched_at: float


@dataclass(frozen=True)
class SheetCheckout:
    """A sheet taken out of a session, with enough context to put it back."""
    session_id: str
    outcome: SheetOutcome
    position: int
    generation: int


def _copy(outcome: SheetOutcome) -> SheetOutcome:
    return outcome.model_copy(deep=True)


def _find_sheet(outcomes: List[SheetOutcome], sheet_name: str) -> int:
    for idx, outcome in enumerate(outcomes):
        if outcome.sheet_name == sheet_name:
            return idx
    raise SheetNotFound(sheet_name)


class ValidationSessionStore:
    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, _SessionEntry] = {}
        self._key_locks: "weakref.WeakValueDictionary[str, _KeyLock]" = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()
        self._generations = itertools.count(1)

    @contextmanager
    def _locked(self, session_id: str) -> Iterator[None]:
        with self._registry_lock:
            key_lock = self._key_locks.get(session_id)
            if key_lock is None:
                key_lock = _KeyLock()
                self._key_locks[session_id] = key_lock
        with key_lock.lock:
            yield

    def _is_expired(self, entry: _SessionEntry) -> bool:
        if self._ttl_seconds is None:
            return False
        return self._clock() - entry.touched_at > self._ttl_seconds

    def _entry(self, session_id: str) -> _SessionEntry:
        """Return the live entry for a key. Caller holds the key lock."""
        entry = self._sessions.get(session_id)
        if entry is not None and self._is_expired(entry):
            self._drop(session_id)
            entry = None
        if entry is None:
            raise SessionNotFound(session_id)
        entry.touched_at = self._clock()
        return entry

    def _drop(self, session_id: str) -> None:
        with self._registry_lock:
            self._sessions.pop(session_id, None)

    def replace(self, session_id: str, outcomes: Sequence[SheetOutcome]) -> None:
        names = [o.sheet_name for o in outcomes]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate sheet names in validation pass: {names}")

        entry = _SessionEntry(
            outcomes=[_copy(o) for o in outcomes],
            generation=next(self._generations),
            touched_at=self._clock()
        )
        with self._locked(session_id):
            with self._registry_lock:
                self._sessions[session_id] = entry
        logger.info(f"Stored preview with {len(names)} sheet(s) for session {session_id[:8]}")

    def put_sheet(self, session_id: str, outcome: SheetOutcome) -> None:
        with self._locked(session_id):
            try:
                entry = self._entry(session_id)
            except SessionNotFound:
                entry = _SessionEntry(
                    outcomes=[],
                    generation=next(self._generations),
                    touched_at=self._clock()
                )
                with self._registry_lock:
                    self._sessions[session_id] = entry
            try:
                idx = _find_sheet(entry.outcomes, outcome.sheet_name)
                entry.outcomes[idx] = _copy(outcome)
            except SheetNotFound:
                entry.outcomes.append(_copy(outcome))

    def get(self, session_id: str) -> List[SheetOutcome]:
        with self._locked(session_id):
            entry = self._entry(session_id)
            return [_copy(o) for o in entry.outcomes]

    def get_sheet(self, session_id: str, sheet_name: str) -> SheetOutcome:
        with self._locked(session_id):
            entry = self._entry(session_id)
            return _copy(entry.outcomes[_find_sheet(entry.outcomes, sheet_name)])

    def remove_row(self, session_id: str, sheet_name: str, row_number: int) -> SheetOutcome:
        with self._locked(session_id):
            entry = self._entry(session_id)
            outcome = entry.outcomes[_find_sheet(entry.outcomes, sheet_name)]

            for rows in (outcome.valid_rows, outcome.invalid_rows):
                for idx, record in enumerate(rows):
                    if record.row_number == row_number:
                        del rows[idx]
                        logger.info(
                            f"Removed row {row_number} from sheet '{sheet_name}' "
                            f"(session {session_id[:8]})"
                        )
                        return _copy(outcome)

            raise RowNotFound(sheet_name, row_number)

    def checkout_sheet(self, session_id: str, sheet_name: str) -> SheetCheckout:
        with self._locked(session_id):
            entry = self._entry(session_id)
            idx = _find_sheet(entry.outcomes, sheet_name)
            outcome = entry.outcomes.pop(idx)
            return SheetCheckout(
                session_id=session_id,
                outcome=outcome,
                position=idx,
                generation=entry.generation
            )

    def consume_sheet(self, session_id: str, sheet_name: str) -> SheetOutcome:
        return self.checkout_sheet(session_id, sheet_name).outcome

    def restore_sheet(self, checkout: SheetCheckout) -> bool:
        """Put a checked-out sheet back where it was.

        Skipped when the session has since expired or been replaced by a new
        upload, or when a sheet of the same name is already present.
        """
        sheet_name = checkout.outcome.sheet_name
        with self._locked(checkout.session_id):
            try:
                entry = self._entry(checkout.session_id)
            except SessionNotFound:
                logger.warning(f"Cannot restore sheet '{sheet_name}': session is gone")
                return False

            if entry.generation != checkout.generation:
                logger.warning(f"Cannot restore sheet '{sheet_name}': session was replaced")
                return False
            if any(o.sheet_name == sheet_name for o in entry.outcomes):
                logger.warning(f"Cannot restore sheet '{sheet_name}': name already in use")
                return False

            position = min(checkout.position, len(entry.outcomes))
            entry.outcomes.insert(position, _copy(checkout.outcome))
            logger.info(f"Restored sheet '{sheet_name}' (session {checkout.session_id[:8]})")
            return True

    def discard(self, session_id: str) -> bool:
        with self._locked(session_id):
            with self._registry_lock:
                return self._sessions.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        with self._registry_lock:
            session_ids = list(self._sessions)

        purged = 0
        for session_id in session_ids:
            with self._locked(session_id):
                entry = self._sessions.get(session_id)
                if entry is not None and self._is_expired(entry):
                    self._drop(session_id)
                    purged += 1

        if purged:
            logger.info(f"Purged {purged} expired preview session(s)")
        return purged

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._sessions)
