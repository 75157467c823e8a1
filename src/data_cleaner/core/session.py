"""
session.py
─────────────────────────────────────────────────────────────────────────────
Explicit per-user state: the active dataset with its schema and EDA.

Schema and EDA are always computed together from the same rows and stored in
one step. Every load or reset bumps a generation number; a computation that
started under an older generation is discarded on commit, so the latest
load always wins.
─────────────────────────────────────────────────────────────────────────────
"""

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from data_cleaner.core.eda import compute_eda
from data_cleaner.core.schema import infer_schema
from data_cleaner.models import Dataset, DatasetSchema, EdaSummary
from data_cleaner.utils.exceptions import NoDatasetError
from data_cleaner.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    generation: int
    dataset: Dataset
    schema: DatasetSchema
    eda: EdaSummary


def analyze(dataset: Dataset) -> tuple[DatasetSchema, EdaSummary]:
    schema = infer_schema(dataset.rows, dataset.columns)
    return schema, compute_eda(dataset.rows, schema)


class DataSession:
    """Owns the active dataset for one user; safe to share between threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0
        self._current: Optional[SessionSnapshot] = None
        self._original: Optional[SessionSnapshot] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loaded(self) -> bool:
        return self._current is not None

    def begin(self) -> int:
        """Start a new load and return its generation tag."""
        with self._lock:
            self._generation += 1
            return self._generation

    def commit(self, generation: int, dataset: Dataset) -> Optional[SessionSnapshot]:
        """
        Analyse ``dataset`` and store it if ``generation`` is still the latest.

        Args:
            generation: Tag returned by begin().
            dataset: Rows to analyse.

        Returns:
            The stored snapshot, or None when a newer load or reset superseded this one.
        """
        schema, eda = analyze(dataset)
        with self._lock:
            if generation != self._generation:
                logger.info(f"Discarding stale result for generation {generation} (current {self._generation})")
                return None
            snapshot = SessionSnapshot(generation, dataset, schema, eda)
            self._current = self._original = snapshot
        logger.info(
            f"Loaded '{dataset.source}' as generation {generation}: "
            f"{len(dataset.rows)} rows, {len(dataset.columns)} columns"
        )
        return snapshot

    def load(self, dataset: Dataset) -> Optional[SessionSnapshot]:
        """Begin and commit in one step; None only if another load overtook this one."""
        return self.commit(self.begin(), dataset)

    def replace(self, dataset: Dataset, base_generation: Optional[int] = None) -> Optional[SessionSnapshot]:
        """
        Load a derived dataset (e.g. cleaned output), keeping the original snapshot.

        When ``base_generation`` is given and the session moved on since then,
        the dataset is discarded and None is returned.
        """
        schema, eda = analyze(dataset)
        with self._lock:
            if base_generation is not None and base_generation != self._generation:
                logger.info(f"Discarding result derived from generation {base_generation} (current {self._generation})")
                return None
            self._generation += 1
            snapshot = SessionSnapshot(self._generation, dataset, schema, eda)
            self._current = snapshot
            if self._original is None:
                self._original = snapshot
        logger.info(f"Replaced active dataset with '{dataset.source}' as generation {snapshot.generation}")
        return snapshot

    def reset(self) -> None:
        with self._lock:
            self._generation += 1
            self._current = None
            self._original = None
        logger.info("Session reset")

    def snapshot(self) -> Optional[SessionSnapshot]:
        return self._current

    @property
    def original(self) -> Optional[SessionSnapshot]:
        return self._original

    def require(self) -> SessionSnapshot:
        snapshot = self._current
        if snapshot is None:
            raise NoDatasetError()
        return snapshot


class SessionStore:
    """Sessions keyed by client-supplied session id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, DataSession] = {}

    def get_or_create(self, session_id: str) -> DataSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = DataSession()
                self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> Optional[DataSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
