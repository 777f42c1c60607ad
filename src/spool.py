"""File spool for validated lessons whose save failed."""

import fcntl
import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

import config
from src.errors import PersistenceError
from src.models import (
    DifficultyProfile,
    PersistedLesson,
    SpoolData,
    UnsavedLesson,
    ValidatedLesson,
)
from src.store import LessonStore


class UnsavedLessonSpool:
    """Keeps unsaved lessons on disk until an explicit flush stores them."""

    def __init__(self, spool_path: Path = config.UNSAVED_LESSONS_JSON):
        """
        Initialize the spool.

        Args:
            spool_path: Path to the spool JSON file
        """
        self.spool_path = spool_path
        self._lock_path = spool_path.with_suffix(".lock")

    @contextmanager
    def _file_lock(self):
        """Context manager for file locking using fcntl."""
        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._lock_path, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _read(self) -> SpoolData:
        if not self.spool_path.exists():
            return SpoolData()
        with open(self.spool_path, "r", encoding="utf-8") as f:
            return SpoolData(**json.load(f))

    def _write(self, data: SpoolData) -> None:
        self.spool_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.spool_path, "w", encoding="utf-8") as f:
            json.dump(data.model_dump(mode="json"), f, ensure_ascii=False, indent=2)

    def add(
        self,
        user_id: str,
        profile: DifficultyProfile,
        lesson: ValidatedLesson,
        error: str,
    ) -> UnsavedLesson:
        """Append an unsaved lesson to the spool."""
        entry = UnsavedLesson(
            user_id=user_id,
            profile=profile,
            lesson=lesson,
            error=error,
            failed_at=datetime.now(timezone.utc),
        )
        with self._file_lock():
            data = self._read()
            data.entries.append(entry)
            self._write(data)
        return entry

    def pending(self) -> list[UnsavedLesson]:
        """Return the lessons still waiting to be saved."""
        with self._file_lock():
            return self._read().entries

    def flush(self, store: LessonStore) -> tuple[list[PersistedLesson], list[UnsavedLesson]]:
        """
        Try to save every spooled lesson once.

        Args:
            store: Lesson store to save into

        Returns:
            Tuple of (saved lessons, entries that failed again and stay spooled)
        """
        saved = []
        remaining = []
        with self._file_lock():
            for entry in self._read().entries:
                try:
                    saved.append(store.save(entry.lesson, entry.user_id, entry.profile))
                except PersistenceError as e:
                    remaining.append(entry.model_copy(update={"error": str(e)}))
            self._write(SpoolData(entries=remaining))
        return saved, remaining

    def clear(self) -> None:
        """Drop every spooled lesson."""
        with self._file_lock():
            if self.spool_path.exists():
                self.spool_path.unlink()

    @property
    def pending_count(self) -> int:
        return len(self.pending())
