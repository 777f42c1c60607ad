"""Generate-then-save flow for one lesson request."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from src.errors import PersistenceError
from src.generation import generate_lesson
from src.logger import get_logger
from src.models import DifficultyProfile, PersistedLesson, ValidatedLesson
from src.openai_client import GenerationPort
from src.spool import UnsavedLessonSpool
from src.store import LessonStore


@dataclass
class LessonOutcome:
    """A generated lesson and, if the save succeeded, its stored form."""

    lesson: ValidatedLesson
    persisted: Optional[PersistedLesson] = None
    error: Optional[PersistenceError] = None

    @property
    def saved(self) -> bool:
        return self.persisted is not None


async def create_lesson(
    profile: DifficultyProfile,
    user_id: str,
    client: GenerationPort,
    store: LessonStore,
    *,
    spool: Optional[UnsavedLessonSpool] = None,
    logger: Optional[logging.Logger] = None,
    **generation_options,
) -> LessonOutcome:
    """
    Generate a lesson for a user and store it.

    A failed save does not discard the lesson: the outcome carries it,
    marked unsaved, and it is added to the spool when one is given.

    Args:
        profile: Difficulty profile for the request
        user_id: Owner of the lesson
        client: Generation port
        store: Lesson store
        spool: Optional spool for lessons whose save failed
        logger: Logger to report to
        **generation_options: Passed to generate_lesson (policy, timeout, cancel_event)

    Returns:
        LessonOutcome

    Raises:
        ExhaustedRetriesError: If generation failed on every attempt
        GenerationCancelledError: If generation was cancelled or timed out
    """
    logger = logger or get_logger()

    lesson = await generate_lesson(profile, client, logger=logger, **generation_options)
    logger.info(f"Lesson generated successfully, title: {lesson.title}")

    logger.info(f"Saving lesson to database for user {user_id}...")
    try:
        persisted = await asyncio.to_thread(store.save, lesson, user_id, profile)
    except PersistenceError as e:
        logger.error(f"Lesson was generated but not saved: {e}")
        if spool is not None:
            try:
                spool.add(user_id, profile, e.lesson, str(e))
                logger.info(f"  Lesson kept in spool: {spool.spool_path}")
            except OSError as spool_error:
                logger.error(f"  Could not write unsaved lesson to spool: {spool_error}")
        return LessonOutcome(lesson=e.lesson, error=e)

    return LessonOutcome(lesson=lesson, persisted=persisted)
