"""Exactly-once upvotes per (user, lesson)."""

import logging
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from src.errors import AlreadyUpvotedError, LessonNotFoundError
from src.logger import get_logger
from src.store import LessonRow, UpvoteRow

lessons = LessonRow.__table__
lesson_upvotes = UpvoteRow.__table__


class UpvoteCoordinator:
    """Records a vote and increments the lesson counter as one transaction.

    The counter is incremented in SQL and the vote insert relies on the
    (user_id, lesson_id) unique constraint, so a concurrent duplicate fails
    and rolls back its increment.
    """

    def __init__(self, engine: Engine, logger: Optional[logging.Logger] = None):
        self.engine = engine
        self.logger = logger or get_logger()

    def upvote(self, user_id: str, lesson_id: str) -> None:
        """
        Upvote a lesson on behalf of a user.

        Raises:
            LessonNotFoundError: If the lesson does not exist
            AlreadyUpvotedError: If the user has already upvoted it
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(lessons)
                    .where(lessons.c.id == lesson_id)
                    .values(upvotes=lessons.c.upvotes + 1)
                )
                if result.rowcount == 0:
                    raise LessonNotFoundError(f"Lesson not found: {lesson_id}")
                conn.execute(insert(lesson_upvotes).values(user_id=user_id, lesson_id=lesson_id))
        except IntegrityError as e:
            self.logger.info(f"  User {user_id} already upvoted lesson {lesson_id}")
            raise AlreadyUpvotedError(
                f"User {user_id} has already upvoted lesson {lesson_id}"
            ) from e

        self.logger.info(f"  User {user_id} upvoted lesson {lesson_id}")

    def has_upvoted(self, user_id: str, lesson_id: str) -> bool:
        stmt = select(lesson_upvotes.c.id).where(
            lesson_upvotes.c.user_id == user_id, lesson_upvotes.c.lesson_id == lesson_id
        )
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None
