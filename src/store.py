"""SQLAlchemy-backed lesson store."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

import config
from src.errors import PersistenceError
from src.logger import get_logger
from src.models import DifficultyProfile, PersistedLesson, ValidatedLesson


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class LessonRow(Base):
    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content_jp: Mapped[str] = mapped_column(Text, nullable=False)
    content_en: Mapped[str] = mapped_column(Text, nullable=False)
    wanikani_level: Mapped[int] = mapped_column(Integer, nullable=False)
    genki_chapter: Mapped[int] = mapped_column(Integer, nullable=False)
    tadoku_level: Mapped[Union[int, str]] = mapped_column(JSON, nullable=False)
    topic: Mapped[str] = mapped_column(String, nullable=False)
    vocabulary: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    grammar: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    quizzes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class UpvoteRow(Base):
    __tablename__ = "lesson_upvotes"
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_upvotes_user_lesson"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    lesson_id: Mapped[str] = mapped_column(String(36), ForeignKey("lessons.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


def make_engine(url: str = config.DATABASE_URL) -> Engine:
    """Create an engine; SQLite waits on locks instead of failing immediately."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"timeout": config.SQLITE_BUSY_TIMEOUT, "check_same_thread": False},
        )
    return create_engine(url, pool_pre_ping=True)


def _to_persisted(row: LessonRow) -> PersistedLesson:
    return PersistedLesson(
        id=row.id,
        created_at=row.created_at,
        user_id=row.user_id,
        title=row.title,
        content_jp=row.content_jp,
        content_en=row.content_en,
        wanikani_level=row.wanikani_level,
        genki_chapter=row.genki_chapter,
        tadoku_level=row.tadoku_level,
        topic=row.topic,
        vocabulary=row.vocabulary,
        grammar=row.grammar,
        quizzes=row.quizzes,
        upvotes=row.upvotes,
    )


class LessonStore:
    """Persists validated lessons and reads them back."""

    def __init__(self, engine: Engine, logger: Optional[logging.Logger] = None):
        self.engine = engine
        self.logger = logger or get_logger()

    def create_schema(self) -> None:
        """Create the lesson and upvote tables if they do not exist."""
        Base.metadata.create_all(self.engine)

    def save(
        self,
        lesson: ValidatedLesson,
        user_id: str,
        profile: DifficultyProfile,
        topic: Optional[str] = None,
    ) -> PersistedLesson:
        """
        Insert a validated lesson.

        Args:
            lesson: Lesson to store
            user_id: Owner of the lesson
            profile: Difficulty profile the lesson was generated for
            topic: Topic to record. Defaults to the profile's topic.

        Returns:
            PersistedLesson with the store-assigned id and created_at

        Raises:
            PersistenceError: If the insert fails. The lesson is attached.
        """
        row = LessonRow(
            user_id=user_id,
            title=lesson.title,
            content_jp=lesson.content_jp,
            content_en=lesson.content_en,
            wanikani_level=profile.wanikani_level,
            genki_chapter=profile.genki_chapter,
            tadoku_level=profile.tadoku_level,
            topic=topic or profile.topic,
            vocabulary=[v.model_dump() for v in lesson.vocabulary],
            grammar=[g.model_dump() for g in lesson.grammar],
            quizzes=[q.model_dump(mode="json") for q in lesson.quizzes],
            upvotes=0,
        )

        try:
            with Session(self.engine) as session, session.begin():
                session.add(row)
                session.flush()
                persisted = _to_persisted(row)
        except SQLAlchemyError as e:
            self.logger.error(f"  Error saving lesson '{lesson.title}': {e}")
            raise PersistenceError(f"Failed to save lesson: {e}", lesson) from e

        self.logger.info(f"  Lesson saved with ID: {persisted.id}")
        return persisted.model_copy(update={"warnings": lesson.warnings})

    def get_lesson(self, lesson_id: str) -> Optional[PersistedLesson]:
        """Return the stored lesson, or None if it does not exist."""
        with Session(self.engine) as session:
            row = session.get(LessonRow, lesson_id)
            return _to_persisted(row) if row else None

    def list_user_lessons(self, user_id: str) -> list[PersistedLesson]:
        """Return a user's lessons, newest first."""
        stmt = (
            select(LessonRow)
            .where(LessonRow.user_id == user_id)
            .order_by(LessonRow.created_at.desc())
        )
        with Session(self.engine) as session:
            return [_to_persisted(row) for row in session.scalars(stmt)]

    def recent_lessons(self, limit: int = 10) -> list[PersistedLesson]:
        """Return the most recently created lessons across all users."""
        stmt = select(LessonRow).order_by(LessonRow.created_at.desc()).limit(limit)
        with Session(self.engine) as session:
            return [_to_persisted(row) for row in session.scalars(stmt)]
