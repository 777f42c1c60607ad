"""Pydantic data models for the graded reader generation pipeline."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LessonLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class QuizType(str, Enum):
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    COMPREHENSION = "comprehension"


class DifficultyProfile(BaseModel):
    """Leveling axes, topic and length for one generation request."""

    model_config = ConfigDict(frozen=True)

    wanikani_level: int = Field(ge=0)
    genki_chapter: int = Field(ge=0)
    tadoku_level: Union[int, str]
    topic: str
    length: LessonLength = LessonLength.MEDIUM

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topic must not be blank")
        return value


def _none_as_empty(value):
    return "" if value is None else value


class VocabularyItem(BaseModel):
    """A vocabulary word taught by the lesson. Identity is `word`."""

    word: str
    reading: str = ""
    meaning: str = ""
    example: str = ""
    example_translation: str = ""

    @field_validator("reading", "meaning", "example", "example_translation", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return _none_as_empty(value)


class GrammarPoint(BaseModel):
    """A grammar pattern taught by the lesson. Identity is `pattern`."""

    pattern: str
    explanation: str = ""
    example: str = ""
    example_translation: str = ""

    @field_validator("explanation", "example", "example_translation", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return _none_as_empty(value)


class QuizItem(BaseModel):
    """A multiple choice question."""

    # counting questions come back with numeric options
    model_config = ConfigDict(coerce_numbers_to_str=True)

    type: QuizType
    question: str
    options: list[str]
    correct_answer: int
    explanation: str = ""
    related_item: Optional[str] = None  # word or pattern; None for comprehension

    @field_validator("explanation", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return _none_as_empty(value)

    @model_validator(mode="after")
    def answer_within_options(self) -> "QuizItem":
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(
                f"correct_answer {self.correct_answer} out of range for {len(self.options)} options"
            )
        return self


class LessonTitle(BaseModel):
    jp: Optional[str] = None
    en: Optional[str] = None


class CandidateLesson(BaseModel):
    """An unvalidated lesson read from the model reply. Missing fields are None."""

    title: Union[LessonTitle, str, None] = None
    content_jp: Optional[str] = None
    content_en: Optional[str] = None
    vocabulary: Optional[list[VocabularyItem]] = None
    grammar: Optional[list[GrammarPoint]] = None
    quizzes: Optional[list[QuizItem]] = None


class ValidatedLesson(BaseModel):
    """A lesson that passed the hard checks, with any soft-check warnings."""

    title: str
    content_jp: str
    content_en: str
    vocabulary: list[VocabularyItem] = Field(default_factory=list)
    grammar: list[GrammarPoint] = Field(default_factory=list)
    quizzes: list[QuizItem] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class PersistedLesson(ValidatedLesson):
    """A stored lesson with the identity and metadata assigned by the store."""

    id: str
    created_at: datetime
    user_id: str
    upvotes: int = 0
    wanikani_level: int
    genki_chapter: int
    tadoku_level: Union[int, str]
    topic: str


class UnsavedLesson(BaseModel):
    """A validated lesson whose save failed, kept for a later retry."""

    user_id: str
    profile: DifficultyProfile
    lesson: ValidatedLesson
    error: str
    failed_at: datetime


class SpoolData(BaseModel):
    """On-disk contents of the unsaved lesson spool."""

    entries: list[UnsavedLesson] = Field(default_factory=list)
