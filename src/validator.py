"""Structural (hard) and cross-reference (soft) checks for candidate lessons."""

from typing import Optional, Union

import config
from src.errors import StructuralValidationError
from src.models import (
    CandidateLesson,
    GrammarPoint,
    LessonTitle,
    QuizItem,
    QuizType,
    ValidatedLesson,
    VocabularyItem,
)


def normalize_title(title: Union[LessonTitle, str, None]) -> str:
    """Collapse a {jp, en} title to a single string, preferring Japanese."""
    if title is None:
        return ""
    if isinstance(title, LessonTitle):
        return (title.jp or "").strip() or (title.en or "").strip()
    return title.strip()


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _duplicates(values: list[str]) -> list[str]:
    seen = set()
    repeated = []
    for value in values:
        if value in seen and value not in repeated:
            repeated.append(value)
        seen.add(value)
    return repeated


def _unreferenced(keys: list[str], quizzes: list[QuizItem]) -> list[str]:
    referenced = {q.related_item.strip() for q in quizzes if q.related_item}
    missing = []
    for key in keys:
        if key.strip() not in referenced and key not in missing:
            missing.append(key)
    return missing


def check_quiz_coverage(
    vocabulary: list[VocabularyItem],
    grammar: list[GrammarPoint],
    quizzes: list[QuizItem],
) -> list[str]:
    """
    Compare vocabulary and grammar against the quizzes that should test them.

    Args:
        vocabulary: Lesson vocabulary
        grammar: Lesson grammar points
        quizzes: Lesson quizzes

    Returns:
        List of warning messages (empty if fully consistent)
    """
    warnings = []

    vocab_quizzes = [q for q in quizzes if q.type == QuizType.VOCABULARY]
    grammar_quizzes = [q for q in quizzes if q.type == QuizType.GRAMMAR]
    comprehension_count = sum(1 for q in quizzes if q.type == QuizType.COMPREHENSION)

    words = [v.word for v in vocabulary]
    patterns = [g.pattern for g in grammar]

    if len(vocab_quizzes) != len(vocabulary):
        warnings.append(
            f"vocabulary quiz count mismatch: {len(vocab_quizzes)} quizzes for {len(vocabulary)} words"
        )
    if len(grammar_quizzes) != len(grammar):
        warnings.append(
            f"grammar quiz count mismatch: {len(grammar_quizzes)} quizzes for {len(grammar)} patterns"
        )

    for word in _unreferenced(words, vocab_quizzes):
        warnings.append(f"missing quiz for vocabulary word: {word}")
    for pattern in _unreferenced(patterns, grammar_quizzes):
        warnings.append(f"missing quiz for grammar pattern: {pattern}")

    for word in _duplicates(words):
        warnings.append(f"duplicate vocabulary word: {word}")
    for pattern in _duplicates(patterns):
        warnings.append(f"duplicate grammar pattern: {pattern}")

    low, high = config.COMPREHENSION_QUIZ_RANGE
    if not low <= comprehension_count <= high:
        warnings.append(
            f"comprehension quiz count out of range: {comprehension_count} (expected {low}-{high})"
        )

    for i, quiz in enumerate(quizzes):
        if len(quiz.options) != config.QUIZ_OPTION_COUNT:
            warnings.append(
                f"quiz {i + 1} has {len(quiz.options)} options, expected {config.QUIZ_OPTION_COUNT}"
            )

    return warnings


def validate_lesson(candidate: CandidateLesson) -> ValidatedLesson:
    """
    Apply the hard checks, then collect soft-check warnings.

    Args:
        candidate: Parsed, untrusted lesson

    Returns:
        ValidatedLesson with a normalized title and its warning list

    Raises:
        StructuralValidationError: If a required field is missing or blank
    """
    title = normalize_title(candidate.title)

    missing = []
    if not title:
        missing.append("title")
    if _is_blank(candidate.content_jp):
        missing.append("content_jp")
    if _is_blank(candidate.content_en):
        missing.append("content_en")
    for field in ("vocabulary", "grammar", "quizzes"):
        if getattr(candidate, field) is None:
            missing.append(field)

    if missing:
        raise StructuralValidationError(
            f"Lesson is missing required fields: {', '.join(missing)}"
        )

    warnings = check_quiz_coverage(candidate.vocabulary, candidate.grammar, candidate.quizzes)

    return ValidatedLesson(
        title=title,
        content_jp=candidate.content_jp,
        content_en=candidate.content_en,
        vocabulary=candidate.vocabulary,
        grammar=candidate.grammar,
        quizzes=candidate.quizzes,
        warnings=warnings,
    )
