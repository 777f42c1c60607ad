"""Tests for the hard and soft lesson checks."""

import pytest

from conftest import SAMPLE_LESSON, lesson_data
from src.errors import StructuralValidationError
from src.models import CandidateLesson, LessonTitle, ValidatedLesson
from src.validator import check_quiz_coverage, normalize_title, validate_lesson


def candidate(**overrides) -> CandidateLesson:
    return CandidateLesson.model_validate(lesson_data(**overrides))


class TestHardChecks:
    def test_consistent_lesson_has_no_warnings(self):
        lesson = validate_lesson(candidate())
        assert isinstance(lesson, ValidatedLesson)
        assert lesson.title == "朝ごはん"
        assert lesson.warnings == []

    @pytest.mark.parametrize("field", ["content_jp", "content_en"])
    def test_blank_content_rejected(self, field):
        with pytest.raises(StructuralValidationError, match=field):
            validate_lesson(candidate(**{field: "   "}))

    @pytest.mark.parametrize("field", ["title", "content_jp", "content_en", "vocabulary", "grammar", "quizzes"])
    def test_missing_field_rejected(self, field):
        data = lesson_data()
        del data[field]
        with pytest.raises(StructuralValidationError, match=field):
            validate_lesson(CandidateLesson.model_validate(data))

    def test_title_object_without_text_rejected(self):
        with pytest.raises(StructuralValidationError, match="title"):
            validate_lesson(candidate(title={"jp": "", "en": None}))

    def test_empty_lists_allowed(self):
        lesson = validate_lesson(candidate(vocabulary=[], grammar=[], quizzes=[]))
        assert lesson.vocabulary == []
        assert "comprehension quiz count out of range: 0 (expected 3-4)" in lesson.warnings

    def test_lists_missing_together_reported_together(self):
        data = lesson_data()
        del data["grammar"]
        del data["quizzes"]
        with pytest.raises(StructuralValidationError, match="grammar, quizzes"):
            validate_lesson(CandidateLesson.model_validate(data))


class TestSoftChecks:
    def test_missing_vocabulary_quiz_is_only_a_warning(self):
        quizzes = [q for q in SAMPLE_LESSON["quizzes"] if q.get("related_item") != "飲む"]
        lesson = validate_lesson(candidate(quizzes=quizzes))

        assert len(lesson.vocabulary) == 2
        assert "vocabulary quiz count mismatch: 1 quizzes for 2 words" in lesson.warnings
        assert "missing quiz for vocabulary word: 飲む" in lesson.warnings

    def test_missing_grammar_quiz_is_only_a_warning(self):
        grammar = [
            {
                "pattern": "〜てください",
                "explanation": "Please do ~",
                "example": "食べてください。",
                "example_translation": "Please eat.",
            }
        ]
        lesson = validate_lesson(candidate(grammar=grammar))
        assert "missing quiz for grammar pattern: 〜てください" in lesson.warnings
        assert "grammar quiz count mismatch" not in " ".join(lesson.warnings)

    def test_grammar_count_mismatch(self):
        quizzes = [q for q in SAMPLE_LESSON["quizzes"] if q["type"] != "grammar"]
        lesson = validate_lesson(candidate(quizzes=quizzes))
        assert "grammar quiz count mismatch: 0 quizzes for 1 patterns" in lesson.warnings
        assert "missing quiz for grammar pattern: 〜を〜ます" in lesson.warnings

    def test_vocabulary_quiz_for_grammar_pattern_does_not_count(self):
        quizzes = [dict(q) for q in SAMPLE_LESSON["quizzes"]]
        quizzes[2]["type"] = "vocabulary"
        lesson = validate_lesson(candidate(quizzes=quizzes))
        assert "missing quiz for grammar pattern: 〜を〜ます" in lesson.warnings
        assert "vocabulary quiz count mismatch: 3 quizzes for 2 words" in lesson.warnings

    def test_title_prefers_japanese(self):
        assert normalize_title(LessonTitle(jp="朝ごはん", en="Breakfast")) == "朝ごはん"

    def test_title_falls_back_to_english(self):
        assert normalize_title(LessonTitle(en="Breakfast")) == "Breakfast"

    def test_english_only_title_object_accepted(self):
        assert validate_lesson(candidate(title={"en": "Breakfast"})).title == "Breakfast"

    def test_title_object_with_unknown_keys_rejected(self):
        with pytest.raises(StructuralValidationError, match="title"):
            validate_lesson(candidate(title={"ja": "朝ごはん", "english": "Breakfast"}))

    def test_string_title_kept(self):
        assert validate_lesson(candidate(title=" 朝ごはん ")).title == "朝ごはん"


class TestCheckQuizCoverage:
    def test_duplicate_vocabulary_reported(self):
        data = lesson_data()
        data["vocabulary"].append(dict(data["vocabulary"][0]))
        lesson = CandidateLesson.model_validate(data)
        warnings = check_quiz_coverage(lesson.vocabulary, lesson.grammar, lesson.quizzes)
        assert "duplicate vocabulary word: パン" in warnings
        assert warnings.count("missing quiz for vocabulary word: パン") == 0

    def test_option_count_reported(self):
        data = lesson_data()
        data["quizzes"][3]["options"] = ["Bread", "Rice"]
        lesson = CandidateLesson.model_validate(data)
        warnings = check_quiz_coverage(lesson.vocabulary, lesson.grammar, lesson.quizzes)
        assert warnings == ["quiz 4 has 2 options, expected 4"]

    def test_too_many_comprehension_quizzes(self):
        data = lesson_data()
        data["quizzes"].extend([dict(data["quizzes"][3]), dict(data["quizzes"][3])])
        lesson = CandidateLesson.model_validate(data)
        warnings = check_quiz_coverage(lesson.vocabulary, lesson.grammar, lesson.quizzes)
        assert warnings == ["comprehension quiz count out of range: 5 (expected 3-4)"]

    def test_related_item_whitespace_ignored(self):
        data = lesson_data()
        data["quizzes"][0]["related_item"] = " パン "
        lesson = CandidateLesson.model_validate(data)
        assert check_quiz_coverage(lesson.vocabulary, lesson.grammar, lesson.quizzes) == []
