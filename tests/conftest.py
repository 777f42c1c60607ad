"""Shared fixtures: sample lessons, a scripted generation port, a temporary store."""

import copy
import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.generation import RetryPolicy  # noqa: E402
from src.models import DifficultyProfile, LessonLength  # noqa: E402
from src.store import LessonStore, make_engine  # noqa: E402


SAMPLE_LESSON = {
    "title": {"jp": "朝ごはん", "en": "Breakfast"},
    "content_jp": "毎朝、私はパンを食べます。それから、コーヒーを飲みます。",
    "content_en": "Every morning I eat bread. Then I drink coffee.",
    "vocabulary": [
        {
            "word": "パン",
            "reading": "ぱん",
            "meaning": "bread",
            "example": "私はパンを食べます。",
            "example_translation": "I eat bread.",
        },
        {
            "word": "飲む",
            "reading": "のむ",
            "meaning": "to drink",
            "example": "コーヒーを飲みます。",
            "example_translation": "I drink coffee.",
        },
    ],
    "grammar": [
        {
            "pattern": "〜を〜ます",
            "explanation": "Polite present tense with a direct object.",
            "example": "パンを食べます。",
            "example_translation": "I eat bread.",
        }
    ],
    "quizzes": [
        {
            "type": "vocabulary",
            "question": "What does パン mean?",
            "options": ["rice", "bread", "milk", "egg"],
            "correct_answer": 1,
            "explanation": "パン means bread.",
            "related_item": "パン",
        },
        {
            "type": "vocabulary",
            "question": "What does 飲む mean?",
            "options": ["to eat", "to see", "to drink", "to go"],
            "correct_answer": 2,
            "explanation": "飲む means to drink.",
            "related_item": "飲む",
        },
        {
            "type": "grammar",
            "question": "Which particle marks the direct object?",
            "options": ["は", "を", "に", "で"],
            "correct_answer": 1,
            "explanation": "を marks the direct object.",
            "related_item": "〜を〜ます",
        },
        {
            "type": "comprehension",
            "question": "What does the narrator eat?",
            "options": ["Bread", "Rice", "Fish", "Nothing"],
            "correct_answer": 0,
            "explanation": "パンを食べます。",
        },
        {
            "type": "comprehension",
            "question": "What does the narrator drink?",
            "options": ["Tea", "Water", "Juice", "Coffee"],
            "correct_answer": 3,
            "explanation": "コーヒーを飲みます。",
        },
        {
            "type": "comprehension",
            "question": "When does this happen?",
            "options": ["At night", "Every morning", "At lunch", "On Sundays"],
            "correct_answer": 1,
            "explanation": "毎朝 means every morning.",
        },
    ],
}


def lesson_data(**overrides) -> dict:
    """A deep copy of the sample lesson with top-level fields replaced."""
    data = copy.deepcopy(SAMPLE_LESSON)
    data.update(overrides)
    return data


def lesson_reply(**overrides) -> str:
    """The sample lesson as raw model reply text."""
    return json.dumps(lesson_data(**overrides), ensure_ascii=False)


def without(field: str) -> str:
    """The sample lesson reply with one top-level field removed."""
    data = lesson_data()
    del data[field]
    return json.dumps(data, ensure_ascii=False)


class FakeGenerationClient:
    """Scripted generation port.

    Each call consumes the next scripted reply; the last one repeats.
    Exceptions in the script are raised instead of returned.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


class SleepRecorder:
    """Collects requested backoff delays without waiting."""

    def __init__(self):
        self.delays = []

        async def sleep(seconds: float) -> None:
            self.delays.append(seconds)

        self.sleep = sleep


@pytest.fixture
def profile() -> DifficultyProfile:
    return DifficultyProfile(
        wanikani_level=5,
        genki_chapter=1,
        tadoku_level=0,
        topic="daily life",
        length=LessonLength.SHORT,
    )


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def policy(sleeps) -> RetryPolicy:
    return RetryPolicy(max_attempts=3, backoff_seconds=1.0, sleep=sleeps.sleep)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'lessons.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> LessonStore:
    store = LessonStore(engine)
    store.create_schema()
    return store
