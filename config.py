"""Configuration settings for the graded reader generation pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"
PROMPTS_DIR = PROJECT_ROOT / "prompts"
LOGS_DIR = PROJECT_ROOT / "logs"

load_dotenv(PROJECT_ROOT / ".env")

# Storage
DATABASE_URL = os.environ.get(
    "GRADED_READER_DATABASE_URL", f"sqlite:///{DATA_DIR / 'graded_reader.db'}"
)
SQLITE_BUSY_TIMEOUT = 30  # seconds
UNSAVED_LESSONS_JSON = DATA_DIR / "unsaved_lessons.json"

# Prompt templates
SYSTEM_PROMPT_TEMPLATE = PROMPTS_DIR / "lesson_system.txt"
USER_PROMPT_TEMPLATE = PROMPTS_DIR / "lesson_user.txt"

# OpenAI settings
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
OPENAI_MODEL = os.environ.get("GRADED_READER_MODEL", "gpt-4-turbo-preview")
OPENAI_TEMPERATURE = 0.7
OPENAI_TIMEOUT = 180  # seconds
OPENAI_CONNECT_TIMEOUT = 10  # seconds

# Retry settings
MAX_ATTEMPTS = 3
RETRY_BACKOFF_SECONDS = 1.0

# Lesson shape
DEFAULT_LENGTH = "medium"
QUIZ_OPTION_COUNT = 4
COMPREHENSION_QUIZ_RANGE = (3, 4)

# Progress display
PROGRESS_RATE = 5.0  # percent per second
PROGRESS_CEILING = 90
PROGRESS_INTERVAL = 1.0  # seconds
