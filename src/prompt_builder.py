"""Prompt construction for lesson generation."""

from functools import lru_cache
from pathlib import Path

import config
from src.models import DifficultyProfile


@lru_cache(maxsize=None)
def load_prompt_template(path: Path) -> str:
    """Load a prompt template from file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def build_system_prompt(path: Path = config.SYSTEM_PROMPT_TEMPLATE) -> str:
    """Return the role and task framing for the model."""
    return load_prompt_template(path).strip()


def build_user_prompt(
    profile: DifficultyProfile,
    path: Path = config.USER_PROMPT_TEMPLATE,
) -> str:
    """
    Fill the user prompt template with the profile's leveling values.

    Args:
        profile: Difficulty profile for the request
        path: Template file to use

    Returns:
        Prompt text including the JSON output schema
    """
    template = load_prompt_template(path)
    return template.format(
        wanikani_level=profile.wanikani_level,
        genki_chapter=profile.genki_chapter,
        tadoku_level=profile.tadoku_level,
        length=profile.length.value,
        topic=profile.topic,
        option_count=config.QUIZ_OPTION_COUNT,
    ).strip()


def build_prompts(profile: DifficultyProfile) -> tuple[str, str]:
    """
    Build the (system, user) prompt pair for a profile.

    Identical profiles always produce identical prompts, so retries only
    differ by the model's own sampling.
    """
    return build_system_prompt(), build_user_prompt(profile)
