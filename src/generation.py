"""Lesson generation: prompt, model call, parse and validate under a bounded retry loop."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

import config
from src.errors import ExhaustedRetriesError, GenerationCancelledError, LessonGenerationError
from src.logger import get_logger
from src.models import DifficultyProfile, ValidatedLesson
from src.openai_client import GenerationPort
from src.prompt_builder import build_prompts
from src.response_parser import parse_response
from src.validator import validate_lesson


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and fixed backoff between attempts.

    `sleep` is awaited between attempts; tests pass a recorder so no real
    time passes.
    """

    max_attempts: int = config.MAX_ATTEMPTS
    backoff_seconds: float = config.RETRY_BACKOFF_SECONDS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must not be negative")


async def attempt_generation(
    profile: DifficultyProfile,
    client: GenerationPort,
    logger: logging.Logger,
) -> ValidatedLesson:
    """
    Run one full attempt, starting from prompt construction.

    Raises:
        InvocationError, MalformedResponseError, StructuralValidationError
    """
    system_prompt, user_prompt = build_prompts(profile)
    raw = await client.generate(system_prompt, user_prompt)
    candidate = parse_response(raw)
    lesson = validate_lesson(candidate)

    logger.info(
        f"  Quizzes: {len(lesson.quizzes)} for {len(lesson.vocabulary)} words "
        f"and {len(lesson.grammar)} grammar points"
    )
    for warning in lesson.warnings:
        logger.warning(f"  Warning: {warning}")

    return lesson


def _log_before_retry(logger: logging.Logger, max_attempts: int):
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            f"  Attempt {retry_state.attempt_number}/{max_attempts} failed: {error}"
        )
        logger.info(f"  Waiting {retry_state.next_action.sleep:.1f}s before retrying...")

    return before_sleep


async def _generate_with_retries(
    profile: DifficultyProfile,
    client: GenerationPort,
    policy: RetryPolicy,
    logger: logging.Logger,
) -> ValidatedLesson:
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_fixed(policy.backoff_seconds),
        retry=retry_if_exception_type(LessonGenerationError),
        sleep=policy.sleep,
        before_sleep=_log_before_retry(logger, policy.max_attempts),
    )

    try:
        async for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                logger.info(f"  Attempt {number}/{policy.max_attempts}: generating lesson...")
                lesson = await attempt_generation(profile, client, logger)
                logger.info(f"  Attempt {number}/{policy.max_attempts}: lesson validated: {lesson.title}")
                return lesson
    except RetryError as e:
        cause = e.last_attempt.exception()
        logger.error(f"  All {policy.max_attempts} attempts failed. Last error: {cause}")
        raise ExhaustedRetriesError(policy.max_attempts, cause) from cause


async def generate_lesson(
    profile: DifficultyProfile,
    client: GenerationPort,
    *,
    policy: Optional[RetryPolicy] = None,
    logger: Optional[logging.Logger] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> ValidatedLesson:
    """
    Generate a validated lesson for a difficulty profile.

    Args:
        profile: Leveling values, topic and length
        client: Generation port (the model)
        policy: Attempt budget and backoff. Defaults to config values.
        logger: Logger to report progress to. Defaults to the pipeline logger.
        timeout: Seconds before generation is abandoned
        cancel_event: Setting this event abandons generation immediately

    Returns:
        ValidatedLesson, possibly carrying soft-check warnings

    Raises:
        ExhaustedRetriesError: If every attempt failed
        GenerationCancelledError: If the timeout elapsed or cancel_event was set
    """
    policy = policy or RetryPolicy()
    logger = logger or get_logger()

    logger.info(
        f"Generating lesson: WK {profile.wanikani_level}, GK {profile.genki_chapter}, "
        f"TK {profile.tadoku_level}, Length: {profile.length.value}, Topic: {profile.topic}"
    )

    run = asyncio.ensure_future(_generate_with_retries(profile, client, policy, logger))
    waiters = {run}
    stop = None
    if cancel_event is not None:
        stop = asyncio.ensure_future(cancel_event.wait())
        waiters.add(stop)

    try:
        done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    finally:
        if stop is not None:
            stop.cancel()
        if not run.done():
            run.cancel()

    if run in done:
        return run.result()

    # The in-flight attempt is unwound before reporting.
    await asyncio.gather(run, return_exceptions=True)
    reason = "cancelled by caller" if stop in done else f"timed out after {timeout}s"
    logger.warning(f"  Lesson generation {reason}")
    raise GenerationCancelledError(f"Lesson generation {reason}")
