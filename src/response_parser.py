"""Parsing of raw model replies into candidate lessons."""

import json
import re

from pydantic import ValidationError

from src.errors import MalformedResponseError, StructuralValidationError
from src.models import CandidateLesson

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*([\s\S]*?)\s*```\s*$")
_NEWLINES = re.compile(r"[\r\n]+")
_WHITESPACE = re.compile(r"\s+")


def repair_json_text(text: str) -> str:
    """
    Apply the single repair pass to a reply that failed to parse.

    Strips a surrounding Markdown code fence, then collapses newline runs
    and whitespace runs to single spaces (raw newlines inside JSON strings
    are invalid).
    """
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    text = _NEWLINES.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def _load_json(text: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    repaired = repair_json_text(text)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Failed to parse model response as JSON: {e} (response starts: {text[:200]!r})"
        ) from e


def parse_response(text: str) -> CandidateLesson:
    """
    Parse raw model text into a CandidateLesson.

    Args:
        text: Raw reply from the generation port

    Returns:
        CandidateLesson; top-level fields the reply omits are None

    Raises:
        MalformedResponseError: If the reply is not a JSON object after repair
        StructuralValidationError: If the object does not fit the lesson schema
    """
    data = _load_json(text)

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}"
        )

    try:
        return CandidateLesson.model_validate(data)
    except ValidationError as e:
        raise StructuralValidationError(f"Response does not match lesson schema: {e}") from e
