"""Stage 5: Result Extractor. Turn the assembled content into a GenerationResult.

Models wrap JSON inconsistently, so three readings are tried in order:
  1. the text as-is
  2. the body of the first ```json fenced block (prose before it is tolerated)
  3. the first balanced {...} span in the text
The first reading that parses wins. Nothing parses → ExtractionFailed; it
parses but is not the four-string-field object → MalformedPayload.
"""
import json
import logging
import re

from pydantic import ValidationError

from models.generation import GenerationResult
from pipeline.errors import ExtractionFailed, MalformedPayload

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[\w-]*[ \t]*\r?\n?(.*?)```", re.DOTALL)


def extract(content_text: str, expected_word: str | None = None) -> GenerationResult:
    """Parse and validate the model's final answer."""
    if not content_text or not content_text.strip():
        raise MalformedPayload("upstream returned no content")

    payload = _parse_json(content_text)
    if not isinstance(payload, dict):
        raise MalformedPayload(
            f"expected a JSON object, got {type(payload).__name__}",
            snippet=content_text,
        )

    try:
        result = GenerationResult.model_validate(payload)
    except ValidationError as exc:
        missing = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise MalformedPayload(
            f"invalid or missing fields: {', '.join(missing)}",
            snippet=content_text,
        ) from exc

    if expected_word and result.english_word.strip().lower() != expected_word.strip().lower():
        logger.warning(
            "Model returned word %r for requested %r; keeping the model's value.",
            result.english_word, expected_word,
        )
    return result


# ---------------------------------------------------------------------------
# Readings
# ---------------------------------------------------------------------------

def _parse_json(text: str) -> object:
    for candidate in _candidates(text):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    raise ExtractionFailed("no JSON object found in model output", snippet=text)


def _candidates(text: str):
    yield text.strip()

    fenced = _strip_fence(text)
    if fenced is not None:
        yield fenced

    span = _balanced_object(text)
    if span is not None:
        yield span


def _strip_fence(text: str) -> str | None:
    """Body of the first fenced block, or None when there is none."""
    match = _FENCE_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def _balanced_object(text: str) -> str | None:
    """First `{...}` span whose braces balance, ignoring braces inside strings."""
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None
