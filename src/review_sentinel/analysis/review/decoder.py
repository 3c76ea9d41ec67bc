"""Recovery of the structured review payload from raw model output.

The model is told to answer with one bare JSON object, but replies regularly
arrive wrapped in markdown fences or preceded by prose. ``decode_response``
tries an ordered list of strategies and returns the first JSON object any of
them yields:

1. ``direct``         - the whole text
2. ``json_fence``     - interior of the first ```json fence
3. ``any_fence``      - interior of the first fence of any kind
4. ``outer_braces``   - from the first ``{`` to the last ``}``
5. ``stripped``       - fence markers and a leading prose line removed, then (4)

Each strategy is a pure ``str -> dict`` function that raises ``ValueError``
on failure; one strategy failing never stops the next from running.
"""

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from ...core.exceptions import ResponseDecodeError

JSON_FENCE_RE = re.compile(r"```json[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)
ANY_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\r?\n?(.*?)```", re.DOTALL)
FENCE_MARKER_RE = re.compile(r"```[\w+-]*")

DecodeStrategy = Callable[[str], dict[str, Any]]


@dataclass(frozen=True)
class DecodedResponse:
    """A successfully decoded model reply."""

    payload: dict[str, Any]
    strategy: str


def _load_object(text: str) -> dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_direct(text: str) -> dict[str, Any]:
    return _load_object(text.strip())


def parse_json_fence(text: str) -> dict[str, Any]:
    match = JSON_FENCE_RE.search(text)
    if not match:
        raise ValueError("no ```json fenced block")
    return _load_object(match.group(1).strip())


def parse_any_fence(text: str) -> dict[str, Any]:
    match = ANY_FENCE_RE.search(text)
    if not match:
        raise ValueError("no fenced block")
    return _load_object(match.group(1).strip())


def parse_outer_braces(text: str) -> dict[str, Any]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("no brace-delimited object")
    return _load_object(text[start : end + 1])


def parse_stripped(text: str) -> dict[str, Any]:
    cleaned = FENCE_MARKER_RE.sub("", text).strip()
    lines = cleaned.splitlines()
    if lines and not lines[0].lstrip().startswith(("{", "[")):
        cleaned = "\n".join(lines[1:])
    return parse_outer_braces(cleaned)


DECODE_STRATEGIES: tuple[tuple[str, DecodeStrategy], ...] = (
    ("direct", parse_direct),
    ("json_fence", parse_json_fence),
    ("any_fence", parse_any_fence),
    ("outer_braces", parse_outer_braces),
    ("stripped", parse_stripped),
)


def decode_response(raw_text: str | None) -> DecodedResponse:
    """Decode a model reply into its JSON object payload.

    Args:
        raw_text: The model's reply, verbatim

    Returns:
        DecodedResponse with the payload and the name of the strategy that worked

    Raises:
        ResponseDecodeError: If every strategy fails; the message is the last
            strategy's error
    """
    text = raw_text or ""
    attempts: dict[str, str] = {}

    for name, strategy in DECODE_STRATEGIES:
        try:
            payload = strategy(text)
        except (ValueError, TypeError, RecursionError) as e:
            attempts[name] = str(e)
            logger.debug(f"Decode strategy '{name}' failed: {e}")
            continue

        logger.debug(f"Decoded model response with strategy '{name}'")
        return DecodedResponse(payload=payload, strategy=name)

    last_name = DECODE_STRATEGIES[-1][0]
    logger.debug(f"Undecodable model response: {text[:500]}")
    raise ResponseDecodeError(
        f"Could not decode model response: {attempts[last_name]}",
        {"strategy": last_name, "attempts": attempts},
    )
