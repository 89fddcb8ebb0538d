# app/services/response_cleaner.py

"""
Extraction of a single JSON value from free-form model output.

Model output is untrusted text: it may be wrapped in markdown code fences,
surrounded by prose, contain trailing commas or raw newlines inside string
values. Extraction is attempted in two stages:

1. Strict parse of the whole text.
2. Strip fence markers, scan for balanced top-level ``{...}`` / ``[...]``
   candidates with a string-aware bracket matcher, normalize each candidate
   and parse it again.

The winning value is re-serialized with orjson so callers always receive
canonical, syntactically valid JSON.
"""

from collections.abc import Iterator
from logging import getLogger
from re import compile as re_compile
from typing import Any

from orjson import JSONDecodeError, dumps, loads

from app.clients.protocols import is_debug_enabled
from app.errors import MalformedResponseError
from app.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

FENCE_PATTERN = re_compile(r"```[A-Za-z0-9_-]*")
CLOSERS = {"{": "}", "[": "]"}
WHITESPACE = frozenset(" \t\r\n")


def _loads_container(text: str) -> Any | None:  # noqa: ANN401
    """Parse text, returning the value only when it is an object or array."""
    try:
        value = loads(text)
    except JSONDecodeError:
        return None
    return value if isinstance(value, dict | list) else None


def match_brackets(text: str, begin: int) -> int | None:
    """
    Find the index of the bracket closing the one at ``begin``.

    Brackets inside string literals are ignored. Returns None when the
    structure is unbalanced or mismatched.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for index in range(begin, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in CLOSERS:
            stack.append(CLOSERS[char])
        elif char in "}]":
            if not stack or stack.pop() != char:
                return None
            if not stack:
                return index
    return None


def balanced_candidates(text: str) -> Iterator[str]:
    """
    Yield balanced bracket substrings in order of appearance.

    An opener that is never closed is skipped and scanning resumes right after
    it, so a stray bracket in surrounding prose does not hide later JSON.
    """
    position = 0
    while True:
        starts = [i for i in (text.find("{", position), text.find("[", position)) if i != -1]
        if not starts:
            return
        begin = min(starts)
        end = match_brackets(text, begin)
        if end is None:
            position = begin + 1
            continue
        yield text[begin : end + 1]
        position = end + 1


def normalize_candidate(candidate: str) -> str:
    """
    Normalize almost-JSON into JSON.

    Drops whitespace and trailing commas outside string literals and replaces
    raw line breaks and tabs inside string literals with single spaces.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(candidate)
    for index, char in enumerate(candidate):
        if in_string:
            if escaped:
                escaped = False
                out.append(char)
            elif char == "\\":
                escaped = True
                out.append(char)
            elif char == '"':
                in_string = False
                out.append(char)
            elif char in "\r\n\t":
                if out and out[-1] != " ":
                    out.append(" ")
            else:
                out.append(char)
            continue
        if char in WHITESPACE:
            continue
        if char == '"':
            in_string = True
        elif char == ",":
            lookahead = index + 1
            while lookahead < length and candidate[lookahead] in WHITESPACE:
                lookahead += 1
            if lookahead < length and candidate[lookahead] in "}]":
                continue
        out.append(char)
    return "".join(out)


def parse_json(text: str) -> Any:  # noqa: ANN401
    """
    Extract and parse the first well-formed JSON object or array in ``text``.

    Args:
        text: Raw model output.

    Returns:
        The parsed ``dict`` or ``list``.

    Raises:
        MalformedResponseError: If no JSON value can be recovered.
    """
    if not isinstance(text, str) or not text.strip():
        msg = "Empty response from AI model"
        raise MalformedResponseError(detail=msg)

    value = _loads_container(text)
    if value is not None:
        return value

    stripped = FENCE_PATTERN.sub("", text)
    found_candidate = False
    for candidate in balanced_candidates(stripped):
        found_candidate = True
        value = _loads_container(normalize_candidate(candidate))
        if value is not None:
            return value
        if is_debug_enabled(logger.getEffectiveLevel()):
            logger.debug(f"Discarding unparseable JSON candidate: {candidate[:200]}")

    if not found_candidate:
        msg = "No JSON content found in response"
    else:
        msg = "Failed to parse JSON content in response"
    logger.warning(f"{msg}: {text[:200]!r}")
    raise MalformedResponseError(detail=msg)


def extract_json(text: str) -> str:
    """Return the canonical JSON serialization of the value found in ``text``."""
    return dumps(parse_json(text)).decode()
