"""Recover a single JSON object from a free-form model reply.

This is a best-effort heuristic, not a general JSON-in-text parser:

1. Starting at the first ``{``, find the matching ``}`` of a balanced,
   string-aware brace span (quoted strings and backslash escapes are
   skipped) and parse it.
2. If that span never closes or does not parse, try the span from the
   first ``{`` to the last ``}`` in the text.

Only the first object is returned. Replies that open with stray braces in
prose, or that split one object across several fragments, may still fail.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from termslens.analysis.errors import ExtractionError


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the object opened at ``start``, if any."""
    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        ch = text[i]

        if escape_next:
            escape_next = False
            continue
        if ch == "\\" and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _load_object(candidate: str) -> Optional[dict[str, Any]]:
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(text: str) -> dict[str, Any]:
    """Return the first JSON object embedded in ``text``.

    Raises ExtractionError when no object-shaped span exists or none parses.
    """
    if not isinstance(text, str):
        raise ExtractionError(f"Expected text reply, got {type(text).__name__}")

    start = text.find("{")
    if start == -1:
        raise ExtractionError("No JSON object found in response")

    end = _balanced_end(text, start)
    if end is not None:
        parsed = _load_object(text[start : end + 1])
        if parsed is not None:
            return parsed

    last = text.rfind("}")
    if last > start:
        parsed = _load_object(text[start : last + 1])
        if parsed is not None:
            return parsed

    raise ExtractionError("Response contains no well-formed JSON object")
