"""
Best-effort repair of tool-call argument strings.

Some models emit arguments with a duplicated or concatenated JSON object, e.g.
'{"tableName":"users","numRows":5{"tableName":"users","numRows":5}'.
This is a bounded heuristic for that one failure shape, not a JSON repair
algorithm: nested objects, trailing garbage after a valid object, or more than
two fragments may still come back unparseable, and the caller then fails loudly.
"""
import json
import re
from typing import Callable, Optional

_DIGIT_BRACE_RE = re.compile(r"(\d+)(\{)")
_FLAT_OBJECT_RE = re.compile(r"\{[^{}]*\}")


def _parses(candidate: str) -> bool:
    try:
        json.loads(candidate)
    except ValueError:
        return False
    return True


def _truncate_at_digit_brace(raw: str) -> Optional[str]:
    if raw.count("{") <= 1 or raw.count("{") <= raw.count("}"):
        return None
    m = _DIGIT_BRACE_RE.search(raw)
    if not m or m.start() == 0:
        return None
    return raw[:m.end(1)] + "}"


def _from_second_brace(raw: str) -> Optional[str]:
    idx = raw.find("{", 1)
    return raw[idx:] if idx > 0 else None


def _second_half_of_split(raw: str) -> Optional[str]:
    if "}{" not in raw:
        return None
    return "{" + raw.split("}{")[1]


def _first_flat_object(raw: str) -> Optional[str]:
    m = _FLAT_OBJECT_RE.search(raw)
    return m.group(0) if m else None


# Tried in order; the first candidate that parses wins.
_STRATEGIES: tuple[Callable[[str], Optional[str]], ...] = (
    lambda raw: raw,
    _truncate_at_digit_brace,
    _from_second_brace,
    _second_half_of_split,
    _first_flat_object,
)


def looks_concatenated(raw: str) -> bool:
    return "}{" in raw or bool(re.search(r"\d\{", raw))


def sanitize_tool_arguments(raw: str) -> str:
    """Return a parseable variant of raw if one of the strategies finds it, else raw unchanged."""
    if not looks_concatenated(raw):
        return raw
    for strategy in _STRATEGIES:
        candidate = strategy(raw)
        if candidate is not None and _parses(candidate):
            return candidate
    return raw
