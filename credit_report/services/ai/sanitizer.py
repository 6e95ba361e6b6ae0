"""Best-effort repair of near-JSON model output.

Backends wrap JSON in Markdown fences, prepend prose, truncate mid-object or
emit JavaScript-style literals. ``sanitize`` runs an ordered chain of pure
string transforms and returns the first candidate the JSON parser accepts,
re-serialized in canonical compact form. It never raises: unrecoverable input
becomes ``"{}"``, which callers must treat as an empty result rather than as a
parse error.

Each transform is importable on its own so it can be unit tested in isolation.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Optional, Sequence

logger = logging.getLogger(__name__)

EMPTY_OBJECT = "{}"

_FENCE_RE = re.compile(r"```[A-Za-z]*")
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_ELLIPSIS_RE = re.compile(r"\.{3}|…")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_$][\w$\-]*)(\s*:)")
_UNESCAPED_DOUBLE_QUOTE_RE = re.compile(r'(?<!\\)"')

_CLOSERS = {"{": "}", "[": "]"}


def _split_literals(text: str) -> list[tuple[str, str]]:
    """Split text into ``(quote, chunk)`` pairs.

    ``quote`` is ``'"'`` or ``"'"`` for string literals (possibly unterminated)
    and ``""`` for everything in between.
    """

    parts: list[tuple[str, str]] = []
    buffer: list[str] = []
    quote = ""
    escaped = False
    for char in text:
        if not quote:
            if char in ("'", '"'):
                if buffer:
                    parts.append(("", "".join(buffer)))
                buffer = [char]
                quote = char
            else:
                buffer.append(char)
            continue

        buffer.append(char)
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == quote:
            parts.append((quote, "".join(buffer)))
            buffer = []
            quote = ""

    if buffer:
        parts.append((quote, "".join(buffer)))
    return parts


def _map_outside_strings(text: str, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` only to the chunks that sit outside string literals."""

    return "".join(
        chunk if quote else transform(chunk) for quote, chunk in _split_literals(text)
    )


def _single_to_double_quoted(chunk: str) -> str:
    closed = len(chunk) > 1 and chunk.endswith("'") and not chunk.endswith("\\'")
    body = chunk[1:-1] if closed else chunk[1:]
    body = body.replace("\\'", "'")
    body = _UNESCAPED_DOUBLE_QUOTE_RE.sub('\\"', body)
    return '"' + body + ('"' if closed else "")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers such as ```` ```json ````."""

    return _FENCE_RE.sub("", text).strip()


def wrap_top_level_objects(text: str) -> str:
    """Wrap ``{...}, {...}`` sequences in an array."""

    stripped = text.strip()
    if not stripped.startswith("{"):
        return text

    depth = 0
    in_string = False
    escaped = False
    for index, char in enumerate(stripped):
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
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                rest = stripped[index + 1 :].lstrip()
                if rest.startswith(",") and rest[1:].lstrip().startswith("{"):
                    return f"[{stripped}]"
                return text
    return text


def trim_to_json_bounds(text: str) -> str:
    """Drop prose before the first opener and after the last closer.

    Returns an empty string when the text holds no ``{`` or ``[`` at all. When
    no closer follows the opener (truncated output) the tail is kept so the
    balancing step can close it.
    """

    starts = [index for index in (text.find("{"), text.find("[")) if index != -1]
    if not starts:
        return ""
    body = text[min(starts) :]
    end = max(body.rfind("}"), body.rfind("]"))
    if end != -1:
        body = body[: end + 1]
    return body.strip()


def normalize_whitespace(text: str) -> str:
    """Collapse newlines, tabs and runs of whitespace into single spaces."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def repair_literals(text: str) -> str:
    """Fix JavaScript-isms: ellipsis placeholders, bare keys, single quotes."""

    def _repair_code(chunk: str) -> str:
        chunk = _ELLIPSIS_RE.sub("", chunk)
        return _BARE_KEY_RE.sub(r'\1"\2"\3', chunk)

    repaired: list[str] = []
    for quote, chunk in _split_literals(text):
        if quote == "'":
            repaired.append(_single_to_double_quoted(chunk))
        elif quote:
            repaired.append(chunk)
        else:
            repaired.append(_repair_code(chunk))
    return "".join(repaired)


def remove_trailing_commas(text: str) -> str:
    """Remove commas that directly precede ``}`` or ``]``."""

    return _map_outside_strings(text, lambda chunk: _TRAILING_COMMA_RE.sub(r"\1", chunk))


def balance_closers(text: str) -> str:
    """Append the closers a truncated document is missing.

    Closes an unterminated string first, then every open object/array in
    nesting order. Openers are never inserted; stray closers are left for the
    parser to reject.
    """

    stack: list[str] = []
    in_string = False
    escaped = False
    for char in text:
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
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in "}]" and stack and stack[-1] == char:
            stack.pop()

    if not stack and not in_string:
        return text

    logger.debug(
        "Unbalanced JSON structure detected; appending %d closer(s)",
        len(stack) + int(in_string),
    )
    if escaped:
        text = text[:-1]
    suffix = ('"' if in_string else "") + "".join(reversed(stack))
    return remove_trailing_commas(text + suffix)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite JSON constant: {name}")


def _parse_container(text: str) -> Optional[Any]:
    """Return the parsed value when it is an object or array, else ``None``."""

    if not text:
        return None
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None
    if isinstance(value, (dict, list)):
        return value
    return None


def _canonical(value: Any) -> Optional[str]:
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (ValueError, RecursionError):
        return None


REPAIR_STEPS: Sequence[Callable[[str], str]] = (
    normalize_whitespace,
    repair_literals,
    remove_trailing_commas,
    balance_closers,
)


def _repair(content: str) -> Optional[str]:
    """Run the post-trim steps, parsing after each one."""

    for step in REPAIR_STEPS:
        content = step(content)
        parsed = _parse_container(content)
        if parsed is not None:
            return _canonical(parsed)

    if content.startswith("{"):
        parsed = _parse_container(f"[{content}]")
        if parsed is not None:
            return _canonical(parsed)
    return None


def sanitize(raw: str) -> str:
    """Return JSON text the parser accepts, or ``"{}"`` when nothing is recoverable."""

    if not isinstance(raw, str) or not raw.strip():
        return EMPTY_OBJECT

    parsed = _parse_container(raw.strip())
    if parsed is not None:
        return _canonical(parsed) or EMPTY_OBJECT

    content = raw
    for step in (strip_code_fences, wrap_top_level_objects, trim_to_json_bounds):
        content = step(content)
        if not content:
            logger.warning("No JSON structure found in model output")
            return EMPTY_OBJECT
        parsed = _parse_container(content)
        if parsed is not None:
            return _canonical(parsed) or EMPTY_OBJECT

    repaired = _repair(content)
    if repaired is not None:
        return repaired

    # The earliest opener may have been a bracket inside prose; retry from the first object.
    object_start = content.find("{")
    if object_start > 0:
        repaired = _repair(trim_to_json_bounds(content[object_start:]))
        if repaired is not None:
            return repaired

    logger.warning("Could not recover JSON from model output (%d chars)", len(raw))
    return EMPTY_OBJECT


__all__ = [
    "EMPTY_OBJECT",
    "REPAIR_STEPS",
    "balance_closers",
    "normalize_whitespace",
    "remove_trailing_commas",
    "repair_literals",
    "sanitize",
    "strip_code_fences",
    "trim_to_json_bounds",
    "wrap_top_level_objects",
]
