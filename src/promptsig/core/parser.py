"""Extract typed output fields from freeform LLM replies.

Models do not follow a grammar, so extraction is a best-effort heuristic:
several regex strategies are tried from the most specific (``name: value`` up to the
next ``label:`` line) to the loosest (anything after the field name), and the first
strategy producing a non-empty value wins.
Extracted values are then coerced according to the field's type tag.

Nothing in this module raises on malformed replies.
A field that cannot be found is returned as None, and a value that cannot be coerced
is returned as the raw string.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Pattern

import json_repair

from .signature import Signature
from ..utilities import extract_json, looks_like_json

logger = logging.getLogger(__name__)

_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"^[+-]?\d+")
_LIST_DELIMITERS = re.compile(r"[,;\n]")
_ASTERISKS = re.compile(r"^\*+|\*+$")
_QUOTES = re.compile(r"^[\"']|[\"']$")


def _field_patterns(name: str) -> list[Pattern]:
    """Regex strategies for a field, most specific first."""
    n = re.escape(name)
    return [
        # name: value, up to the next "label:" line
        re.compile(rf"{n}\s*:\s*(.+?)(?=\n\s*\w+\s*:|$)", re.IGNORECASE | re.DOTALL),
        # name = value, or name: value, on one line
        re.compile(rf"{n}\s*[=:]\s*(.+?)(?=\n|$)", re.IGNORECASE | re.DOTALL),
        # name as a word followed by content on the same line
        re.compile(rf"\b{n}\b[:\s=]*([^\n]+)", re.IGNORECASE),
        # name followed by content on the same line
        re.compile(rf"{n}[:\s]*([^\n]+?)(?=\n|$)", re.IGNORECASE),
        # anything after the name until a capitalized new line or the end
        re.compile(rf"{n}[^\w]*([\s\S]*?)(?=\n\s*[A-Z]|$)", re.IGNORECASE),
    ]


def strip_artifacts(value: str) -> str:
    """Remove surrounding whitespace, markdown emphasis, and quotes."""
    value = value.strip()
    value = _ASTERISKS.sub("", value)
    value = _QUOTES.sub("", value)
    return value.strip()


def _parse_float(value: str) -> float | str:
    match = _LEADING_FLOAT.match(value)
    return float(match.group()) if match else value


def _parse_int(value: str) -> int | str:
    match = _LEADING_INT.match(value)
    return int(match.group()) if match else value


def _parse_list(value: str) -> list[Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        return parsed
    return [item.strip() for item in _LIST_DELIMITERS.split(value) if item.strip()]


def _parse_json(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        pass

    # models often wrap JSON in prose or code fences, or emit it slightly malformed
    candidate = extract_json(value)
    if looks_like_json(candidate):
        repaired = json_repair.loads(candidate)
        if isinstance(repaired, (dict, list)):
            logger.debug(f"Repaired malformed JSON value: {value!r}")
            return repaired
    return value


def _autodetect_json(value: str) -> Any:
    if looks_like_json(value):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def coerce_value(value: str, type_: str | None = None) -> Any:
    """Convert an extracted string according to a type tag.

    Falls back to the raw string whenever conversion is not possible.

    Examples
    --------
    >>> coerce_value("7", "int")
    7
    >>> coerce_value("yes", "bool")
    False
    >>> coerce_value("a; b, c", "list")
    ['a', 'b', 'c']
    >>> coerce_value("n/a", "float")
    'n/a'
    """
    tag = (type_ or "string").strip().lower()

    if tag in ("number", "float"):
        return _parse_float(value)
    if tag in ("int", "integer"):
        return _parse_int(value)
    if tag in ("boolean", "bool"):
        return value.strip().lower() == "true" or value.strip() == "1"
    if tag in ("array", "list"):
        return _parse_list(value)
    if tag in ("object", "json"):
        return _parse_json(value)

    # 'string' and unknown tags
    return _autodetect_json(value)


def _lookup_json_key(text: str, name: str) -> Any:
    """Return the value for name when the whole reply is a JSON object, else None."""
    if not (text.startswith("{") and text.endswith("}")):
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    for key, value in data.items():
        if str(key).lower() == name.lower():
            return value
    return None


def extract_field_value(text: str, name: str, type_: str | None = None, sole: bool = False) -> Any:
    """Extract and coerce the value of one field from a reply.

    Parameters
    ----------
    text : str
        The reply text.
    name : str
        The field name to look for.
    type_ : str | None, optional
        The field's type tag, by default None (string)
    sole : bool, optional
        Whether this is the only expected field, by default False.
        A sole field accepts a bare single-line reply without a label.

    Returns
    -------
    Any
        The coerced value, or None when no strategy matched.
    """
    if not isinstance(text, str):
        text = str(text)
    stripped = text.strip()

    if sole and ":" not in stripped and "\n" not in stripped:
        value = strip_artifacts(stripped)
        if value:
            return coerce_value(value, type_)

    json_value = _lookup_json_key(stripped, name)
    if json_value is not None:
        return coerce_value(json_value, type_) if isinstance(json_value, str) else json_value

    for pattern in _field_patterns(name):
        match = pattern.search(text)
        if match and match.group(1):
            value = strip_artifacts(match.group(1))
            if value:
                return coerce_value(value, type_)

    return None


def stringify_reply(reply: Any) -> str:
    """Render a non-string reply as text for parsing."""
    if isinstance(reply, str):
        return reply
    try:
        return json.dumps(reply)
    except (TypeError, ValueError):
        return str(reply)


def parse_output(signature: Signature, text: Any) -> dict[str, Any]:
    """Parse every declared output field of a signature out of a reply.

    The result has a key for every output field, in declared order; fields that
    could not be found are None.

    Examples
    --------
    >>> sig = Signature.from_string("question -> field1: string, field2: int")
    >>> parse_output(sig, "field1: A\\nfield2: 7")
    {'field1': 'A', 'field2': 7}
    """
    text = stringify_reply(text)
    sole = len(signature.output_fields) == 1
    return {
        field.name: extract_field_value(text, field.name, field.type, sole=sole) for field in signature.output_fields
    }
