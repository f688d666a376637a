"""Tolerant field parsers: legacy brace lists, timestamps and fixed-width text."""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Bound on how much of an unparseable value reaches the log
LOG_PREVIEW_CHARS = 100

# Two-digit UTC offset at the end of a timestamp: "+00", "-05"
_SHORT_OFFSET = re.compile(r"([+-]\d{2})$")


def _preview(value: str) -> str:
    if len(value) <= LOG_PREVIEW_CHARS:
        return value
    return value[:LOG_PREVIEW_CHARS] + "..."


def _split_quoted(content: str) -> list[str]:
    """
    Split brace content on commas that sit outside double quotes.
    Quote characters toggle state and are not emitted.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False

    def flush() -> None:
        tokens.append("".join(current).replace('"', "").strip())
        current.clear()

    for ch in content:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            flush()
        else:
            current.append(ch)
    flush()
    return tokens


def parse_legacy_json(value: Any, *, field: Optional[str] = None) -> Any:
    """
    Decode a JSON-bearing field that may use the legacy {a,b} list format.

    Returns the decoded value, [] for "{}", or None when the input is absent
    or cannot be recovered. Never raises.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text or text == "null":
        return None

    # Legacy empty list; also valid JSON for an empty object
    if text.startswith("{") and text.endswith("}") and not text[1:-1].strip():
        return []

    try:
        return json.loads(text)
    except ValueError:
        pass

    if text.startswith("{") and text.endswith("}"):
        content = text[1:-1].strip()
        if '"' not in content:
            if "," not in content:
                return [content]
            return [item.strip() for item in content.split(",")]
        return _split_quoted(content)

    logger.warning("Could not parse %s: %s", field or "value", _preview(text))
    return None


def to_json_text(value: Any) -> Optional[str]:
    """Serialize a decoded value to canonical JSON text; None stays None."""
    if value is None:
        return None
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.warning("Could not serialize value to JSON (%s): %s", e, _preview(repr(value)))
        return None


def normalize_timestamp(value: Any) -> Optional[str]:
    """
    Convert "YYYY-MM-DD HH:MM:SS[.ffffff]+00" to an ISO-8601 UTC instant.
    Naive timestamps are taken as UTC. Returns None when empty or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text or text == "null":
            return None
        if "T" not in text:
            text = text.replace(" ", "T", 1)
        if "T" in text and _SHORT_OFFSET.search(text):
            text = _SHORT_OFFSET.sub(r"\1:00", text)
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Failed to parse timestamp: %s", _preview(str(value)))
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def truncate_field(value: Any, max_length: int, field: str) -> Optional[str]:
    """
    Cut a value to a column's maximum length.
    None passes through; a cut is logged with the field and both lengths.
    """
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    if len(text) <= max_length:
        return text
    logger.info("Truncating %s: %d -> %d chars", field, len(text), max_length)
    return text[:max_length]
