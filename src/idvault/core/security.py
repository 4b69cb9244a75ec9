"""Sanitisation helpers for logs and request input."""

import re
from typing import Any

# Order matters: tokens and hashes are matched before the generic hex and digit rules
_REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
        "[REDACTED_TOKEN]",
    ),
    (re.compile(r"\$2[abxy]?\$\d{2}\$[./A-Za-z0-9]{53}"), "[REDACTED_HASH]"),
    (re.compile(r"\b[a-fA-F0-9]{32,}\b"), "[REDACTED_KEY]"),
    (re.compile(r"(?<![\w-])\d{12}(?![\w-])"), "[REDACTED_ID]"),
    (
        re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        "[REDACTED_EMAIL]",
    ),
]

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)


def redact_sensitive(text: str) -> str:
    """Mask key-like hex runs, national ids, emails, bcrypt hashes and JWTs.

    Applied to every log record before it reaches a sink, and to any error
    detail coming out of the crypto layer.
    """
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def redact_value(value: Any) -> Any:
    """Redact strings, recursing into dicts and lists; other values pass through."""
    if isinstance(value, str):
        return redact_sensitive(value)
    if isinstance(value, dict):
        return {k: redact_value(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return type(value)(redact_value(v) for v in value)
    return value


def sanitize_text(value: str) -> str:
    """Trim a request string and strip script blocks and ``javascript:`` schemes."""
    value = _SCRIPT_BLOCK.sub("", value)
    value = _JS_SCHEME.sub("", value)
    return value.strip()
