from __future__ import annotations

import re

REDACTED = "***"

# Editor tokens are HS256 JWTs; login bodies carry the password; settings dumps carry secret_key.
_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\b(bearer)\s+\S+"), r"\1 " + REDACTED),
    (re.compile(r"\beyJ[\w-]*\.[\w-]+\.[\w-]+"), REDACTED),
    (
        re.compile(r"(?i)(\"?\b(?:password|secret_key|token)\"?\s*[:=]\s*\"?)[^\"&,\s}]+"),
        r"\1" + REDACTED,
    ),
)


def redact_text(text: str) -> str:
    for pattern, repl in _PATTERNS:
        text = pattern.sub(repl, text)
    return text
