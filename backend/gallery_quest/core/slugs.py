from __future__ import annotations

import re

_STRIP_RE = re.compile(r"[^\w\s-]")
_SEPARATOR_RE = re.compile(r"[\s_-]+")


def slugify(text: str) -> str:
    value = _STRIP_RE.sub("", (text or "").lower().strip())
    return _SEPARATOR_RE.sub("-", value).strip("-")
