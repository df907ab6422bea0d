"""Search-term sanitizing for pattern-match predicates."""

from __future__ import annotations

import re

from agencydir_shared.config import settings

DANGEROUS_KEYWORDS = (
    "SELECT", "INSERT", "UPDATE", "DELETE", "DROP", "UNION",
    "EXEC", "EXECUTE", "SCRIPT", "JAVASCRIPT", "VBSCRIPT",
    "ONLOAD", "ONERROR", "ONCLICK", "ALERT",
)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_SQL_COMMENTS = re.compile(r"--|/\*|\*/")
_KEYWORDS = re.compile(r"\b(" + "|".join(DANGEROUS_KEYWORDS) + r")\b", re.IGNORECASE)
# Word characters minus "_" (a LIKE wildcard), whitespace, and - . &
_DISALLOWED = re.compile(r"[^\w\s\-.&]|_")
_WHITESPACE = re.compile(r"\s+")


def sanitize_search_input(raw: str | None) -> str | None:
    """Strip anything that could change the meaning of an ilike/or predicate.

    Keywords are removed before punctuation so `<script>` is caught while its
    brackets are still there. Returns None when nothing searchable is left.
    """
    if raw is None:
        return None

    term = raw.strip()
    term = _CONTROL_CHARS.sub("", term)
    term = _SQL_COMMENTS.sub("", term)
    term = _KEYWORDS.sub("", term)
    term = _DISALLOWED.sub("", term)
    term = _WHITESPACE.sub(" ", term).strip()

    limit = settings.max_search_length
    if len(term) > limit:
        term = term[:limit].strip()

    return term or None
