"""LIKE patterns from free-text search input.

``*`` is the only wildcard users type. Every pattern ends with ``%`` so a
search always matches the final segment as a prefix. A second, *collapsed*
pattern drops hyphens and spaces so ``AB-100`` also finds ``AB100`` and
``AB 100``.
"""

import re
from typing import List, NamedTuple, Optional

from sqlalchemy import func, or_

LIKE_ESCAPE = "\\"

_WHITESPACE = re.compile(r"\s+")
_COLLAPSIBLE = re.compile(r"[-\s]+")


class CompiledPatterns(NamedTuple):
    standard: Optional[str]
    collapsed: Optional[str]


def escape_like(value: str) -> str:
    """Escape SQL LIKE wildcards (%, _) in user input.

    Uses backslash as the escape character, which must be specified
    in the LIKE clause with ESCAPE '\\'.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _build_pattern(segments: List[str], leading_wildcard: bool) -> Optional[str]:
    segments = [segment.strip() for segment in segments]
    segments = [segment for segment in segments if segment]
    if not segments:
        return None

    pattern = "%" if leading_wildcard else ""
    pattern += "%".join(escape_like(segment) for segment in segments)
    return pattern + "%"


def compile_patterns(raw: Optional[str]) -> Optional[CompiledPatterns]:
    """Compile search input into standard and collapsed LIKE patterns.

    Args:
        raw: User input, e.g. ``"ab-1*00"``

    Returns:
        ``None`` for empty input (no predicate), otherwise both patterns.
        The collapsed pattern is ``None`` when stripping hyphens and spaces
        leaves nothing. Input made only of ``*`` matches everything.
    """
    normalized = _WHITESPACE.sub(" ", (raw or "").strip().lower())
    if not normalized:
        return None

    leading_wildcard = normalized.startswith("*")
    segments = [segment.strip() for segment in normalized.split("*")]
    segments = [segment for segment in segments if segment]

    if not segments:
        return CompiledPatterns(standard="%", collapsed="%")

    standard = _build_pattern(segments, leading_wildcard)
    collapsed = _build_pattern(
        [_COLLAPSIBLE.sub("", segment) for segment in segments],
        leading_wildcard,
    )
    return CompiledPatterns(standard=standard, collapsed=collapsed)


def like_predicates(column, patterns: Optional[CompiledPatterns]):
    """OR-group of case-insensitive LIKE predicates for a text column.

    Returns ``None`` when there is nothing to match on.
    """
    if patterns is None:
        return None

    lowered = func.lower(func.coalesce(column, ""))
    clauses = []
    if patterns.standard:
        clauses.append(lowered.like(patterns.standard, escape=LIKE_ESCAPE))
    if patterns.collapsed:
        collapsed_column = func.replace(func.replace(lowered, "-", ""), " ", "")
        clauses.append(collapsed_column.like(patterns.collapsed, escape=LIKE_ESCAPE))

    if not clauses:
        return None
    return or_(*clauses)
