"""Title exclusion patterns."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from todoist_backup.contracts.task import CanonicalTask
from todoist_backup.text import safe_text

logger = logging.getLogger(__name__)

_FLAG_LETTERS_RE = re.compile(r"^[a-z]*$", re.IGNORECASE)
_PYTHON_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def split_pattern(text: str) -> tuple[str, int]:
    """Split ``/body/flags`` into a body and ``re`` flags.

    Anything not in that form is a case-insensitive pattern. JavaScript-only
    flags (``g``, ``u``, ``y``, ...) are accepted and have no effect.
    """
    if text.startswith("/"):
        last_slash = text.rfind("/")
        if last_slash > 0:
            letters = text[last_slash + 1 :]
            body = text[1:last_slash]
            if body and _FLAG_LETTERS_RE.match(letters):
                flags = 0
                for letter in letters.lower():
                    flags |= _PYTHON_FLAGS.get(letter, 0)
                return body, flags
    return text, re.IGNORECASE


def compile_exclusion_patterns(lines: Iterable[str]) -> list[re.Pattern[str]]:
    patterns: list[re.Pattern[str]] = []
    for line in lines:
        text = line.strip()
        if not text:
            continue
        body, flags = split_pattern(text)
        try:
            patterns.append(re.compile(body, flags))
        except re.error as exc:
            logger.warning("invalid exclude pattern ignored: %r (%s)", text, exc)
    return patterns


def is_excluded(title: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(pattern.search(title) for pattern in patterns)


def apply_title_exclusions(tasks: Iterable[CanonicalTask], patterns: list[re.Pattern[str]]) -> list[CanonicalTask]:
    """Drop tasks whose sanitized title matches any pattern; empty titles stay."""
    if not patterns:
        return list(tasks)

    kept: list[CanonicalTask] = []
    for task in tasks:
        title = safe_text(task.content)
        if title and is_excluded(title, patterns):
            continue
        kept.append(task)
    return kept
