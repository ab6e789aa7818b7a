"""Text sanitizing for Roam block content.

Free text from Todoist (titles, descriptions, comments, labels) is
whitespace-normalized and then made safe for Roam: balanced ``[[page]]`` and
``[label]`` spans survive, stray brackets that would break block syntax are
blanked, and Todoist inline labels become Roam tags or page links.
"""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_LABEL_STRIP_RE = re.compile(r"[^\w\s-]")
_BRACKET_RE = re.compile(r"[\[\]]")
_MENTION_RE = re.compile(r"(?<![A-Za-z0-9\[])(@@?)([^\s@\[\](),;:!?]+)")
_BOLD = "**"


def safe_text(value: str | None) -> str:
    """Collapse whitespace runs (newlines included) to single spaces and trim."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def sanitize_link_preserving(value: str | None) -> str:
    """Sanitize *value* while keeping balanced Roam and Markdown link syntax.

    ``[[...]]`` spans end at the nearest ``]]`` and ``[...]`` spans at the
    nearest ``]``; any other bracket becomes a space. Applying it twice is a
    no-op.
    """
    sanitized = safe_text(value)
    if not sanitized:
        return ""

    pieces: list[str] = []
    index = 0
    length = len(sanitized)
    while index < length:
        char = sanitized[index]
        if char == "[":
            if sanitized.startswith("[[", index):
                closing = sanitized.find("]]", index + 2)
                if closing != -1:
                    pieces.append(sanitized[index : closing + 2])
                    index = closing + 2
                    continue
            closing = sanitized.find("]", index + 1)
            if closing != -1:
                pieces.append(sanitized[index : closing + 1])
                index = closing + 1
                continue
            pieces.append(" ")
            index += 1
            continue
        if char == "]":
            pieces.append(" ")
            index += 1
            continue
        pieces.append(char)
        index += 1

    return _move_bold_outside_links(safe_text("".join(pieces)))


def _page_name(value: str) -> str:
    # Brackets inside a page reference would close it early.
    return safe_text(_BRACKET_RE.sub(" ", value))


def format_label_tag(label: str) -> str:
    """Turn a Todoist label into a Roam tag token.

    ``@Pato`` -> ``[[@Pato]]``, ``team/bx`` -> ``[[team/bx]]``,
    ``deep work!`` -> ``#deep-work``. Returns ``""`` when nothing is left.
    """
    if label.startswith("@"):
        name = _page_name(label[1:])
        return f"[[@{name}]]" if name else ""

    if "/" in label:
        name = _page_name(label)
        return f"[[{name}]]" if name else ""

    sanitized = _LABEL_STRIP_RE.sub(" ", label).strip()
    if not sanitized:
        return ""
    return "#" + _WHITESPACE_RE.sub("-", sanitized)


def convert_inline_mentions(text: str) -> str:
    """Convert Todoist inline labels outside ``[[...]]`` spans.

    ``@@name`` becomes ``[[@name]]`` and ``@label`` becomes ``#label`` (or
    ``[[a/b]]`` for hierarchical labels). Email- and domain-like tokens are
    left untouched, as is everything inside page links.
    """
    if not text:
        return ""

    parts: list[str] = []
    index = 0
    while index < len(text):
        link_start = text.find("[[", index)
        if link_start == -1:
            parts.append(_convert_segment(text[index:]))
            break
        if link_start > index:
            parts.append(_convert_segment(text[index:link_start]))
        link_end = text.find("]]", link_start + 2)
        if link_end == -1:
            parts.append(_convert_segment(text[link_start:]))
            break
        parts.append(text[link_start : link_end + 2])
        index = link_end + 2
    return "".join(parts)


def _convert_segment(segment: str) -> str:
    return _MENTION_RE.sub(_format_mention, segment)


def _format_mention(match: re.Match[str]) -> str:
    marker, name = match.group(1), match.group(2)
    if "." in name and "/" not in name:
        return match.group(0)
    if marker == "@@":
        return f"[[@{name}]]"
    if "/" in name:
        return f"[[{name}]]"
    return f"#{name}"


def _find_matching_paren(text: str, open_index: int) -> int:
    if open_index >= len(text) or text[open_index] != "(":
        return -1

    depth = 0
    index = open_index
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def _bold_inner(label: str) -> str:
    if len(label) >= 4 and label.startswith(_BOLD) and label.endswith(_BOLD):
        return label[2:-2].strip()
    return ""


def _move_bold_outside_links(value: str) -> str:
    """Move ``**`` markers from link labels to around the link.

    Roam does not render bold inside link labels:
    ``[**Label**](url)`` -> ``**[Label](url)**`` and
    ``[[**Page**]]`` -> ``**[[Page]]**``. Existing outer markers are kept.
    """
    if _BOLD not in value:
        return value

    result: list[str] = []
    index = 0
    length = len(value)
    while index < length:
        if value.startswith("[[", index):
            end = value.find("]]", index + 2)
            if end == -1:
                result.append(value[index:])
                break
            inner = _bold_inner(value[index + 2 : end])
            if inner:
                has_outer_bold = index >= 2 and value[index - 2 : index] == _BOLD and value[end + 2 : end + 4] == _BOLD
                result.append(f"[[{inner}]]" if has_outer_bold else f"**[[{inner}]]**")
            else:
                result.append(value[index : end + 2])
            index = end + 2
            continue

        if value[index] == "[":
            closing_bracket = value.find("]", index + 1)
            if closing_bracket == -1:
                result.append(value[index:])
                break

            after_bracket = closing_bracket + 1
            while after_bracket < length and value[after_bracket].isspace():
                after_bracket += 1
            closing_paren = _find_matching_paren(value, after_bracket)
            if closing_paren == -1:
                result.append(value[index : closing_bracket + 1])
                index = closing_bracket + 1
                continue

            inner = _bold_inner(value[index + 1 : closing_bracket])
            if not inner:
                result.append(value[index : closing_paren + 1])
                index = closing_paren + 1
                continue

            link = f"[{inner}]{value[closing_bracket + 1 : closing_paren + 1]}"
            has_outer_bold = (
                index >= 2 and value[index - 2 : index] == _BOLD and value[closing_paren + 1 : closing_paren + 3] == _BOLD
            )
            result.append(link if has_outer_bold else f"{_BOLD}{link}{_BOLD}")
            index = closing_paren + 1
            continue

        result.append(value[index])
        index += 1

    return "".join(result)
