"""Section location and the entry-boundary state machine.

Education, experience and project extraction all segment a section the same
way: scan its lines, start a new record at every boundary line, feed the
lines in between to the open record, and flush at the end.
"""

import re
from typing import Callable, TypeVar

from models.schemas.extractor_config import PatternBundle
from services.extractors.base import checkpoint

A = TypeVar("A")
R = TypeVar("R")

_DECORATION_RE = re.compile(r"[#*【】\[\]<>《》:：\s·•■●◆◇▶►—\-_=|/]+")
MAX_HEADING_LENGTH = 30

# Sections whose heading may carry content on the same line ("专业技能：熟练掌握Java").
INLINE_SECTIONS = ("skills", "summary")
MIN_INLINE_LABEL = 4
_LABEL_RE = re.compile(r"^([^:：]{1,12})\s*[:：]\s*(\S.*)$")


def _clean_heading(line: str) -> str:
    return _DECORATION_RE.sub(" ", line).strip()


def heading_of(line: str, patterns: PatternBundle) -> str | None:
    """Section key if ``line`` is a section heading, else None.

    A heading is a short line that is exactly one alias, optionally followed by
    an English alias of the same section ("项目经历 Projects").
    """
    cleaned = _clean_heading(line)
    if not cleaned or len(cleaned) > MAX_HEADING_LENGTH:
        return None
    lowered = cleaned.lower()
    for section, aliases in patterns.section_headings.items():
        lowered_aliases = {a.lower() for a in aliases}
        if lowered in lowered_aliases:
            return section
        for alias in aliases:
            if cleaned.startswith(alias):
                rest = cleaned[len(alias):].strip().lower()
                if rest and rest in lowered_aliases:
                    return section
    return None


def inline_heading_of(line: str, patterns: PatternBundle) -> tuple[str, str] | None:
    """``(section, content)`` for a labelled line such as ``自我评价：...``."""
    m = _LABEL_RE.match(line.strip())
    if not m:
        return None
    label, content = m.group(1).strip(), m.group(2).strip()
    if len(label) < MIN_INLINE_LABEL:
        return None
    for section in INLINE_SECTIONS:
        if label in patterns.section_headings.get(section, []):
            return section, content
    return None


def split_sections(text: str, patterns: PatternBundle) -> dict[str, str]:
    """Split text into named sections.

    Text before the first heading goes into ``header``. Repeated headings of
    the same section (e.g. 技能 and 证书) are concatenated.
    """
    sections: dict[str, list[str]] = {}
    current = "header"
    for line in text.split("\n"):
        if line.strip():
            section = heading_of(line, patterns)
            if section:
                current = section
                sections.setdefault(current, [])
                continue
            inline = inline_heading_of(line, patterns)
            if inline:
                current, line = inline
        sections.setdefault(current, []).append(line)
    return {name: "\n".join(lines).strip() for name, lines in sections.items()}


def find_section(text: str, name: str, patterns: PatternBundle, min_length: int = 1) -> str | None:
    """Body of section ``name``, or None when it is absent or too short."""
    body = split_sections(text, patterns).get(name)
    if body is None or len(body) < min_length:
        return None
    return body


def scan_entries(
    lines: list[str],
    is_start: Callable[[str], bool],
    open_entry: Callable[[str], A],
    supplement: Callable[[A, str], None],
    close: Callable[[A], R | None],
) -> list[R]:
    """Run the entry-boundary state machine over ``lines``.

    ``close`` returns the finished record, or None when the accumulator never
    gathered its required fields; such accumulators are dropped.
    """
    records: list[R] = []
    current: A | None = None

    def flush() -> None:
        if current is not None:
            record = close(current)
            if record is not None:
                records.append(record)

    for line in lines:
        checkpoint()
        line = line.strip()
        if not line:
            continue
        if is_start(line):
            flush()
            current = open_entry(line)
        elif current is not None:
            supplement(current, line)
    flush()
    return records


def contains_any(text: str, keywords: list[str]) -> bool:
    return any(k in text for k in keywords)


def first_keyword(text: str, keywords: list[str]) -> str | None:
    for k in keywords:
        if k in text:
            return k
    return None
