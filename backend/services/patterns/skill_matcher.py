"""Dictionary matching of technical skills in free text."""

import re
from dataclasses import dataclass

from models.schemas.extractor_config import PatternBundle

# Short keywords ("Go", "JS", "ML") only match with their exact casing.
CASE_SENSITIVE_MAX_LEN = 2


@dataclass(frozen=True)
class SkillMatch:
    category: str
    name: str  # canonical name
    start: int
    end: int


class SkillMatcher:
    """Finds canonical skill names in text, longest keyword first.

    Matches never overlap, so "Spring Boot" is not also reported as "Spring"
    and "JavaScript" is not also reported as "Java".
    """

    def __init__(self, patterns: PatternBundle):
        entries: list[tuple[str, str, str]] = []  # (surface, canonical, category)
        for category, spec in patterns.skill_categories.items():
            entries.extend((k, k, category) for k in spec.keywords)
            entries.extend((alias, canonical, category) for alias, canonical in spec.aliases.items())
        entries.sort(key=lambda e: len(e[0]), reverse=True)

        self._patterns: list[tuple[re.Pattern, str, str]] = []
        seen: set[str] = set()
        for surface, canonical, category in entries:
            if surface in seen:
                continue
            seen.add(surface)
            escaped = re.escape(surface)
            flags = 0 if len(surface) <= CASE_SENSITIVE_MAX_LEN else re.IGNORECASE
            pattern = re.compile(rf"(?<![a-zA-Z0-9.#+]){escaped}(?![a-zA-Z0-9+#])", flags)
            self._patterns.append((pattern, canonical, category))

    def find(self, text: str) -> list[SkillMatch]:
        """All non-overlapping matches, in text order."""
        taken: list[tuple[int, int]] = []
        matches: list[SkillMatch] = []
        for pattern, canonical, category in self._patterns:
            for m in pattern.finditer(text):
                if any(m.start() < end and start < m.end() for start, end in taken):
                    continue
                taken.append((m.start(), m.end()))
                matches.append(SkillMatch(category, canonical, m.start(), m.end()))
        return sorted(matches, key=lambda s: s.start)

    def names(self, text: str) -> list[str]:
        """Distinct canonical names in order of first appearance."""
        return list(dict.fromkeys(m.name for m in self.find(text)))
