"""Skills extraction: technical skills, soft skills, languages, certifications.

No state machine here; each part is a flat keyword-table scan over the skills
section (or the whole document when there is none).
"""

import re

from models.schemas.extraction_result import ExtractionResult
from models.schemas.extractor_config import ExtractorConfig
from models.schemas.skills import Certification, Language, SkillItem, Skills, TechnicalSkill
from services.extractors.base import BaseExtractor, checkpoint
from services.extractors.segmentation import contains_any, find_section, first_keyword
from services.patterns.regexes import CJK, find_single_date, strip_bullet, strip_dates
from services.patterns.skill_matcher import SkillMatcher

_YEARS_RE = re.compile(r"(?<!\d)(\d{1,2})\s*(?:\+|多)?\s*年(?!\d)")
_SOFT_PHRASE_RES = (
    re.compile(rf"(?:具备|拥有|擅长)([{CJK}]{{2,10}}?(?:能力|思维|意识))"),
    re.compile(rf"(?:良好的|较强的|出色的)([{CJK}]{{2,10}}?(?:能力|思维|意识|精神))"),
)
_LANGUAGE_CERT_RE = re.compile(
    r"(CET-?[46]|TOEFL(?:\s*\d{2,3})?|IELTS(?:\s*\d(?:\.\d)?)?|JLPT\s*N[1-5]|N[1-5](?![0-9])|TOPIK\s*\d|[四六]级|专业[四八]级|TEM-?[48])"
)
_ISSUER_RE = re.compile(r"[（(]([^）)]{2,30})[）)]")
_CREDENTIAL_RE = re.compile(r"(?<![A-Za-z])(?:证书编号|编号|Credential ID|ID|No\.?)(?![A-Za-z])\s*[:：]?\s*([A-Za-z0-9\-]{4,})")
_EXPIRY_RE = re.compile(r"(?:有效期至|有效期|Expires?|到期)\s*[:：]?\s*")
_LABEL_PREFIX_RE = re.compile(r"^[^:：]{1,6}[:：]\s*")

SKILL_WINDOW = 12
MAX_YEARS = 20


class SkillsExtractor(BaseExtractor[Skills]):
    domain = "skills"
    label = "技能"
    result_model = ExtractionResult[Skills]

    def __init__(self, config: ExtractorConfig | None = None):
        super().__init__(config)
        self.matcher = SkillMatcher(self.patterns)

    def default_data(self) -> Skills:
        return Skills()

    def _extract(self, text: str) -> Skills:
        section = find_section(text, "skills", self.patterns)
        scope = section if section is not None else text
        return Skills(
            technical_skills=self.extract_technical(scope),
            soft_skills=self.extract_soft(text),
            languages=self.extract_languages(scope),
            certifications=self.extract_certifications(scope, scoped=section is not None),
        )

    # -- technical ----------------------------------------------------------

    def extract_technical(self, text: str) -> list[TechnicalSkill]:
        grouped: dict[str, dict[str, SkillItem]] = {}
        for line in text.split("\n"):
            checkpoint()
            for match in self.matcher.find(line):
                items = grouped.setdefault(match.category, {})
                if match.name in items:
                    continue
                items[match.name] = SkillItem(
                    name=match.name,
                    proficiency=self.infer_proficiency(line),
                    years=self._years_near(line, match.start, match.end),
                )
        # Categories keep their dictionary order.
        return [
            TechnicalSkill(category=category, items=list(grouped[category].values()))
            for category in self.patterns.skill_categories
            if category in grouped
        ]

    def infer_proficiency(self, line: str) -> str:
        for level, keywords in self.patterns.proficiency.items():
            if contains_any(line, keywords):
                return level
        if contains_any(line, ["项目", "开发", "实现"]):
            return "advanced"
        return "intermediate"

    @staticmethod
    def _years_near(line: str, start: int, end: int) -> int | None:
        window = line[max(0, start - SKILL_WINDOW):end + SKILL_WINDOW]
        m = _YEARS_RE.search(window)
        if m and 0 < int(m.group(1)) <= MAX_YEARS:
            return int(m.group(1))
        return None

    # -- soft skills --------------------------------------------------------

    def extract_soft(self, text: str) -> list[str]:
        found: list[str] = []
        for keywords in self.patterns.soft_skills.values():
            found.extend(k for k in keywords if k in text)
        for pattern in _SOFT_PHRASE_RES:
            found.extend(m.group(1) for m in pattern.finditer(text))
        # Drop phrases that merely contain a keyword already listed.
        unique = list(dict.fromkeys(found))
        return [s for s in unique if not any(s != other and other in s for other in unique)]

    # -- languages ----------------------------------------------------------

    def extract_languages(self, text: str) -> list[Language]:
        languages: list[Language] = []
        lines = text.split("\n")
        for language, keywords in self.patterns.languages.items():
            line = next((ln for ln in lines if contains_any(ln, keywords)), None)
            if line is None:
                continue
            cert = _LANGUAGE_CERT_RE.search(line)
            languages.append(Language(
                language=language,
                proficiency=self._language_level(line),
                certificate=cert.group(1) if cert else None,
            ))
        return languages

    def _language_level(self, line: str) -> str | None:
        for level, keywords in self.patterns.language_proficiency.items():
            if contains_any(line, keywords):
                return level
        return None

    # -- certifications -----------------------------------------------------

    def extract_certifications(self, text: str, scoped: bool = True) -> list[Certification]:
        certifications: list[Certification] = []
        seen: set[str] = set()
        for raw in text.split("\n"):
            checkpoint()
            line = strip_bullet(raw)
            has_marker = contains_any(line, self.patterns.certification_markers)
            # Outside a skills section only explicitly marked lines count.
            if not (has_marker or (scoped and contains_any(line, self.patterns.certifications))):
                continue
            cert = self.parse_certification(line)
            if cert and cert.name not in seen:
                seen.add(cert.name)
                certifications.append(cert)
        return certifications

    def parse_certification(self, line: str) -> Certification | None:
        body = _LABEL_PREFIX_RE.sub("", line)
        expiry_match = _EXPIRY_RE.search(body)
        head = body[:expiry_match.start()] if expiry_match else body
        issuer_match = _ISSUER_RE.search(head)
        credential = _CREDENTIAL_RE.search(body)

        name = head
        for part in (issuer_match, credential):
            if part:
                name = name.replace(part.group(0), " ")
        name = re.split(r"[，,；;]", strip_dates(name))[0].strip(" 。.")
        if len(name) < 2:
            return None

        return Certification(
            name=name,
            issuer=issuer_match.group(1).strip() if issuer_match else self.infer_issuer(line),
            issue_date=find_single_date(head) or _bare_year(head),
            expiry_date=find_single_date(body[expiry_match.end():]) if expiry_match else None,
            credential_id=credential.group(1) if credential else None,
        )

    def infer_issuer(self, text: str) -> str | None:
        key = first_keyword(text, list(self.patterns.certification_issuers))
        return self.patterns.certification_issuers[key] if key else None

    # -- validation and scoring ---------------------------------------------

    def validate_result(self, data: Skills) -> bool:
        return not data.is_empty()

    def context_score(self, data: Skills) -> float | None:
        if data.is_empty():
            return None
        score = 0.0
        if data.technical_skills:
            score += 0.4
            items = [i for t in data.technical_skills for i in t.items]
            if any(i.proficiency != "intermediate" or i.years for i in items):
                score += 0.2
        if data.languages:
            score += 0.2
        if data.certifications or data.soft_skills:
            score += 0.2
        return min(score, 1.0)

    def completeness_score(self, data: Skills) -> float:
        parts = (data.technical_skills, data.soft_skills, data.languages, data.certifications)
        return sum(1 for p in parts if p) / len(parts)

    def collect_warnings(self, data: Skills) -> list[str]:
        warnings = []
        if not data.technical_skills:
            warnings.append("未能提取到技术技能")
        for cert in data.certifications:
            if not cert.issuer:
                warnings.append(f"证书{cert.name}缺少颁发机构信息")
        return warnings


def _bare_year(text: str) -> str | None:
    m = re.search(r"(?<!\d)((?:19|20)\d{2})(?!\d)", text)
    return m.group(1) if m else None
