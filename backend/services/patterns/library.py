"""Pattern library: reference tables loaded from the YAML files in ``data/``.

Tables are loaded once per process and shared read-only by every extractor.
Lookup helpers take the bundle explicitly so presets (e.g. English) can swap
tables without touching module state.
"""

import logging
from functools import lru_cache
from pathlib import Path

import yaml

from models.schemas.extractor_config import PatternBundle, SkillCategory

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"


def _read(name: str) -> dict:
    with open(DATA_DIR / name, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@lru_cache(maxsize=1)
def load_patterns() -> PatternBundle:
    """Load the default (Chinese) pattern bundle."""
    names = _read("names.yaml")
    orgs = _read("organizations.yaml")
    skills = _read("skills.yaml")
    extraction = _read("extraction.yaml")

    bundle = PatternBundle(
        surnames=names.get("surnames", []),
        compound_surnames=names.get("compound_surnames", []),
        minority_names=names.get("minority_names", []),
        name_exclusions=names.get("name_exclusions", []),
        university_keywords=orgs.get("key_universities", []),
        company_types=orgs.get("company_types", {}),
        position_levels=orgs.get("position_levels", {}),
        industries=orgs.get("industries", {}),
        skill_categories={
            category: SkillCategory(**spec)
            for category, spec in skills.get("technical", {}).items()
        },
        soft_skills=skills.get("soft", {}),
        languages=skills.get("languages", {}),
        language_proficiency=skills.get("language_proficiency", {}),
        certifications=skills.get("certifications", []),
        certification_markers=skills.get("certification_markers", []),
        certification_issuers=skills.get("certification_issuers", {}),
        proficiency=skills.get("proficiency", {}),
        **extraction,
    )
    logger.info(
        "Pattern library loaded: %d surnames, %d universities, %d skill categories",
        len(bundle.surnames) + len(bundle.compound_surnames),
        len(bundle.university_keywords),
        len(bundle.skill_categories),
    )
    return bundle


@lru_cache(maxsize=1)
def load_english_patterns() -> PatternBundle:
    """Default bundle with surname tables cleared and English org vocabularies."""
    english = _read("organizations.yaml").get("english", {})
    levels = english.get("position_levels", [])
    return load_patterns().model_copy(update={
        "surnames": [],
        "compound_surnames": [],
        "minority_names": [],
        "university_keywords": english.get("university_keywords", []),
        "company_types": english.get("company_types", {}),
        "position_levels": {
            "senior": [lv for lv in levels if lv not in ("Junior", "Manager")],
            "middle": [lv for lv in levels if lv == "Manager"],
            "junior": [lv for lv in levels if lv == "Junior"],
        },
    })


def is_key_university(school: str, patterns: PatternBundle) -> bool:
    return bool(school) and any(k in school for k in patterns.university_keywords)


def identify_company_type(company: str, patterns: PatternBundle) -> str:
    """First company-type bucket with a keyword in the name, else ``other``."""
    for company_type, keywords in patterns.company_types.items():
        if any(k in company for k in keywords):
            return company_type
    return "other"


def identify_position_level(position: str, patterns: PatternBundle) -> str | None:
    for level, keywords in patterns.position_levels.items():
        if any(k in position for k in keywords):
            return level
    return None


def identify_industry(text: str, patterns: PatternBundle) -> str | None:
    for industry, keywords in patterns.industries.items():
        if any(k in text for k in keywords):
            return industry
    return None
