"""Extraction configuration and the pattern-library bundle it carries."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class SkillCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: list[str] = []
    aliases: dict[str, str] = {}


class PatternBundle(BaseModel):
    """Reference tables consumed by the extractors. Read-only once loaded."""

    model_config = ConfigDict(frozen=True)

    # Names
    surnames: list[str] = []
    compound_surnames: list[str] = []
    minority_names: list[str] = []
    name_exclusions: list[str] = []

    # Organizations
    university_keywords: list[str] = []
    company_types: dict[str, list[str]] = {}
    position_levels: dict[str, list[str]] = {}
    industries: dict[str, list[str]] = {}

    # Skills
    skill_categories: dict[str, SkillCategory] = {}
    soft_skills: dict[str, list[str]] = {}
    languages: dict[str, list[str]] = {}
    language_proficiency: dict[str, list[str]] = {}
    certifications: list[str] = []
    certification_markers: list[str] = []
    certification_issuers: dict[str, str] = {}
    proficiency: dict[str, list[str]] = {}

    # Segmentation and record vocabulary
    section_headings: dict[str, list[str]] = {}
    degrees: dict[str, list[str]] = {}
    school_suffixes: list[str] = []
    school_prefixes: list[str] = []
    major_exclusions: list[str] = []
    honor_keywords: list[str] = []
    company_suffixes: list[str] = []
    company_exclusions: list[str] = []
    position_suffixes: list[str] = []
    position_exclusions: list[str] = []
    responsibility_keywords: list[str] = []
    achievement_keywords: dict[str, list[str]] = {}
    project_name_suffixes: list[str] = []
    project_name_exclusions: list[str] = []
    project_types: dict[str, list[str]] = {}
    project_roles: dict[str, str] = {}
    star: dict[str, list[str]] = {}
    description_keywords: list[str] = []
    desired_position_labels: list[str] = []
    current_status: list[str] = []


class ExtractorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enable_ai_assistance: bool = False
    ai_model: str = "deepseek-chat"
    confidence_threshold: float = 0.6
    max_retries: int = 3
    timeout_ms: int = 30000
    language: Literal["zh-CN", "en-US"] = "zh-CN"
    # Name similarity above which two projects are treated as the same one.
    project_similarity_threshold: float = 0.7
    patterns: PatternBundle = PatternBundle()
