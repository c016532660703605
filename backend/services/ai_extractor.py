"""AI-assisted extraction: one chat-completions prompt per domain.

Each ``extract_*`` call returns validated schema objects, or ``None`` when
the model is unreachable, the reply is not JSON, or the JSON does not fit
the domain schema. Nothing here raises to the caller.
"""

import asyncio
import logging
import math

from pydantic import TypeAdapter, ValidationError

from config import get_extractor_config, settings
from models.schemas.basic_info import BasicInfo
from models.schemas.batch import AIExtractionBatch
from models.schemas.education import Education
from models.schemas.experience import Experience
from models.schemas.extractor_config import ExtractorConfig
from models.schemas.project import Project
from models.schemas.skills import Skills
from services import prompt_builder
from services.llm_client import LLMClient

logger = logging.getLogger(__name__)

# Rough prompt-plus-reply token estimate per input character, and the number
# of prompts a full run sends.
TOKENS_PER_CHAR = 1.5
PROMPTS_PER_RUN = 5

_ADAPTERS = {
    "basic_info": TypeAdapter(BasicInfo),
    "education": TypeAdapter(list[Education]),
    "work_experience": TypeAdapter(list[Experience]),
    "projects": TypeAdapter(list[Project]),
    "skills": TypeAdapter(Skills),
}


class AIAssistantExtractor:
    def __init__(self, config: ExtractorConfig | None = None, client: LLMClient | None = None):
        self.config = config or get_extractor_config()
        self.client = client or LLMClient(
            model=self.config.ai_model,
            max_retries=self.config.max_retries,
            timeout_s=self.config.timeout_ms / 1000,
        )
        self.calls = 0

    async def _extract(self, domain: str, text: str):
        prompt = prompt_builder.PROMPT_BUILDERS[domain](text)
        self.calls += 1
        payload = await self.client.generate_json(prompt)
        if payload is None:
            return None
        # Array domains sometimes come back wrapped in an object.
        if domain in ("education", "work_experience", "projects") and isinstance(payload, dict):
            payload = next((v for v in payload.values() if isinstance(v, list)), [payload])
        try:
            return _ADAPTERS[domain].validate_python(payload)
        except ValidationError as e:
            logger.warning("AI %s output does not match schema: %s", domain, e.error_count())
            return None

    async def extract_basic_info(self, text: str) -> BasicInfo | None:
        return await self._extract("basic_info", text)

    async def extract_education(self, text: str) -> list[Education] | None:
        records = await self._extract("education", text)
        if records is None:
            return None
        return [r.model_copy(update={"degree": self._standard_degree(r.degree)}) for r in records]

    async def extract_experience(self, text: str) -> list[Experience] | None:
        return await self._extract("work_experience", text)

    async def extract_projects(self, text: str) -> list[Project] | None:
        return await self._extract("projects", text)

    async def extract_skills(self, text: str) -> Skills | None:
        return await self._extract("skills", text)

    async def extract_all(self, text: str) -> AIExtractionBatch:
        """Run all five prompts concurrently; failed domains stay ``None``."""
        basic_info, education, experience, projects, skills = await asyncio.gather(
            self._isolated("basic_info", self.extract_basic_info(text)),
            self._isolated("education", self.extract_education(text)),
            self._isolated("work_experience", self.extract_experience(text)),
            self._isolated("projects", self.extract_projects(text)),
            self._isolated("skills", self.extract_skills(text)),
        )
        return AIExtractionBatch(
            basic_info=basic_info,
            education=education,
            work_experience=experience,
            projects=projects,
            skills=skills,
        )

    @staticmethod
    async def _isolated(domain: str, call):
        try:
            return await call
        except Exception as e:
            logger.error("AI %s extraction failed: %s", domain, e)
            return None

    def _standard_degree(self, degree: str) -> str:
        if not degree:
            return degree
        for label, keywords in self.config.patterns.degrees.items():
            if degree == label or any(k in degree for k in keywords):
                return label
        return degree

    # -- utilities ----------------------------------------------------------

    async def check_availability(self) -> bool:
        return await self.client.check_availability()

    def get_model_info(self) -> dict:
        return {
            "provider": "DeepSeek",
            "model": self.client.model,
            "base_url": self.client.base_url,
            "configured": self.client.configured,
        }

    def estimate_cost(self, text: str) -> float:
        """Estimated price of one full run (all five prompts) over ``text``."""
        tokens = math.ceil(len(text) * TOKENS_PER_CHAR) * PROMPTS_PER_RUN
        return tokens / 1000 * settings.ai_price_per_1k_tokens
