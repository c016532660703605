import os

from pydantic_settings import BaseSettings

from models.schemas.extractor_config import ExtractorConfig
from services.patterns.library import load_english_patterns, load_patterns


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    deepseek_api_key: str = ""
    ai_base_url: str = "https://api.deepseek.com/v1"
    ai_model: str = "deepseek-chat"
    ai_price_per_1k_tokens: float = 0.0014
    enable_ai_extraction: bool = False
    extraction_mode: str = "default"  # "default" | "high_accuracy" | "fast" | "english"
    max_upload_size_mb: int = 5
    max_text_length: int = 50000
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    log_level: str = "INFO"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})


# Extraction presets. They differ only in these values; the AI switch of the
# default preset follows ENABLE_AI_EXTRACTION.
def _default_config() -> ExtractorConfig:
    return ExtractorConfig(
        enable_ai_assistance=settings.enable_ai_extraction,
        ai_model=settings.ai_model,
        confidence_threshold=0.6,
        max_retries=3,
        timeout_ms=30000,
        language="zh-CN",
        patterns=load_patterns(),
    )


def _high_accuracy_config() -> ExtractorConfig:
    return _default_config().model_copy(update={
        "enable_ai_assistance": True,
        "confidence_threshold": 0.8,
        "max_retries": 5,
        "timeout_ms": 60000,
    })


def _fast_config() -> ExtractorConfig:
    return _default_config().model_copy(update={
        "enable_ai_assistance": False,
        "confidence_threshold": 0.5,
        "max_retries": 1,
        "timeout_ms": 15000,
    })


def _english_config() -> ExtractorConfig:
    return _default_config().model_copy(update={
        "language": "en-US",
        "patterns": load_english_patterns(),
    })


PRESETS = {
    "default": _default_config,
    "high_accuracy": _high_accuracy_config,
    "fast": _fast_config,
    "english": _english_config,
}


def get_extractor_config(mode: str | None = None) -> ExtractorConfig:
    """Resolve a preset by name, falling back to EXTRACTION_MODE then default."""
    factory = PRESETS.get((mode or settings.extraction_mode).lower(), _default_config)
    return factory()


def create_custom_config(**overrides) -> ExtractorConfig:
    """Default preset with the given fields replaced (validated)."""
    base = _default_config().model_dump()
    base.update(overrides)
    return ExtractorConfig.model_validate(base)
