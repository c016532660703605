"""Shared dependencies for API routes."""

from functools import lru_cache

from services.extraction_service import ExtractionService


@lru_cache
def get_extraction_service() -> ExtractionService:
    return ExtractionService()
