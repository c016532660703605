"""Persistence collaborator for extraction results."""

import copy
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Saving an extraction result failed."""


class ResumeRepository(ABC):
    @abstractmethod
    def update(self, resume_id: str, data: dict) -> None:
        """Store ``data`` (the five domain payloads plus ``parsed_data``) for a resume."""


class InMemoryResumeRepository(ResumeRepository):
    def __init__(self):
        self._records: dict[str, dict] = {}

    def update(self, resume_id: str, data: dict) -> None:
        self._records.setdefault(resume_id, {}).update(copy.deepcopy(data))
        logger.debug("Stored extraction result for resume %s", resume_id)

    def get(self, resume_id: str) -> dict | None:
        record = self._records.get(resume_id)
        return copy.deepcopy(record) if record is not None else None
