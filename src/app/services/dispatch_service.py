from __future__ import annotations

import logging
from dataclasses import dataclass

from src.app.ports.output import IChiefComplaintClassifier, IDispatchRecordRepository
from src.domain.algorithms.chief_complaint import clean_summary, extract_chief_complaint
from src.domain.exceptions import ConfigurationError
from src.domain.models import DispatchRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchService:
    """Dispatch-call list and chief-complaint classification.

    - Records are relayed from the record store as-is.
    - Classification asks the language model when one is configured and
      falls back to keyword extraction on any failure.
    """

    repository: IDispatchRecordRepository | None = None
    classifier: IChiefComplaintClassifier | None = None

    async def list_recent(self) -> tuple[DispatchRecord, ...]:
        if self.repository is None:
            raise ConfigurationError("Dispatch record store not configured")
        return await self.repository.list_recent()

    async def classify_summary(self, summary: str) -> str:
        text = clean_summary(summary)
        if not text or self.classifier is None:
            return extract_chief_complaint(text)

        try:
            complaint = (await self.classifier.classify(text)).strip()
        except Exception as exc:
            logger.warning("Chief complaint classification failed: %s", exc)
            return extract_chief_complaint(text)

        return complaint or extract_chief_complaint(text)
