from __future__ import annotations

from typing import Optional

from app.ai.types import InsightRequest


class NullInsightProvider:
    """Provider used when no LLM is configured; every request yields nothing."""

    name = "none"
    model = ""

    def complete(self, request: InsightRequest) -> Optional[str]:
        return None
