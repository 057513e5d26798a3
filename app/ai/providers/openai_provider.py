from __future__ import annotations

import os
from typing import Optional

from openai import OpenAI, OpenAIError

from app.ai.prompts import SYSTEM_PROMPT, build_user_prompt
from app.ai.types import InsightProviderError, InsightRequest


class OpenAIInsightProvider:
    name = "openai"

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 20.0,
        max_retries: int = 0,
        temperature: float = 0.2,
        max_output_tokens: int = 900,
    ):
        self.model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if not key:
            raise InsightProviderError("OPENAI_API_KEY is missing", code="not_configured")

        self._client = OpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    def complete(self, request: InsightRequest) -> Optional[str]:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(request)},
                ],
                temperature=self._temperature,
                response_format={"type": "json_object"},
                max_tokens=self._max_output_tokens,
            )
        except OpenAIError as exc:
            raise InsightProviderError(str(exc), code="provider_error") from exc

        content = response.choices[0].message.content if response.choices else ""
        return content or None
