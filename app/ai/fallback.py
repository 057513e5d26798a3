from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable

from app.ai.parsing import extract_json_object
from app.ai.types import InsightProvider, InsightRequest

logger = logging.getLogger(__name__)

RunLogger = Callable[..., None]


class FallbackInsightProvider:
    """Wrap an InsightProvider so scoring never sees its failures.

    ``fetch`` returns the parsed JSON payload, or an empty dict when the provider
    is disabled, raises, times out, or answers with something that is not a JSON
    object. Callers treat the empty dict as "use the deterministic narrative".
    """

    def __init__(self, provider: InsightProvider, *, run_logger: RunLogger | None = None):
        self._provider = provider
        self._run_logger = run_logger

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @property
    def enabled(self) -> bool:
        return self._provider.name != "none"

    def fetch(self, request: InsightRequest) -> dict[str, Any]:
        run_id = uuid.uuid4().hex
        started = time.perf_counter()

        def _elapsed_ms() -> int:
            return int((time.perf_counter() - started) * 1000)

        if not self.enabled:
            self._log_run(run_id, request, status="skipped", error_code="provider_disabled", latency_ms=0)
            return {}

        try:
            text = self._provider.complete(request)
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning(
                "insight_provider_failed task=%s provider=%s model=%s: %s",
                request.task,
                self._provider.name,
                self._provider.model,
                exc,
            )
            self._log_run(
                run_id,
                request,
                status="error",
                error_code=getattr(exc, "code", "provider_exception"),
                latency_ms=_elapsed_ms(),
            )
            return {}

        if not text:
            self._log_run(run_id, request, status="empty", error_code="empty_response", latency_ms=_elapsed_ms())
            return {}

        payload = extract_json_object(text)
        if payload is None:
            logger.warning(
                "insight_provider_invalid_json task=%s provider=%s response_len=%s",
                request.task,
                self._provider.name,
                len(text),
            )
            self._log_run(run_id, request, status="invalid_schema", error_code="invalid_json", latency_ms=_elapsed_ms())
            return {}

        self._log_run(run_id, request, status="success", error_code=None, latency_ms=_elapsed_ms())
        return payload

    def _log_run(
        self,
        run_id: str,
        request: InsightRequest,
        *,
        status: str,
        error_code: str | None,
        latency_ms: int,
    ) -> None:
        if self._run_logger is None:
            return
        try:
            self._run_logger(
                run_id=run_id,
                task=request.task,
                provider=self._provider.name,
                model=self._provider.model or "",
                status=status,
                error_code=error_code,
                latency_ms=latency_ms,
            )
        except Exception:  # pragma: no cover - run logging must not break scoring
            logger.debug("insight_run_logging_failed", exc_info=True)
