import logging

from app.ai.config import load_ai_config
from app.ai.fallback import FallbackInsightProvider, RunLogger
from app.ai.providers.null_provider import NullInsightProvider
from app.ai.providers.openai_provider import OpenAIInsightProvider
from app.ai.types import InsightProvider

logger = logging.getLogger(__name__)

_DISABLED = {"", "none", "null", "off", "disabled"}


def build_insight_provider() -> InsightProvider:
    cfg = load_ai_config()

    if cfg.provider == "openai":
        if not cfg.api_key:
            logger.info("insight_provider_disabled reason=missing_api_key")
            return NullInsightProvider()
        return OpenAIInsightProvider(
            model=cfg.model,
            api_key=cfg.api_key,
            base_url=cfg.base_url,
            timeout_s=cfg.timeout_s,
            max_retries=cfg.max_retries,
        )

    if cfg.provider not in _DISABLED:
        logger.warning("insight_provider_unsupported provider=%s", cfg.provider)
    return NullInsightProvider()


def get_insight_provider(run_logger: RunLogger | None = None) -> FallbackInsightProvider:
    return FallbackInsightProvider(build_insight_provider(), run_logger=run_logger)
