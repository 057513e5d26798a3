from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable

from app.ai.factory import get_insight_provider
from app.ai.fallback import FallbackInsightProvider
from app.core.config import Settings, settings
from app.schemas.career import (
    AllAnalysesResponse,
    AnalysisRecord,
    AnalysisType,
    CodingStats,
    Insight,
    PortfolioStats,
    ReadinessResponse,
    ReadinessScore,
)
from app.scoring import analyze_coding, analyze_portfolio, analyze_resume, build_readiness
from app.storage import AnalysisStore, AnalysisStoreError, get_analysis_store

logger = logging.getLogger(__name__)

AnalysisOutcome = tuple[int, dict, Insight]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CareerService:
    def __init__(
        self,
        store: AnalysisStore,
        insights: FallbackInsightProvider | None = None,
        config: Settings = settings,
    ):
        self.store = store
        self.config = config
        if insights is None:
            run_logger = store.log_insight_run if config.insight_run_logging else None
            insights = get_insight_provider(run_logger=run_logger)
        self.insights = insights

    def _role(self, target_role: str | None) -> str:
        return (target_role or "").strip() or self.config.default_target_role

    def _run(
        self,
        user_id: str,
        analysis_type: AnalysisType,
        raw_stats: dict,
        compute: Callable[[], AnalysisOutcome],
    ) -> AnalysisRecord:
        record = self.store.create_record(user_id, analysis_type, raw_stats)
        try:
            score, result, insight = compute()
            analyzed_at = _utc_now()
            completed = record.model_copy(
                update={
                    "status": "completed",
                    "score": score,
                    "result": result,
                    "insight": insight,
                    "analyzed_at": analyzed_at,
                    "expires_at": analyzed_at + timedelta(days=self.config.analysis_ttl_days),
                }
            )
            self.store.save(completed)
        except Exception as exc:
            logger.warning(
                "career_analysis_failed user_id=%s type=%s record_id=%s: %s",
                user_id,
                analysis_type,
                record.id,
                exc,
            )
            try:
                self.store.mark_failed(record, str(exc) or exc.__class__.__name__)
            except AnalysisStoreError:
                logger.exception("career_analysis_mark_failed_error record_id=%s", record.id)
            raise
        logger.info(
            "career_analysis_completed user_id=%s type=%s record_id=%s score=%s source=%s",
            user_id,
            analysis_type,
            completed.id,
            completed.score,
            insight.source,
        )
        return completed

    def _cached(
        self,
        user_id: str,
        analysis_type: AnalysisType,
        username: str,
        force_refresh: bool,
    ) -> AnalysisRecord | None:
        if force_refresh or not username or self.config.analysis_cache_hours <= 0:
            return None
        latest = self.store.get_latest_completed(user_id, analysis_type)
        if latest is None or latest.analyzed_at is None:
            return None
        if latest.raw_stats.get("username") != username:
            return None
        if latest.analyzed_at < _utc_now() - timedelta(hours=self.config.analysis_cache_hours):
            return None
        return latest

    def analyze_resume(self, user_id: str, resume_text: str, target_role: str | None) -> AnalysisRecord:
        role = self._role(target_role)
        raw_stats = {"target_role": role, "text_length": len(resume_text or "")}

        def compute() -> AnalysisOutcome:
            analysis = analyze_resume(resume_text, role, self.insights)
            return analysis.ats_score, analysis.model_dump(mode="json", exclude={"insight"}), analysis.insight

        with self.store.writer_lock(user_id, "resume"):
            return self._run(user_id, "resume", raw_stats, compute)

    def analyze_coding(
        self,
        user_id: str,
        stats: CodingStats,
        target_role: str | None,
        force_refresh: bool = False,
    ) -> tuple[AnalysisRecord, bool]:
        role = self._role(target_role)

        def compute() -> AnalysisOutcome:
            analysis = analyze_coding(stats, role, self.insights)
            return analysis.score, analysis.model_dump(mode="json", exclude={"insight"}), analysis.insight

        with self.store.writer_lock(user_id, "coding"):
            cached = self._cached(user_id, "coding", stats.username, force_refresh)
            if cached is not None:
                logger.info("career_analysis_cache_hit user_id=%s type=coding record_id=%s", user_id, cached.id)
                return cached, True
            return self._run(user_id, "coding", stats.model_dump(mode="json"), compute), False

    def analyze_portfolio(
        self,
        user_id: str,
        stats: PortfolioStats,
        target_role: str | None,
        force_refresh: bool = False,
    ) -> tuple[AnalysisRecord, bool]:
        role = self._role(target_role)

        def compute() -> AnalysisOutcome:
            analysis = analyze_portfolio(stats, role, self.insights)
            return analysis.score, analysis.model_dump(mode="json", exclude={"insight"}), analysis.insight

        with self.store.writer_lock(user_id, "portfolio"):
            cached = self._cached(user_id, "portfolio", stats.username, force_refresh)
            if cached is not None:
                logger.info("career_analysis_cache_hit user_id=%s type=portfolio record_id=%s", user_id, cached.id)
                return cached, True
            return self._run(user_id, "portfolio", stats.model_dump(mode="json"), compute), False

    def get_latest(self, user_id: str, analysis_type: AnalysisType) -> AnalysisRecord | None:
        return self.store.get_latest_completed(user_id, analysis_type)

    def get_all(self, user_id: str) -> AllAnalysesResponse:
        return AllAnalysesResponse(**self.store.get_latest_by_type(user_id))

    def calculate_readiness(self, user_id: str, target_role: str | None) -> ReadinessResponse:
        analyses = self.get_all(user_id)
        scores = {
            "coding": analyses.coding.score if analyses.coding else 0,
            "portfolio": analyses.portfolio.score if analyses.portfolio else 0,
            "resume": analyses.resume.score if analyses.resume else 0,
        }
        readiness = build_readiness(user_id, scores, self._role(target_role))
        self.store.save_readiness(readiness)
        logger.info(
            "career_readiness_calculated user_id=%s overall=%s role_category=%s",
            user_id,
            readiness.overall,
            readiness.target_role,
        )
        return ReadinessResponse(readiness_score=readiness, analyses=analyses)

    def get_readiness(self, user_id: str) -> ReadinessScore | None:
        return self.store.get_readiness(user_id)


@lru_cache(maxsize=1)
def get_career_service() -> CareerService:
    return CareerService(get_analysis_store())
