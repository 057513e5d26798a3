from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping

from app.schemas.career import ANALYSIS_TYPES, ReadinessScore, Weights

from .roles import resolve_role
from .utils import clamp_score, safe_div


def compute_overall(scores: Mapping[str, int | None], weights: Weights) -> int:
    """Weighted mean over the analyses that count (score > 0), renormalized by their weights."""
    weighted = 0.0
    weight_sum = 0.0
    for analysis_type in ANALYSIS_TYPES:
        score = scores.get(analysis_type) or 0
        if score > 0:
            weight = weights.for_type(analysis_type)
            weighted += score * weight
            weight_sum += weight
    return clamp_score(safe_div(weighted, weight_sum))


def build_readiness(
    user_id: str,
    scores: Mapping[str, int | None],
    target_role: str | None,
    now: datetime | None = None,
) -> ReadinessScore:
    role = resolve_role(target_role)
    return ReadinessScore(
        user_id=user_id,
        overall=compute_overall(scores, role.weights),
        coding_score=clamp_score(scores.get("coding") or 0),
        portfolio_score=clamp_score(scores.get("portfolio") or 0),
        resume_score=clamp_score(scores.get("resume") or 0),
        weights=role.weights,
        target_role=role.category,
        target_role_name=role.role_name,
        last_calculated=now or datetime.now(timezone.utc),
    )
