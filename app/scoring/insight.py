"""Merge an untrusted provider payload with a deterministic fallback Insight."""
from __future__ import annotations

from typing import Any

from app.schemas.career import ActionItem, Insight, ProjectIdea, RecommendedProblem

from .utils import coerce_score, safe_str, safe_str_list

_PRIORITIES = {"high", "medium", "low"}


def parse_action_plan(value: Any, max_items: int = 8) -> list[ActionItem]:
    if not isinstance(value, list):
        return []
    items: list[ActionItem] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        action = safe_str(raw.get("action"), max_len=300)
        if not action:
            continue
        priority = safe_str(raw.get("priority"), max_len=20).lower()
        items.append(
            ActionItem(
                action=action,
                priority=priority if priority in _PRIORITIES else "medium",
                timeline=safe_str(raw.get("timeline"), max_len=80),
            )
        )
        if len(items) >= max_items:
            break
    return items


def parse_recommended_problems(value: Any, max_items: int = 10) -> list[RecommendedProblem]:
    if not isinstance(value, list):
        return []
    problems: list[RecommendedProblem] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        title = safe_str(raw.get("title"), max_len=200)
        if not title:
            continue
        problems.append(
            RecommendedProblem(
                title=title,
                difficulty=safe_str(raw.get("difficulty"), max_len=20),
                topic=safe_str(raw.get("topic"), max_len=80),
                url=safe_str(raw.get("url"), max_len=500),
            )
        )
        if len(problems) >= max_items:
            break
    return problems


def parse_project_ideas(value: Any, max_items: int = 6) -> list[ProjectIdea]:
    if not isinstance(value, list):
        return []
    ideas: list[ProjectIdea] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        title = safe_str(raw.get("title"), max_len=200)
        if not title:
            continue
        ideas.append(
            ProjectIdea(
                title=title,
                goal=safe_str(raw.get("goal"), max_len=400),
                tech=safe_str_list(raw.get("tech"), max_items=8, max_len=60),
                impact=safe_str(raw.get("impact"), max_len=400),
            )
        )
        if len(ideas) >= max_items:
            break
    return ideas


def merge_insight(payload: dict[str, Any], fallback: Insight, **overrides: Any) -> Insight:
    """Take each narrative field from ``payload`` when valid, else from ``fallback``.

    ``overrides`` are applied last (scores computed by the caller).
    """
    if not payload:
        return fallback.model_copy(update=overrides)

    summary = safe_str(payload.get("summary"))
    strengths = safe_str_list(payload.get("strengths"), max_items=8)
    weaknesses = safe_str_list(payload.get("weaknesses"), max_items=8)
    recommendations = safe_str_list(payload.get("recommendations"), max_items=8)
    action_plan = parse_action_plan(payload.get("actionPlan"))

    merged = Insight(
        score=fallback.score,
        role_match_score=coerce_score(payload.get("roleMatchScore")),
        project_relevance_score=coerce_score(payload.get("projectRelevanceScore")),
        summary=summary or fallback.summary,
        strengths=strengths or fallback.strengths,
        weaknesses=weaknesses or fallback.weaknesses,
        recommendations=recommendations or fallback.recommendations,
        action_plan=action_plan or fallback.action_plan,
        required_topics=fallback.required_topics,
        focus_topics=fallback.focus_topics,
        recommended_problems=parse_recommended_problems(payload.get("recommendedProblems"))
        or fallback.recommended_problems,
        project_ideas=parse_project_ideas(payload.get("projectIdeas")) or fallback.project_ideas,
        source="provider",
    )
    return merged.model_copy(update=overrides)
