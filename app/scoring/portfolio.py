from __future__ import annotations

from app.ai.fallback import FallbackInsightProvider
from app.ai.types import InsightRequest
from app.core.config.scoring import get_scoring_float, get_scoring_int
from app.schemas.career import Insight, PortfolioAnalysis, PortfolioStats

from .insight import merge_insight
from .utils import clamp_score, coerce_score

NO_REPOSITORIES_MESSAGE = "No public repositories found. Publish a project to get a portfolio score."


def baseline_score(stats: PortfolioStats) -> int:
    repos = min(
        stats.public_repos / get_scoring_float("portfolio.divisors.repos", 2),
        get_scoring_float("portfolio.caps.repos", 30),
    )
    stars = min(
        stats.total_stars / get_scoring_float("portfolio.divisors.stars", 5),
        get_scoring_float("portfolio.caps.stars", 40),
    )
    followers = min(
        stats.followers / get_scoring_float("portfolio.divisors.followers", 10),
        get_scoring_float("portfolio.caps.followers", 30),
    )
    return clamp_score(repos + stars + followers)


def blend_relevance(baseline: int, relevance: int) -> int:
    return clamp_score(
        baseline * get_scoring_float("portfolio.ai_blend.baseline", 0.4)
        + relevance * get_scoring_float("portfolio.ai_blend.relevance", 0.6)
    )


def tech_stack(stats: PortfolioStats) -> list[str]:
    ordered = sorted(stats.language_breakdown, key=lambda share: (-share.percentage, -share.bytes))
    stack: list[str] = []
    for share in ordered:
        if share.language not in stack:
            stack.append(share.language)
    if not stack:
        for repo in stats.top_repositories:
            if repo.language and repo.language not in stack:
                stack.append(repo.language)
    return stack


def _excerpt(stats: PortfolioStats) -> str:
    limit = get_scoring_int("portfolio.max_repositories_in_prompt", 5)
    repos = "\n".join(
        f"- {repo.name}: {repo.description or 'No description'} ({repo.language or 'Unknown'})"
        for repo in stats.top_repositories[:limit]
    )
    languages = ", ".join(f"{share.language} ({share.percentage}%)" for share in stats.language_breakdown) or "N/A"
    return (
        "Stats:\n"
        f"- Public Repos: {stats.public_repos}\n"
        f"- Total Stars: {stats.total_stars}\n"
        f"- Total Forks: {stats.total_forks}\n"
        f"- Followers: {stats.followers}\n"
        f"Top Repositories:\n{repos or 'None'}\n"
        f"Top Languages: {languages}"
    )


def fallback_portfolio_insight(score: int) -> Insight:
    return Insight(
        score=score,
        summary="Your GitHub profile shows ongoing project activity.",
        strengths=["Active repositories"],
        weaknesses=["Limited project visibility"],
        recommendations=["Add stronger READMEs"],
        source="fallback",
    )


def analyze_portfolio(
    stats: PortfolioStats,
    target_role: str | None,
    insights: FallbackInsightProvider | None = None,
) -> PortfolioAnalysis:
    role_name = (target_role or "").strip() or "Software Developer"
    baseline = baseline_score(stats)
    stack = tech_stack(stats)

    if stats.public_repos <= 0 and not stats.top_repositories:
        score = blend_relevance(baseline, baseline)
        return PortfolioAnalysis(
            score=score,
            baseline_score=baseline,
            relevance_score=baseline,
            target_role=role_name,
            tech_stack=stack,
            message=NO_REPOSITORIES_MESSAGE,
            insight=fallback_portfolio_insight(score),
        )

    payload: dict = {}
    if insights is not None:
        payload = insights.fetch(InsightRequest(task="portfolio", target_role=role_name, input_excerpt=_excerpt(stats)))

    relevance = coerce_score(payload.get("projectRelevanceScore")) if payload else None
    if relevance is None:
        relevance = baseline
    score = blend_relevance(baseline, relevance)

    fallback = fallback_portfolio_insight(score)
    insight = merge_insight(payload, fallback, score=score, project_relevance_score=relevance)
    return PortfolioAnalysis(
        score=score,
        baseline_score=baseline,
        relevance_score=relevance,
        target_role=role_name,
        tech_stack=stack,
        insight=insight,
    )
