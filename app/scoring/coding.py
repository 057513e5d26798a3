from __future__ import annotations

import logging

from app.ai.fallback import FallbackInsightProvider
from app.ai.types import InsightRequest
from app.core.config.scoring import get_scoring_float, get_scoring_int
from app.schemas.career import (
    ActionItem,
    CodingAnalysis,
    CodingStats,
    Insight,
    RecommendedProblem,
    SkillLevel,
    TopicCoverage,
)

from .insight import merge_insight
from .roles import practice_topics_for_role
from .utils import clamp_score, safe_div, safe_str_list

logger = logging.getLogger(__name__)

NO_ACTIVITY_MESSAGE = "No solved problems found yet. Solve a few problems to get a coding score."

DEFAULT_PROBLEMS: tuple[RecommendedProblem, ...] = (
    RecommendedProblem(title="Two Sum", difficulty="Easy", topic="Array", url="https://leetcode.com/problems/two-sum/"),
    RecommendedProblem(
        title="Valid Parentheses",
        difficulty="Easy",
        topic="Stack",
        url="https://leetcode.com/problems/valid-parentheses/",
    ),
    RecommendedProblem(
        title="Longest Substring Without Repeating Characters",
        difficulty="Medium",
        topic="String",
        url="https://leetcode.com/problems/longest-substring-without-repeating-characters/",
    ),
    RecommendedProblem(
        title="Binary Tree Level Order Traversal",
        difficulty="Medium",
        topic="Tree",
        url="https://leetcode.com/problems/binary-tree-level-order-traversal/",
    ),
    RecommendedProblem(
        title="Course Schedule",
        difficulty="Medium",
        topic="Graph",
        url="https://leetcode.com/problems/course-schedule/",
    ),
)


def coding_score(stats: CodingStats) -> int:
    total = stats.total_solved
    if total <= 0:
        return 0
    volume = min(
        total / get_scoring_float("coding.volume_divisor", 5),
        get_scoring_float("coding.max_volume_points", 40),
    )
    medium_ratio = safe_div(stats.medium_solved, total)
    hard_ratio = safe_div(stats.hard_solved, total)
    return clamp_score(
        volume
        + medium_ratio * get_scoring_float("coding.medium_weight", 30)
        + hard_ratio * get_scoring_float("coding.hard_weight", 20)
        + stats.acceptance_rate * get_scoring_float("coding.acceptance_weight", 0.1)
    )


def skill_level(total_solved: int) -> SkillLevel:
    if total_solved >= get_scoring_int("coding.skill_levels.advanced", 500):
        return "advanced"
    if total_solved >= get_scoring_int("coding.skill_levels.intermediate", 200):
        return "intermediate"
    return "beginner"


def focus_topics(required_topics: tuple[str, ...] | list[str], topic_wise: list[TopicCoverage]) -> list[str]:
    """Weakest-covered required topics first: ascending solve ratio, then ascending solved count."""
    count = get_scoring_int("coding.focus_topic_count", 4)
    required = set(required_topics)
    covered = [entry for entry in topic_wise if entry.topic in required]
    covered.sort(key=lambda entry: (safe_div(entry.solved, entry.total), entry.solved))
    if covered:
        return [entry.topic for entry in covered[:count]]
    return list(required_topics[:count])


def _excerpt(stats: CodingStats, level: SkillLevel, required_topics: tuple[str, ...]) -> str:
    coverage = "\n".join(f"- {entry.topic}: {entry.solved}/{entry.total}" for entry in stats.topic_wise) or "No data"
    return (
        f"Skill level: {level}\n"
        "Stats:\n"
        f"- Total Solved: {stats.total_solved}\n"
        f"- Easy: {stats.easy_solved}\n"
        f"- Medium: {stats.medium_solved}\n"
        f"- Hard: {stats.hard_solved}\n"
        f"- Acceptance Rate: {stats.acceptance_rate}%\n"
        f"Role focus topics: {', '.join(required_topics) or 'N/A'}\n"
        f"Topic coverage (topic, solved, total):\n{coverage}"
    )


def fallback_coding_insight(score: int, required_topics: list[str], focus: list[str]) -> Insight:
    return Insight(
        score=score,
        summary="Your LeetCode profile shows steady progress.",
        strengths=["Consistent problem solving", "Good acceptance rate"],
        weaknesses=["Need more hard problems", "Focus on dynamic programming"],
        recommendations=["Practice daily", "Focus on weak topics"],
        action_plan=[ActionItem(action="Solve 2 medium problems daily", priority="high", timeline="2 weeks")],
        required_topics=required_topics,
        focus_topics=focus,
        recommended_problems=list(DEFAULT_PROBLEMS),
        source="fallback",
    )


def analyze_coding(
    stats: CodingStats,
    target_role: str | None,
    insights: FallbackInsightProvider | None = None,
) -> CodingAnalysis:
    role_name = (target_role or "").strip() or "Software Developer"
    score = coding_score(stats)
    level = skill_level(stats.total_solved)
    role_topics = practice_topics_for_role(role_name)

    required = list(role_topics)
    focus = focus_topics(role_topics, stats.topic_wise)
    fallback = fallback_coding_insight(score, required, focus)

    if stats.total_solved <= 0:
        return CodingAnalysis(
            score=0,
            skill_level=level,
            target_role=role_name,
            message=NO_ACTIVITY_MESSAGE,
            insight=fallback,
        )

    payload: dict = {}
    if insights is not None:
        payload = insights.fetch(
            InsightRequest(task="coding", target_role=role_name, input_excerpt=_excerpt(stats, level, role_topics))
        )

    if not payload:
        insight = fallback
    else:
        provider_required = safe_str_list(payload.get("requiredTopics"), max_items=12, max_len=80)
        provider_focus = safe_str_list(payload.get("focusTopics"), max_items=6, max_len=80)
        if not (provider_required and provider_focus):
            logger.info("coding_topics_fallback role=%s", role_name)
            provider_required, provider_focus = required, focus
        insight = merge_insight(
            payload,
            fallback,
            score=score,
            required_topics=provider_required,
            focus_topics=provider_focus,
        )

    return CodingAnalysis(score=score, skill_level=level, target_role=role_name, insight=insight)
