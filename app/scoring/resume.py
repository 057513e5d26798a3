from __future__ import annotations

import logging

from app.ai.fallback import FallbackInsightProvider
from app.ai.types import InsightRequest
from app.core.config.scoring import get_scoring_float, get_scoring_int
from app.schemas.career import ActionItem, Insight, KeywordReport, ResumeAnalysis, ResumeSections

from .formatting import analyze_formatting
from .insight import merge_insight
from .mistakes import collect_mistakes
from .roles import RoleKeywordProfile, resolve_role
from .sections import analyze_sections
from .utils import clamp_score, collapse_whitespace, coerce_score, safe_div

logger = logging.getLogger(__name__)

UNREADABLE_MESSAGE = "We could not read the content of your résumé. Please upload a clearer copy."


def analyze_keywords(text: str, profile: RoleKeywordProfile) -> KeywordReport:
    lowered = text.lower()
    found = [kw for kw in profile.required_keywords if kw.lower() in lowered]
    missing = [kw for kw in profile.required_keywords if kw.lower() not in lowered]
    recommended = [kw for kw in profile.recommended_keywords if kw.lower() not in lowered]
    return KeywordReport(
        found=found,
        missing=missing[: get_scoring_int("resume.keyword_caps.missing", 10)],
        recommended=recommended[: get_scoring_int("resume.keyword_caps.recommended", 5)],
    )


def heuristic_ats_score(
    sections: ResumeSections,
    found_count: int,
    required_count: int,
    formatting_score: int,
) -> int:
    scores = sections.scores()
    section_avg = sum(scores) / len(scores)
    keyword_score = safe_div(found_count, required_count) * 100
    return clamp_score(
        section_avg * get_scoring_float("resume.ats_weights.sections", 0.60)
        + keyword_score * get_scoring_float("resume.ats_weights.keywords", 0.25)
        + formatting_score * get_scoring_float("resume.ats_weights.formatting", 0.15)
    )


def blend_role_match(heuristic: int, role_match: int | None) -> int:
    if role_match is None:
        return heuristic
    return clamp_score(
        heuristic * get_scoring_float("resume.ai_blend.heuristic", 0.5)
        + role_match * get_scoring_float("resume.ai_blend.role_match", 0.5)
    )


def fallback_resume_insight(
    role_name: str,
    heuristic: int,
    sections: ResumeSections,
    keywords: KeywordReport,
) -> Insight:
    return Insight(
        score=heuristic,
        summary=f"Resume analyzed for {role_name} position. Score: {heuristic}/100.",
        strengths=["Relevant work experience documented"] if sections.experience.score > 70 else [],
        weaknesses=["Missing key technical skills"] if len(keywords.missing) > 5 else [],
        recommendations=[
            "Add more quantifiable achievements",
            f"Include relevant keywords for {role_name}",
        ],
        action_plan=[
            ActionItem(
                action="Add missing keywords: " + ", ".join(keywords.missing[:3]),
                priority="high",
                timeline="1-2 days",
            ),
            ActionItem(action="Quantify achievements with metrics", priority="medium", timeline="3-5 days"),
        ],
        source="fallback",
    )


def analyze_resume(
    text: str,
    target_role: str | None,
    insights: FallbackInsightProvider | None = None,
) -> ResumeAnalysis:
    role = resolve_role(target_role)
    role_name = role.role_name or "Software Developer"
    text = text or ""

    if len(collapse_whitespace(text)) < get_scoring_int("resume.min_readable_chars", 20):
        logger.info("resume_unreadable role_category=%s text_len=%s", role.category, len(text))
        return ResumeAnalysis(
            readable=False,
            message=UNREADABLE_MESSAGE,
            target_role=role_name,
            role_category=role.category,
            ats_score=0,
            heuristic_score=0,
            insight=Insight(score=0, summary=UNREADABLE_MESSAGE, source="fallback"),
        )

    sections, signals = analyze_sections(text, role.keywords)
    keywords = analyze_keywords(text, role.keywords)
    formatting, findings = analyze_formatting(text)
    mistakes = collect_mistakes(
        text,
        sections,
        signals,
        formatting,
        findings,
        [kw for kw in role.keywords.required_keywords if kw not in keywords.found],
    )
    heuristic = heuristic_ats_score(
        sections,
        len(keywords.found),
        len(role.keywords.required_keywords),
        formatting.score,
    )

    fallback = fallback_resume_insight(role_name, heuristic, sections, keywords)
    payload: dict = {}
    if insights is not None:
        excerpt = text[: get_scoring_int("resume.insight_excerpt_chars", 3000)]
        payload = insights.fetch(InsightRequest(task="resume", target_role=role_name, input_excerpt=excerpt))

    role_match = coerce_score(payload.get("roleMatchScore")) if payload else None
    if role_match is None:
        insight = fallback
        ats = heuristic
    else:
        ats = blend_role_match(heuristic, role_match)
        insight = merge_insight(payload, fallback, score=ats, role_match_score=role_match)

    return ResumeAnalysis(
        readable=True,
        target_role=role_name,
        role_category=role.category,
        ats_score=ats,
        heuristic_score=heuristic,
        sections=sections,
        keywords=keywords,
        formatting=formatting,
        mistakes=mistakes,
        insight=insight,
    )
