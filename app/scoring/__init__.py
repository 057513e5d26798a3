from .coding import analyze_coding, coding_score, focus_topics, skill_level
from .formatting import analyze_formatting
from .mistakes import collect_mistakes, sort_mistakes
from .portfolio import analyze_portfolio, baseline_score, blend_relevance
from .readiness import build_readiness, compute_overall
from .resume import UNREADABLE_MESSAGE, analyze_keywords, analyze_resume, heuristic_ats_score
from .roles import ROLE_RULES, RoleProfile, match_rule, practice_topics_for_role, resolve_role
from .sections import SectionExtractor, analyze_sections

__all__ = [
    "ROLE_RULES",
    "RoleProfile",
    "SectionExtractor",
    "UNREADABLE_MESSAGE",
    "analyze_coding",
    "analyze_formatting",
    "analyze_keywords",
    "analyze_portfolio",
    "analyze_resume",
    "analyze_sections",
    "baseline_score",
    "blend_relevance",
    "build_readiness",
    "coding_score",
    "collect_mistakes",
    "compute_overall",
    "focus_topics",
    "heuristic_ats_score",
    "match_rule",
    "practice_topics_for_role",
    "resolve_role",
    "skill_level",
    "sort_mistakes",
]
