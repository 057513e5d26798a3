"""Map a free-text target role to a role category, keyword profile and score weights.

Rules are evaluated top to bottom; the first rule with any substring contained in
the lowercased role name wins, and the default row applies when none match.
"""
from __future__ import annotations

from dataclasses import dataclass

from app.schemas.career import Weights

COMMON_KEYWORDS: tuple[str, ...] = ("teamwork", "communication", "problem solving", "leadership")


@dataclass(frozen=True)
class RoleKeywordProfile:
    category: str
    required_keywords: tuple[str, ...]
    recommended_keywords: tuple[str, ...]


@dataclass(frozen=True)
class RoleRule:
    category: str
    substrings: tuple[str, ...]
    profile: RoleKeywordProfile
    weights: Weights

    def matches(self, role: str) -> bool:
        return any(token in role for token in self.substrings)


@dataclass(frozen=True)
class RoleProfile:
    role_name: str
    category: str
    keywords: RoleKeywordProfile
    weights: Weights


def _profile(category: str, required: tuple[str, ...], recommended: tuple[str, ...]) -> RoleKeywordProfile:
    return RoleKeywordProfile(
        category=category,
        required_keywords=required + COMMON_KEYWORDS,
        recommended_keywords=recommended,
    )


_GENERAL_PROFILE = _profile(
    "general",
    ("programming", "software", "development", "git", "testing", "agile"),
    ("java", "python", "javascript", "c++", "docker", "aws"),
)
_DEVOPS_PROFILE = _profile(
    "devops",
    ("docker", "kubernetes", "ci/cd", "aws", "linux", "automation"),
    ("terraform", "ansible", "jenkins", "prometheus", "grafana"),
)
_BACKEND_PROFILE = _profile(
    "backend",
    ("api", "database", "server", "rest", "sql", "node"),
    ("microservices", "docker", "kubernetes", "aws", "redis", "mongodb"),
)
_FRONTEND_PROFILE = _profile(
    "frontend",
    ("html", "css", "javascript", "react", "responsive", "ui"),
    ("typescript", "vue", "angular", "webpack", "sass", "tailwind"),
)
_DATA_PROFILE = _profile(
    "data",
    ("python", "sql", "machine learning", "data", "analysis", "statistics"),
    ("tensorflow", "pytorch", "pandas", "scikit", "deep learning", "nlp"),
)
_FULLSTACK_PROFILE = _profile(
    "fullstack",
    ("javascript", "react", "node", "api", "database", "git"),
    ("typescript", "docker", "aws", "ci/cd", "agile", "testing"),
)

ROLE_RULES: tuple[RoleRule, ...] = (
    RoleRule(
        category="software_engineering",
        substrings=("algorithm", "competitive", "sde", "software engineer"),
        profile=_GENERAL_PROFILE,
        weights=Weights(coding=0.45, portfolio=0.35, resume=0.20),
    ),
    RoleRule(
        category="devops",
        substrings=("devops", "cloud", "sre", "site reliability"),
        profile=_DEVOPS_PROFILE,
        weights=Weights(coding=0.30, portfolio=0.45, resume=0.25),
    ),
    RoleRule(
        category="backend",
        substrings=("backend", "back-end", "back end", "system", "api"),
        profile=_BACKEND_PROFILE,
        weights=Weights(coding=0.30, portfolio=0.45, resume=0.25),
    ),
    RoleRule(
        category="frontend",
        substrings=("frontend", "front-end", "front end", "ui", "web", "mobile"),
        profile=_FRONTEND_PROFILE,
        weights=Weights(coding=0.20, portfolio=0.50, resume=0.30),
    ),
    RoleRule(
        category="data",
        substrings=("data", "ml", "machine learning", "ai", "scientist"),
        profile=_DATA_PROFILE,
        weights=Weights(coding=0.35, portfolio=0.40, resume=0.25),
    ),
    RoleRule(
        category="fullstack",
        substrings=("full stack", "fullstack", "full-stack"),
        profile=_FULLSTACK_PROFILE,
        weights=Weights(coding=0.33, portfolio=0.37, resume=0.30),
    ),
)

DEFAULT_RULE = RoleRule(
    category="general",
    substrings=(),
    profile=_GENERAL_PROFILE,
    weights=Weights(coding=0.33, portfolio=0.34, resume=0.33),
)


def match_rule(role_name: str | None, rules: tuple[RoleRule, ...] = ROLE_RULES) -> RoleRule:
    role = (role_name or "").strip().lower()
    if role:
        for rule in rules:
            if rule.matches(role):
                return rule
    return DEFAULT_RULE


def resolve_role(role_name: str | None) -> RoleProfile:
    rule = match_rule(role_name)
    return RoleProfile(
        role_name=(role_name or "").strip(),
        category=rule.category,
        keywords=rule.profile,
        weights=rule.weights,
    )


# Practice topics by role; first key contained in the role name wins.
ROLE_PRACTICE_TOPICS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("frontend", ("Array", "String", "Hash Table", "Two Pointers", "Stack", "Queue", "Graph", "Tree", "Greedy")),
    ("backend", ("Tree", "Graph", "Heap", "Binary Search", "Dynamic Programming", "Design", "Hash Table")),
    ("full stack", ("Array", "String", "Hash Table", "Tree", "Graph", "Dynamic Programming", "Greedy")),
    ("data", ("Array", "Hash Table", "Two Pointers", "Sorting", "Binary Search", "Heap", "Dynamic Programming")),
    ("ml", ("Array", "Hash Table", "Graph", "Dynamic Programming", "Greedy", "Math")),
    ("devops", ("Graph", "Tree", "Heap", "Greedy", "Design")),
    ("mobile", ("Array", "String", "Hash Table", "Tree", "Dynamic Programming", "Greedy")),
    ("game", ("Array", "Math", "Graph", "Dynamic Programming", "Geometry")),
)
DEFAULT_PRACTICE_TOPICS: tuple[str, ...] = ("Array", "String", "Hash Table", "Tree", "Graph", "Dynamic Programming")


def practice_topics_for_role(role_name: str | None) -> tuple[str, ...]:
    role = (role_name or "").strip().lower()
    for key, topics in ROLE_PRACTICE_TOPICS:
        if key in role:
            return topics
    return DEFAULT_PRACTICE_TOPICS
