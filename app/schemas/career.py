from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

AnalysisType = Literal["coding", "portfolio", "resume"]
AnalysisStatus = Literal["pending", "processing", "completed", "failed"]
Severity = Literal["high", "medium", "low"]
SkillLevel = Literal["beginner", "intermediate", "advanced"]
InsightSource = Literal["provider", "fallback"]

ANALYSIS_TYPES: tuple[AnalysisType, ...] = ("coding", "portfolio", "resume")
FINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed"})


class SectionScore(BaseModel):
    score: int = Field(ge=0, le=100)
    feedback: str


class ResumeSections(BaseModel):
    contact: SectionScore
    summary: SectionScore
    experience: SectionScore
    education: SectionScore
    skills: SectionScore
    projects: SectionScore

    def scores(self) -> list[int]:
        return [
            self.contact.score,
            self.summary.score,
            self.experience.score,
            self.education.score,
            self.skills.score,
            self.projects.score,
        ]


class KeywordReport(BaseModel):
    found: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    recommended: list[str] = Field(default_factory=list)


class FormattingReport(BaseModel):
    score: int = Field(ge=0, le=100)
    issues: list[str] = Field(default_factory=list)


class Mistake(BaseModel):
    severity: Severity
    category: str
    issue: str
    fix: str


class ActionItem(BaseModel):
    action: str
    priority: Severity = "medium"
    timeline: str = ""


class RecommendedProblem(BaseModel):
    title: str
    difficulty: str = ""
    topic: str = ""
    url: str = ""


class ProjectIdea(BaseModel):
    title: str
    goal: str = ""
    tech: list[str] = Field(default_factory=list)
    impact: str = ""


class Insight(BaseModel):
    score: int | None = Field(default=None, ge=0, le=100)
    role_match_score: int | None = Field(default=None, ge=0, le=100)
    project_relevance_score: int | None = Field(default=None, ge=0, le=100)
    summary: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    action_plan: list[ActionItem] = Field(default_factory=list)
    required_topics: list[str] = Field(default_factory=list)
    focus_topics: list[str] = Field(default_factory=list)
    recommended_problems: list[RecommendedProblem] = Field(default_factory=list)
    project_ideas: list[ProjectIdea] = Field(default_factory=list)
    source: InsightSource = "fallback"


class ResumeAnalysis(BaseModel):
    readable: bool = True
    message: str | None = None
    target_role: str
    role_category: str
    ats_score: int = Field(ge=0, le=100)
    heuristic_score: int = Field(ge=0, le=100)
    sections: ResumeSections | None = None
    keywords: KeywordReport = Field(default_factory=KeywordReport)
    formatting: FormattingReport | None = None
    mistakes: list[Mistake] = Field(default_factory=list)
    insight: Insight


class TopicCoverage(BaseModel):
    topic: str = Field(min_length=1, max_length=120)
    solved: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)


class CodingStats(BaseModel):
    username: str = Field(default="", max_length=120)
    total_solved: int = Field(default=0, ge=0)
    easy_solved: int = Field(default=0, ge=0)
    medium_solved: int = Field(default=0, ge=0)
    hard_solved: int = Field(default=0, ge=0)
    acceptance_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    ranking: int | None = Field(default=None, ge=0)
    topic_wise: list[TopicCoverage] = Field(default_factory=list, max_length=200)


class CodingAnalysis(BaseModel):
    score: int = Field(ge=0, le=100)
    skill_level: SkillLevel
    target_role: str
    message: str | None = None
    insight: Insight


class RepositoryMeta(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    language: str | None = Field(default=None, max_length=80)
    stars: int = Field(default=0, ge=0)
    forks: int = Field(default=0, ge=0)
    url: str | None = Field(default=None, max_length=500)


class LanguageShare(BaseModel):
    language: str = Field(min_length=1, max_length=80)
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    bytes: int = Field(default=0, ge=0)


class PortfolioStats(BaseModel):
    username: str = Field(default="", max_length=120)
    public_repos: int = Field(default=0, ge=0)
    total_stars: int = Field(default=0, ge=0)
    total_forks: int = Field(default=0, ge=0)
    followers: int = Field(default=0, ge=0)
    following: int = Field(default=0, ge=0)
    top_repositories: list[RepositoryMeta] = Field(default_factory=list, max_length=100)
    language_breakdown: list[LanguageShare] = Field(default_factory=list, max_length=50)


class PortfolioAnalysis(BaseModel):
    score: int = Field(ge=0, le=100)
    baseline_score: int = Field(ge=0, le=100)
    relevance_score: int = Field(ge=0, le=100)
    target_role: str
    tech_stack: list[str] = Field(default_factory=list)
    message: str | None = None
    insight: Insight


class Weights(BaseModel):
    model_config = ConfigDict(frozen=True)

    coding: float = Field(ge=0.0, le=1.0)
    portfolio: float = Field(ge=0.0, le=1.0)
    resume: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _validate_sum(self) -> "Weights":
        total = self.coding + self.portfolio + self.resume
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"weights must sum to 1.0, got {total:.4f}")
        return self

    def for_type(self, analysis_type: AnalysisType) -> float:
        return float(getattr(self, analysis_type))


class AnalysisRecord(BaseModel):
    id: str
    user_id: str
    type: AnalysisType
    raw_stats: dict[str, Any] = Field(default_factory=dict)
    result: dict[str, Any] = Field(default_factory=dict)
    score: int = Field(default=0, ge=0, le=100)
    insight: Insight | None = None
    status: AnalysisStatus = "pending"
    error: str | None = None
    analyzed_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_STATUSES


class ReadinessScore(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    overall: int = Field(ge=0, le=100)
    coding_score: int = Field(ge=0, le=100)
    portfolio_score: int = Field(ge=0, le=100)
    resume_score: int = Field(ge=0, le=100)
    weights: Weights
    target_role: str
    target_role_name: str = ""
    last_calculated: datetime


class ResumeAnalyzeRequest(BaseModel):
    resume_text: str = Field(default="", max_length=50000)
    target_role: str | None = Field(default=None, max_length=200)


class CodingAnalyzeRequest(BaseModel):
    stats: CodingStats
    target_role: str | None = Field(default=None, max_length=200)
    force_refresh: bool = False


class PortfolioAnalyzeRequest(BaseModel):
    stats: PortfolioStats
    target_role: str | None = Field(default=None, max_length=200)
    force_refresh: bool = False


class ReadinessRequest(BaseModel):
    target_role: str | None = Field(default=None, max_length=200)


class AnalysisResponse(BaseModel):
    cached: bool = False
    record: AnalysisRecord


class LatestAnalysisResponse(BaseModel):
    record: AnalysisRecord | None = None
    message: str | None = None


class AllAnalysesResponse(BaseModel):
    coding: AnalysisRecord | None = None
    portfolio: AnalysisRecord | None = None
    resume: AnalysisRecord | None = None


class ReadinessResponse(BaseModel):
    readiness_score: ReadinessScore
    analyses: AllAnalysesResponse
