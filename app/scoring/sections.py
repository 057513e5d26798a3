"""Bounded-window section detection and per-section résumé heuristics."""
from __future__ import annotations

import re
from dataclasses import dataclass

from app.core.config.scoring import get_scoring_int
from app.schemas.career import ResumeSections, SectionScore

from .roles import RoleKeywordProfile
from .utils import round_half_up, safe_div

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
LINKEDIN_RE = re.compile(r"linkedin", re.IGNORECASE)
GITHUB_RE = re.compile(r"github", re.IGNORECASE)
METRIC_RE = re.compile(r"\d+[%+]")
BULLET_RE = re.compile(r"[•●▪▸■]|^[ \t]*[-*][ \t]+", re.MULTILINE)
ACTION_VERB_RE = re.compile(
    r"\b(led|managed|developed|created|improved|increased|reduced|built|designed|implemented)\b",
    re.IGNORECASE,
)
DEGREE_RE = re.compile(
    r"\b(bachelor|master|phd|ph\.d|b\.?\s?sc?|m\.?\s?sc?|b\.?\s?tech|m\.?\s?tech|b\.e\.?|m\.e\.?|mba)\b",
    re.IGNORECASE,
)
GPA_RE = re.compile(r"\b(gpa|cgpa)\b|\d\.\d+\s*/\s*\d", re.IGNORECASE)
PROJECT_LINK_RE = re.compile(r"http|github|demo", re.IGNORECASE)
PROJECT_TECH_RE = re.compile(r"built with|technologies|using|stack", re.IGNORECASE)

SUMMARY_HEADER = r"summary|profile|about|objective"
EXPERIENCE_HEADER = r"experience|work history|employment"
EDUCATION_HEADER = r"education|academic|qualification|degree"
SKILLS_HEADER = r"technical skills|skills|technologies|expertise"
PROJECTS_HEADER = r"projects|portfolio|work samples"


@dataclass(frozen=True)
class SectionWindow:
    header: str
    text: str


class SectionExtractor:
    """Locate a section by its first header match and cap it at a fixed lookahead.

    A ``None`` header pattern means the section has no heading of its own and the
    whole document is the window (contact details are usually in the page header).
    """

    def __init__(self, header_pattern: str | None, lookahead_length: int | None = None):
        self.header_pattern = header_pattern
        self.lookahead_length = lookahead_length
        self._header_re = (
            re.compile(rf"\b(?:{header_pattern})\b", re.IGNORECASE) if header_pattern else None
        )

    def extract(self, text: str) -> SectionWindow | None:
        if self._header_re is None:
            return SectionWindow(header="", text=text)
        match = self._header_re.search(text)
        if not match:
            return None
        end = len(text) if self.lookahead_length is None else match.end() + self.lookahead_length
        return SectionWindow(header=match.group(0), text=text[match.start():end])


@dataclass(frozen=True)
class SectionSignals:
    """Counts and flags observed in a section window; reused by the mistake detector."""

    found: bool
    word_count: int = 0
    bullets: int = 0
    metrics: int = 0
    action_verbs: int = 0
    has_email: bool = False
    has_phone: bool = False
    has_linkedin: bool = False
    has_github: bool = False
    has_degree: bool = False
    has_gpa: bool = False
    has_links: bool = False
    has_tech: bool = False
    keywords_found: tuple[str, ...] = ()
    keywords_missing: tuple[str, ...] = ()


def _lookahead(section: str, default: int) -> int:
    return get_scoring_int(f"resume.lookahead.{section}", default)


def build_extractors() -> dict[str, SectionExtractor]:
    return {
        "contact": SectionExtractor(None),
        "summary": SectionExtractor(SUMMARY_HEADER, _lookahead("summary", 500)),
        "experience": SectionExtractor(EXPERIENCE_HEADER, _lookahead("experience", 2000)),
        "education": SectionExtractor(EDUCATION_HEADER, _lookahead("education", 500)),
        "skills": SectionExtractor(SKILLS_HEADER, _lookahead("skills", 800)),
        "projects": SectionExtractor(PROJECTS_HEADER, _lookahead("projects", 1500)),
    }


def _feedback(score: int, bands: tuple[tuple[int, str], ...], default: str) -> str:
    for threshold, message in bands:
        if score >= threshold:
            return message
    return default


def contact_signals(window: SectionWindow) -> SectionSignals:
    text = window.text
    return SectionSignals(
        found=True,
        has_email=bool(EMAIL_RE.search(text)),
        has_phone=bool(PHONE_RE.search(text)),
        has_linkedin=bool(LINKEDIN_RE.search(text)),
        has_github=bool(GITHUB_RE.search(text)),
    )


def score_contact(signals: SectionSignals) -> SectionScore:
    score = (
        (40 if signals.has_email else 0)
        + (30 if signals.has_phone else 0)
        + (15 if signals.has_linkedin else 0)
        + (15 if signals.has_github else 0)
    )
    missing = [
        label
        for label, present in (
            ("email", signals.has_email),
            ("phone", signals.has_phone),
            ("LinkedIn", signals.has_linkedin),
            ("GitHub", signals.has_github),
        )
        if not present
    ]
    score = min(100, score)
    feedback = _feedback(score, ((70, "Contact information is complete."),), f"Missing: {', '.join(missing)}.")
    return SectionScore(score=score, feedback=feedback)


def summary_signals(window: SectionWindow | None) -> SectionSignals:
    if window is None:
        return SectionSignals(found=False)
    return SectionSignals(
        found=True,
        word_count=len(window.text.split()),
        metrics=len(METRIC_RE.findall(window.text)),
    )


def score_summary(signals: SectionSignals) -> SectionScore:
    if not signals.found:
        return SectionScore(score=30, feedback="No professional summary found. Add one at the top of your resume.")
    score = 50
    if 30 <= signals.word_count <= 100:
        score += 30
    if signals.metrics:
        score += 20
    feedback = _feedback(
        score,
        ((80, "Strong professional summary."),),
        "Improve summary by adding quantifiable achievements and keeping it concise (50-80 words).",
    )
    return SectionScore(score=score, feedback=feedback)


def experience_signals(window: SectionWindow | None) -> SectionSignals:
    if window is None:
        return SectionSignals(found=False)
    text = window.text
    return SectionSignals(
        found=True,
        bullets=len(BULLET_RE.findall(text)),
        metrics=len(METRIC_RE.findall(text)),
        action_verbs=len(ACTION_VERB_RE.findall(text)),
    )


def score_experience(signals: SectionSignals) -> SectionScore:
    if not signals.found:
        return SectionScore(score=40, feedback="No work experience section found.")
    score = 40
    if signals.bullets >= 5:
        score += 20
    if signals.metrics >= 3:
        score += 20
    if signals.action_verbs >= 5:
        score += 20
    feedback = _feedback(
        score,
        ((75, "Excellent work experience section with metrics."),),
        "Add more bullet points with quantifiable achievements and strong action verbs.",
    )
    return SectionScore(score=score, feedback=feedback)


def education_signals(window: SectionWindow | None) -> SectionSignals:
    if window is None:
        return SectionSignals(found=False)
    return SectionSignals(
        found=True,
        has_degree=bool(DEGREE_RE.search(window.text)),
        has_gpa=bool(GPA_RE.search(window.text)),
    )


def score_education(signals: SectionSignals) -> SectionScore:
    if not signals.found:
        return SectionScore(score=50, feedback="Education section not clearly identified.")
    score = 80 if signals.has_degree else 60
    if signals.has_gpa:
        score += 10
    score = min(100, score)
    feedback = _feedback(
        score,
        ((80, "Education section is well formatted."),),
        "Ensure degree and institution are clearly mentioned.",
    )
    return SectionScore(score=score, feedback=feedback)


def skills_signals(window: SectionWindow | None, profile: RoleKeywordProfile) -> SectionSignals:
    if window is None:
        return SectionSignals(found=False)
    lowered = window.text.lower()
    found = tuple(kw for kw in profile.required_keywords if kw.lower() in lowered)
    missing = tuple(kw for kw in profile.required_keywords if kw.lower() not in lowered)
    return SectionSignals(found=True, keywords_found=found, keywords_missing=missing)


def score_skills(signals: SectionSignals) -> SectionScore:
    if not signals.found:
        return SectionScore(score=40, feedback="No dedicated skills section found.")
    required_count = len(signals.keywords_found) + len(signals.keywords_missing)
    ratio = safe_div(len(signals.keywords_found), required_count)
    score = min(100, round_half_up(40 + ratio * 60))
    feedback = _feedback(
        score,
        ((75, "Strong technical skills section."),),
        f"Add more relevant skills. Missing: {', '.join(signals.keywords_missing[:5])}.",
    )
    return SectionScore(score=score, feedback=feedback)


def projects_signals(window: SectionWindow | None) -> SectionSignals:
    if window is None:
        return SectionSignals(found=False)
    text = window.text
    return SectionSignals(
        found=True,
        has_links=bool(PROJECT_LINK_RE.search(text)),
        has_tech=bool(PROJECT_TECH_RE.search(text)),
        metrics=len(METRIC_RE.findall(text)),
    )


def score_projects(signals: SectionSignals) -> SectionScore:
    if not signals.found:
        return SectionScore(score=50, feedback="Consider adding a projects section to showcase your work.")
    score = 50
    if signals.has_links:
        score += 20
    if signals.has_tech:
        score += 15
    if signals.metrics:
        score += 15
    feedback = _feedback(
        score,
        ((80, "Excellent projects section with details."),),
        "Add project links, technologies used, and quantifiable outcomes.",
    )
    return SectionScore(score=score, feedback=feedback)


def analyze_sections(
    text: str,
    profile: RoleKeywordProfile,
    extractors: dict[str, SectionExtractor] | None = None,
) -> tuple[ResumeSections, dict[str, SectionSignals]]:
    extractors = extractors or build_extractors()
    signals = {
        "contact": contact_signals(extractors["contact"].extract(text)),
        "summary": summary_signals(extractors["summary"].extract(text)),
        "experience": experience_signals(extractors["experience"].extract(text)),
        "education": education_signals(extractors["education"].extract(text)),
        "skills": skills_signals(extractors["skills"].extract(text), profile),
        "projects": projects_signals(extractors["projects"].extract(text)),
    }
    sections = ResumeSections(
        contact=score_contact(signals["contact"]),
        summary=score_summary(signals["summary"]),
        experience=score_experience(signals["experience"]),
        education=score_education(signals["education"]),
        skills=score_skills(signals["skills"]),
        projects=score_projects(signals["projects"]),
    )
    return sections, signals
