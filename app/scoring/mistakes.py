"""Turn section and formatting signals into a severity-ordered list of résumé mistakes."""
from __future__ import annotations

import re

from app.schemas.career import FormattingReport, Mistake, ResumeSections

from .formatting import FormattingFinding
from .sections import SectionSignals

SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# code -> (severity, fix)
FORMATTING_SEVERITY: dict[str, tuple[str, str]] = {
    "too_short": (
        "medium",
        "Expand your resume with more details about achievements and skills (aim for 1-2 pages)",
    ),
    "too_long": (
        "medium",
        "Reduce content to 1-2 pages by removing outdated or less relevant information",
    ),
    "no_bullets": (
        "medium",
        "Use bullet points (•) for all lists and achievements instead of paragraphs",
    ),
    "inconsistent_dates": (
        "low",
        'Use consistent date format throughout (e.g., "Jan 2020 - Dec 2022")',
    ),
    "no_headings": (
        "high",
        "Add clear section headings: EXPERIENCE, EDUCATION, SKILLS, PROJECTS",
    ),
}

CONTENT_CHECKS: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (
        re.compile(r"\b(?:i|me|my)\b", re.IGNORECASE),
        'Use of "I" in resume',
        'Remove "I", "me", "my" - use bullet points without personal pronouns',
    ),
    (
        re.compile(r"\bresume\b", re.IGNORECASE),
        'Word "resume" found in resume content',
        'Remove the word "resume" from your resume body',
    ),
    (
        re.compile(r"\breferences available", re.IGNORECASE),
        'Unnecessary "References available" text',
        "Remove \"References available upon request\" - it's implied",
    ),
    (
        re.compile(r"\bresponsibilities included\b", re.IGNORECASE),
        'Passive language: "Responsibilities included"',
        'Use active voice: "Managed", "Led", "Developed" instead',
    ),
)


def _contact_mistakes(signals: SectionSignals) -> list[Mistake]:
    missing = [
        label
        for label, present in (
            ("email address", signals.has_email),
            ("phone number", signals.has_phone),
            ("LinkedIn profile", signals.has_linkedin),
        )
        if not present
    ]
    if not missing:
        return []
    return [
        Mistake(
            severity="high",
            category="Contact Information",
            issue=f"Missing {', '.join(missing)}",
            fix="Add complete contact information at the top of your resume",
        )
    ]


def _summary_mistakes(signals: SectionSignals) -> list[Mistake]:
    if not signals.found:
        return [
            Mistake(
                severity="high",
                category="Professional Summary",
                issue="No professional summary section found",
                fix="Add a 3-4 sentence summary at the top highlighting your key skills and achievements",
            )
        ]
    mistakes: list[Mistake] = []
    if signals.word_count < 30:
        mistakes.append(
            Mistake(
                severity="medium",
                category="Professional Summary",
                issue="Summary is too short (less than 30 words)",
                fix="Expand your summary to 50-80 words with specific achievements",
            )
        )
    if not signals.metrics:
        mistakes.append(
            Mistake(
                severity="medium",
                category="Professional Summary",
                issue="Summary lacks quantifiable achievements",
                fix='Add metrics (e.g., "increased sales by 30%", "managed team of 5")',
            )
        )
    return mistakes


def _experience_mistakes(signals: SectionSignals) -> list[Mistake]:
    if not signals.found:
        return [
            Mistake(
                severity="high",
                category="Work Experience",
                issue="No work experience section found",
                fix="Add a work experience section with your roles and achievements",
            )
        ]
    mistakes: list[Mistake] = []
    if signals.bullets < 3:
        mistakes.append(
            Mistake(
                severity="medium",
                category="Work Experience",
                issue="Too few bullet points in experience section",
                fix="Use 3-5 bullet points per role to describe your responsibilities and achievements",
            )
        )
    if signals.metrics < 2:
        mistakes.append(
            Mistake(
                severity="high",
                category="Work Experience",
                issue="Lacks quantifiable achievements (no metrics found)",
                fix='Add numbers: "Improved performance by 40%", "Led team of 8", "Reduced costs by $50K"',
            )
        )
    if not signals.action_verbs:
        mistakes.append(
            Mistake(
                severity="medium",
                category="Work Experience",
                issue="Weak or missing action verbs",
                fix="Start bullet points with strong action verbs: Led, Developed, Implemented, Achieved",
            )
        )
    return mistakes


def _skills_mistakes(signals: SectionSignals, missing_keywords: list[str]) -> list[Mistake]:
    if not signals.found:
        return [
            Mistake(
                severity="high",
                category="Skills",
                issue="No dedicated skills section found",
                fix="Add a skills section listing: " + ", ".join(missing_keywords[:5]),
            )
        ]
    if not missing_keywords:
        return []
    top = missing_keywords[:5]
    return [
        Mistake(
            severity="high",
            category="Skills",
            issue=f"Missing {len(top)} critical keywords for the role",
            fix=f"Add these skills: {', '.join(top)}",
        )
    ]


def _formatting_mistakes(findings: list[FormattingFinding]) -> list[Mistake]:
    mistakes: list[Mistake] = []
    for finding in findings:
        severity, fix = FORMATTING_SEVERITY.get(finding.code, ("low", finding.message))
        mistakes.append(
            Mistake(
                severity=severity,
                category="Formatting",
                issue=finding.message.rstrip("."),
                fix=fix,
            )
        )
    return mistakes


def _content_mistakes(text: str) -> list[Mistake]:
    return [
        Mistake(severity="low", category="Content Quality", issue=issue, fix=fix)
        for pattern, issue, fix in CONTENT_CHECKS
        if pattern.search(text)
    ]


def sort_mistakes(mistakes: list[Mistake]) -> list[Mistake]:
    # sorted() is stable, so detection order is kept within a severity.
    return sorted(mistakes, key=lambda mistake: SEVERITY_ORDER[mistake.severity])


def collect_mistakes(
    text: str,
    sections: ResumeSections,
    signals: dict[str, SectionSignals],
    formatting: FormattingReport,
    findings: list[FormattingFinding],
    missing_keywords: list[str],
) -> list[Mistake]:
    mistakes: list[Mistake] = []
    if sections.contact.score < 70:
        mistakes.extend(_contact_mistakes(signals["contact"]))
    if sections.summary.score < 60:
        mistakes.extend(_summary_mistakes(signals["summary"]))
    if sections.experience.score < 70:
        mistakes.extend(_experience_mistakes(signals["experience"]))
    if sections.skills.score < 60:
        mistakes.extend(_skills_mistakes(signals["skills"], missing_keywords))
    if formatting.score < 70:
        mistakes.extend(_formatting_mistakes(findings))
    mistakes.extend(_content_mistakes(text))
    return sort_mistakes(mistakes)
