from __future__ import annotations

import re
from dataclasses import dataclass

from app.core.config.scoring import get_scoring_int
from app.schemas.career import FormattingReport

from .sections import BULLET_RE

DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d{4}[-/]\d{2}[-/]\d{2}"),
    re.compile(r"\d{2}[-/]\d{4}"),
    re.compile(r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+\d{4}", re.IGNORECASE),
)
SECTION_HEADING_RE = re.compile(r"\b(?:experience|education|skills|projects|summary)\b", re.IGNORECASE)

POSITIVE_MESSAGE = "Resume formatting looks good!"


@dataclass(frozen=True)
class FormattingFinding:
    code: str
    message: str
    deduction: int


def _deduction(code: str, default: int) -> int:
    return get_scoring_int(f"resume.formatting.deductions.{code}", default)


def find_formatting_issues(text: str) -> list[FormattingFinding]:
    findings: list[FormattingFinding] = []
    lines = [line for line in text.splitlines() if line.strip()]

    min_lines = get_scoring_int("resume.formatting.min_lines", 30)
    max_lines = get_scoring_int("resume.formatting.max_lines", 200)
    if len(lines) < min_lines:
        findings.append(
            FormattingFinding("too_short", "Resume seems too short. Add more details.", _deduction("too_short", 10))
        )
    elif len(lines) > max_lines:
        findings.append(
            FormattingFinding(
                "too_long",
                "Resume might be too long. Keep it concise (1-2 pages).",
                _deduction("too_long", 15),
            )
        )

    if not BULLET_RE.search(text):
        findings.append(
            FormattingFinding(
                "no_bullets",
                "Use bullet points for better readability.",
                _deduction("no_bullets", 10),
            )
        )

    min_dates = get_scoring_int("resume.formatting.min_date_occurrences", 2)
    if not any(len(pattern.findall(text)) >= min_dates for pattern in DATE_PATTERNS):
        findings.append(
            FormattingFinding(
                "inconsistent_dates",
                "Use consistent date formatting throughout.",
                _deduction("inconsistent_dates", 10),
            )
        )

    if not SECTION_HEADING_RE.search(text):
        findings.append(
            FormattingFinding(
                "no_headings",
                "Add clear section headings (Experience, Education, Skills).",
                _deduction("no_headings", 15),
            )
        )
    return findings


def score_formatting(findings: list[FormattingFinding]) -> FormattingReport:
    score = max(0, 100 - sum(finding.deduction for finding in findings))
    issues = [finding.message for finding in findings] or [POSITIVE_MESSAGE]
    return FormattingReport(score=score, issues=issues)


def analyze_formatting(text: str) -> tuple[FormattingReport, list[FormattingFinding]]:
    findings = find_formatting_issues(text)
    return score_formatting(findings), findings
