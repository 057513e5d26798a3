import sys
import unittest
from pathlib import Path
from unittest.mock import Mock

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.fallback import FallbackInsightProvider  # noqa: E402
from app.ai.types import InsightProviderError  # noqa: E402
from app.scoring.resume import UNREADABLE_MESSAGE, analyze_keywords, analyze_resume  # noqa: E402
from app.scoring.roles import resolve_role  # noqa: E402
from app.scoring.sections import (  # noqa: E402
    SectionExtractor,
    contact_signals,
    education_signals,
    score_contact,
    score_education,
    score_skills,
    skills_signals,
)
from app.scoring.utils import round_half_up  # noqa: E402


class _StubInsights:
    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    def fetch(self, request):
        self.requests.append(request)
        return dict(self.payload)


class _ExplodingProvider:
    name = "openai"
    model = "stub-model"

    def complete(self, request):
        raise InsightProviderError("timed out", code="timeout")


SAMPLE_RESUME = """Jane Doe
jane.doe@example.com | 555-123-4567 | linkedin.com/in/janedoe | github.com/janedoe

Summary
Backend engineer with 6 years of experience building REST API services and database-backed
systems. Improved throughput by 40% and reduced cloud spend by 25% across three product teams
while mentoring engineers and driving teamwork, communication and leadership in agile squads.

Experience
Senior Backend Engineer, Acme Corp (Jan 2020 - Present)
- Led the migration of 12 services to a new API gateway, cutting latency by 35%
- Built a SQL reporting pipeline used by 200+ analysts
- Designed server-side caching that reduced database load by 50%
- Implemented CI checks and improved test coverage to 90%
- Managed a team of 5 engineers
Backend Engineer, Beta Inc (Mar 2017 - Dec 2019)
- Developed Node REST endpoints for billing
- Created monitoring dashboards

Education
Bachelor of Science in Computer Science, State University, GPA 3.7/4.0

Skills
Python, Node, SQL, REST, API design, database tuning, server operations, Docker, teamwork

Projects
- Rate limiter service built with Go and Redis, github.com/janedoe/limiter, handles 10k+ rps
"""


class SectionExtractorTests(unittest.TestCase):
    def test_window_is_bounded_by_lookahead_after_header(self):
        extractor = SectionExtractor("skills", 10)
        window = extractor.extract("Intro text\nSkills: python, sql, docker, kubernetes")
        self.assertIsNotNone(window)
        self.assertEqual(window.text, "Skills: python, ")

    def test_missing_header_returns_none(self):
        self.assertIsNone(SectionExtractor("projects", 100).extract("Subprojects were listed elsewhere"))

    def test_headerless_extractor_scans_whole_document(self):
        window = SectionExtractor(None).extract("anything at all")
        self.assertEqual(window.text, "anything at all")

    def test_contact_scoring(self):
        full = contact_signals(SectionExtractor(None).extract("a@b.io 555-123-4567 linkedin github"))
        self.assertEqual(score_contact(full).score, 100)
        email_only = score_contact(contact_signals(SectionExtractor(None).extract("reach me at a@b.io")))
        self.assertEqual(email_only.score, 40)
        self.assertEqual(email_only.feedback, "Missing: phone, LinkedIn, GitHub.")

    def test_education_with_degree_and_gpa(self):
        window = SectionExtractor("education", 500).extract("Education\nBachelor of Science, GPA 3.8/4.0")
        self.assertEqual(score_education(education_signals(window)).score, 90)

    def test_plain_words_are_not_degrees(self):
        extractor = SectionExtractor("education", 500)
        prose = extractor.extract("Education\nSelf taught, want to be an engineer, ask me")
        self.assertFalse(education_signals(prose).has_degree)
        self.assertEqual(score_education(education_signals(prose)).score, 60)
        dotted = extractor.extract("Education\nB.E. in Computer Engineering; M.E in Robotics")
        self.assertTrue(education_signals(dotted).has_degree)

    def test_recommended_keywords_are_capped_in_profile_order(self):
        profile = resolve_role("Frontend Developer").keywords
        self.assertEqual(len(profile.recommended_keywords), 6)
        report = analyze_keywords("Plain résumé text with no frameworks listed.", profile)
        self.assertEqual(report.recommended, list(profile.recommended_keywords[:5]))

    def test_skills_ratio_score(self):
        profile = resolve_role("Pastry Chef").keywords
        window = SectionExtractor("skills", 800).extract("Skills: programming, git, testing, agile, teamwork")
        section = score_skills(skills_signals(window, profile))
        self.assertEqual(section.score, 70)
        self.assertIn("Missing: software, development, communication, problem solving, leadership", section.feedback)


class ResumeAnalyzerTests(unittest.TestCase):
    def test_short_text_short_circuits_without_provider(self):
        insights = Mock()
        result = analyze_resume("too short!", "Backend Developer", insights)
        self.assertFalse(result.readable)
        self.assertEqual(result.ats_score, 0)
        self.assertEqual(result.message, UNREADABLE_MESSAGE)
        self.assertIsNone(result.sections)
        insights.fetch.assert_not_called()

    def test_scores_are_clamped_and_keywords_partition_required(self):
        result = analyze_resume(SAMPLE_RESUME, "Backend Developer")
        required = resolve_role("Backend Developer").keywords.required_keywords
        self.assertTrue(0 <= result.ats_score <= 100)
        self.assertEqual(result.role_category, "backend")
        self.assertEqual(set(result.keywords.found) | set(result.keywords.missing), set(required))
        self.assertLessEqual(len(result.keywords.missing), 10)
        self.assertLessEqual(len(result.keywords.recommended), 5)
        for score in result.sections.scores():
            self.assertTrue(0 <= score <= 100)
        self.assertEqual(result.sections.contact.score, 100)
        self.assertEqual(result.sections.education.score, 90)

    def test_deterministic_with_stubbed_provider(self):
        payload = {"roleMatchScore": 72, "summary": "Solid backend profile."}
        first = analyze_resume(SAMPLE_RESUME, "Backend Developer", _StubInsights(payload))
        second = analyze_resume(SAMPLE_RESUME, "Backend Developer", _StubInsights(payload))
        self.assertEqual(first.model_dump(), second.model_dump())

    def test_role_match_is_blended_half_and_half(self):
        insights = _StubInsights({"roleMatchScore": 90, "summary": "Strong match.", "strengths": ["APIs"]})
        result = analyze_resume(SAMPLE_RESUME, "Backend Developer", insights)
        expected = round_half_up(0.5 * result.heuristic_score + 0.5 * 90)
        self.assertEqual(result.ats_score, expected)
        self.assertEqual(result.insight.source, "provider")
        self.assertEqual(result.insight.summary, "Strong match.")
        self.assertEqual(result.insight.role_match_score, 90)
        self.assertEqual(len(insights.requests), 1)
        self.assertLessEqual(len(insights.requests[0].input_excerpt), 3000)

    def test_invalid_role_match_keeps_heuristic_and_fallback_narrative(self):
        result = analyze_resume(SAMPLE_RESUME, "Backend Developer", _StubInsights({"roleMatchScore": "n/a"}))
        self.assertEqual(result.ats_score, result.heuristic_score)
        self.assertEqual(result.insight.source, "fallback")
        self.assertEqual(
            result.insight.summary,
            f"Resume analyzed for Backend Developer position. Score: {result.heuristic_score}/100.",
        )

    def test_provider_failure_degrades_to_fallback(self):
        insights = FallbackInsightProvider(_ExplodingProvider())
        with self.assertLogs("app.ai.fallback", level="WARNING"):
            result = analyze_resume(SAMPLE_RESUME, "Backend Developer", insights)
        self.assertEqual(result.ats_score, result.heuristic_score)
        self.assertEqual(result.insight.source, "fallback")

    def test_contact_mistake_precedes_content_mistakes(self):
        text = (
            "My resume\n"
            "I am a developer and my references available on request.\n"
            "Experience\nResponsibilities included writing code for the team.\n"
        )
        result = analyze_resume(text, "Frontend Developer")
        severities = [mistake.severity for mistake in result.mistakes]
        order = {"high": 0, "medium": 1, "low": 2}
        self.assertEqual(severities, sorted(severities, key=order.get))
        categories = [mistake.category for mistake in result.mistakes]
        self.assertIn("Contact Information", categories)
        self.assertIn("Content Quality", categories)
        self.assertLess(categories.index("Contact Information"), categories.index("Content Quality"))
        contact = result.mistakes[categories.index("Contact Information")]
        self.assertEqual(contact.severity, "high")
        content = [m for m in result.mistakes if m.category == "Content Quality"]
        self.assertEqual(len(content), 4)
        self.assertTrue(all(m.severity == "low" for m in content))


if __name__ == "__main__":
    unittest.main()
