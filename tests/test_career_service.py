import dataclasses
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.fallback import FallbackInsightProvider  # noqa: E402
from app.ai.providers.null_provider import NullInsightProvider  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.schemas.career import CodingStats, PortfolioStats  # noqa: E402
from app.services.career_service import CareerService  # noqa: E402
from app.storage import AnalysisStore, AnalysisStoreError  # noqa: E402

RESUME_TEXT = (
    "Summary\nBackend engineer building API services.\n"
    "Experience\n- Built REST services used by 10k+ users\n- Reduced latency by 30%\n"
    "Skills\nPython, SQL, database, server\n"
)


class _FailingCompletionStore(AnalysisStore):
    """Accepts the processing record, then fails to persist the completed result."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.created_ids = []

    def save(self, record):
        if record.status == "processing":
            self.created_ids.append(record.id)
        if record.status == "completed":
            raise AnalysisStoreError("disk full")
        return super().save(record)


class CareerServiceTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.config = dataclasses.replace(
            settings,
            analysis_cache_hours=24,
            analysis_ttl_days=7,
            default_target_role="Software Developer",
            insight_run_logging=False,
        )
        self.store = AnalysisStore(os.path.join(self._tmp.name, "career.db"))
        self.service = self._service(self.store)

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()

    def _service(self, store):
        return CareerService(store, insights=FallbackInsightProvider(NullInsightProvider()), config=self.config)

    def test_resume_analysis_completes_with_expiry(self):
        record = self.service.analyze_resume("user-1", RESUME_TEXT, "Backend Developer")
        self.assertEqual(record.status, "completed")
        self.assertEqual(record.type, "resume")
        self.assertEqual(record.score, record.result["ats_score"])
        self.assertEqual((record.expires_at - record.analyzed_at).days, 7)
        self.assertEqual(self.store.get_latest_completed("user-1", "resume").id, record.id)

    def test_persistence_failure_marks_record_failed_and_reraises(self):
        store = _FailingCompletionStore(os.path.join(self._tmp.name, "failing.db"))
        service = self._service(store)
        with self.assertLogs("app.services.career_service", level="WARNING"):
            with self.assertRaises(AnalysisStoreError):
                service.analyze_resume("user-1", RESUME_TEXT, "Backend Developer")
        stored = store.get_record(store.created_ids[0])
        self.assertEqual(stored.status, "failed")
        self.assertEqual(stored.error, "disk full")
        store.close()

    def test_scoring_failure_marks_record_failed_and_reraises_original(self):
        stats = CodingStats(username="octo", total_solved=10)
        with patch("app.services.career_service.analyze_coding", side_effect=ValueError("boom")):
            with self.assertRaises(ValueError):
                self.service.analyze_coding("user-1", stats, None)
        self.assertIsNone(self.store.get_latest_completed("user-1", "coding"))

    def test_coding_analysis_is_cached_per_username(self):
        stats = CodingStats(username="octo", total_solved=500, medium_solved=250, hard_solved=100, acceptance_rate=80)
        first, cached = self.service.analyze_coding("user-1", stats, "Backend Developer")
        self.assertFalse(cached)
        self.assertEqual(first.score, 67)

        second, cached = self.service.analyze_coding("user-1", stats, "Backend Developer")
        self.assertTrue(cached)
        self.assertEqual(second.id, first.id)

        refreshed, cached = self.service.analyze_coding("user-1", stats, "Backend Developer", force_refresh=True)
        self.assertFalse(cached)
        self.assertNotEqual(refreshed.id, first.id)

        other = stats.model_copy(update={"username": "someone-else"})
        _, cached = self.service.analyze_coding("user-1", other, "Backend Developer")
        self.assertFalse(cached)

    def test_portfolio_analysis(self):
        stats = PortfolioStats(username="octo", public_repos=10, total_stars=50, followers=20)
        record, cached = self.service.analyze_portfolio("user-1", stats, None)
        self.assertFalse(cached)
        self.assertEqual(record.score, 17)
        self.assertEqual(record.result["target_role"], "Software Developer")

    def test_readiness_uses_latest_completed_analyses(self):
        resume = self.service.analyze_resume("user-1", RESUME_TEXT, "Backend Developer")
        response = self.service.calculate_readiness("user-1", "Backend Developer")
        readiness = response.readiness_score
        self.assertEqual(readiness.overall, resume.score)
        self.assertEqual(readiness.resume_score, resume.score)
        self.assertEqual(readiness.coding_score, 0)
        self.assertEqual(readiness.target_role, "backend")
        self.assertEqual(response.analyses.resume.id, resume.id)
        self.assertEqual(self.service.get_readiness("user-1").overall, readiness.overall)

    def test_readiness_without_analyses_is_zero(self):
        response = self.service.calculate_readiness("nobody", None)
        self.assertEqual(response.readiness_score.overall, 0)
        self.assertEqual(response.readiness_score.target_role_name, "Software Developer")


if __name__ == "__main__":
    unittest.main()
