import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.schemas.career import Weights  # noqa: E402
from app.scoring.readiness import build_readiness, compute_overall  # noqa: E402

DEFAULT_WEIGHTS = Weights(coding=0.33, portfolio=0.34, resume=0.33)


class ReadinessAggregatorTests(unittest.TestCase):
    def test_single_analysis_renormalizes_to_its_score(self):
        self.assertEqual(compute_overall({"resume": 80}, DEFAULT_WEIGHTS), 80)
        self.assertEqual(compute_overall({"coding": 0, "portfolio": 0, "resume": 80}, DEFAULT_WEIGHTS), 80)

    def test_no_analyses_scores_zero(self):
        self.assertEqual(compute_overall({}, DEFAULT_WEIGHTS), 0)
        self.assertEqual(compute_overall({"coding": 0, "portfolio": None, "resume": 0}, DEFAULT_WEIGHTS), 0)

    def test_weighted_mean_over_counted_analyses(self):
        weights = Weights(coding=0.20, portfolio=0.50, resume=0.30)
        self.assertEqual(compute_overall({"coding": 60, "resume": 80}, weights), 72)

    def test_weights_must_sum_to_one(self):
        with self.assertRaises(ValidationError):
            Weights(coding=0.5, portfolio=0.5, resume=0.5)

    def test_snapshot_records_role_and_camel_case_wire_format(self):
        now = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)
        readiness = build_readiness("user-1", {"coding": 60, "resume": 80}, "Frontend Developer", now=now)
        self.assertEqual(readiness.overall, 72)
        self.assertEqual(readiness.portfolio_score, 0)
        self.assertEqual(readiness.target_role, "frontend")
        self.assertEqual(readiness.target_role_name, "Frontend Developer")
        wire = readiness.model_dump(by_alias=True)
        for key in ("overall", "codingScore", "portfolioScore", "resumeScore", "weights", "targetRole", "lastCalculated"):
            self.assertIn(key, wire)
        self.assertEqual(wire["weights"], {"coding": 0.2, "portfolio": 0.5, "resume": 0.3})


if __name__ == "__main__":
    unittest.main()
