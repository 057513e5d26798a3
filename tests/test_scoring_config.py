import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config.scoring import (  # noqa: E402
    get_scoring_config,
    get_scoring_float,
    get_scoring_int,
    get_scoring_value,
    reset_scoring_config_cache,
)


class ScoringConfigTests(unittest.TestCase):
    def tearDown(self):
        reset_scoring_config_cache()

    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("resume.ai_blend.role_match"), 0.5)
        self.assertEqual(get_scoring_value("portfolio.ai_blend.relevance"), 0.6)
        self.assertEqual(get_scoring_int("resume.lookahead.experience", 0), 2000)

    def test_missing_path_returns_default(self):
        self.assertIsNone(get_scoring_value("resume.not_a_key"))
        self.assertEqual(get_scoring_value("resume.ai_blend.role_match.deeper", "x"), "x")
        self.assertEqual(get_scoring_float("coding.unknown_weight", 1.5), 1.5)
        self.assertEqual(get_scoring_value("", 7), 7)

    def test_blend_ratios_sum_to_one(self):
        self.assertAlmostEqual(
            get_scoring_float("resume.ai_blend.heuristic", 0) + get_scoring_float("resume.ai_blend.role_match", 0),
            1.0,
        )
        self.assertAlmostEqual(
            get_scoring_float("portfolio.ai_blend.baseline", 0) + get_scoring_float("portfolio.ai_blend.relevance", 0),
            1.0,
        )

    def test_invalid_override_file_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "scoring.yaml")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write("- just\n- a list\n")
            with patch.dict(os.environ, {"SCORING_CONFIG_PATH": path}):
                reset_scoring_config_cache()
                with self.assertRaises(RuntimeError):
                    get_scoring_config()

    def test_missing_override_file_raises(self):
        with patch.dict(os.environ, {"SCORING_CONFIG_PATH": "/nonexistent/scoring.yaml"}):
            reset_scoring_config_cache()
            with self.assertRaises(RuntimeError):
                get_scoring_config()


if __name__ == "__main__":
    unittest.main()
