import os
import sys
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.schemas.career import AnalysisRecord, Insight, Weights  # noqa: E402
from app.scoring.readiness import build_readiness  # noqa: E402
from app.storage import AnalysisStore, AnalysisStoreError, RecordFinalizedError  # noqa: E402


class AnalysisStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = AnalysisStore(os.path.join(self._tmp.name, "nested", "career.db"))

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()

    def _complete(self, record: AnalysisRecord, score: int, analyzed_at: datetime) -> AnalysisRecord:
        completed = record.model_copy(
            update={
                "status": "completed",
                "score": score,
                "result": {"score": score},
                "insight": Insight(score=score, summary="done"),
                "analyzed_at": analyzed_at,
                "expires_at": analyzed_at + timedelta(days=7),
            }
        )
        return self.store.save(completed)

    def test_record_lifecycle_and_latest_completed(self):
        record = self.store.create_record("user-1", "coding", {"username": "octo"})
        self.assertEqual(record.status, "processing")
        self.assertIsNone(self.store.get_latest_completed("user-1", "coding"))

        now = datetime.now(timezone.utc)
        self._complete(record, 67, now)
        latest = self.store.get_latest_completed("user-1", "coding")
        self.assertEqual(latest.id, record.id)
        self.assertEqual(latest.score, 67)
        self.assertEqual(latest.raw_stats, {"username": "octo"})
        self.assertEqual(latest.insight.summary, "done")
        self.assertEqual(latest.expires_at - latest.analyzed_at, timedelta(days=7))

    def test_latest_is_ordered_by_analyzed_at(self):
        now = datetime.now(timezone.utc)
        newer = self.store.create_record("user-1", "resume", {})
        self._complete(newer, 80, now)
        older = self.store.create_record("user-1", "resume", {})
        self._complete(older, 40, now - timedelta(days=2))
        self.assertEqual(self.store.get_latest_completed("user-1", "resume").id, newer.id)

    def test_finalized_record_cannot_be_rewritten(self):
        record = self.store.create_record("user-1", "portfolio", {})
        completed = self._complete(record, 50, datetime.now(timezone.utc))
        with self.assertRaises(RecordFinalizedError):
            self.store.save(completed.model_copy(update={"score": 99}))
        with self.assertRaises(RecordFinalizedError):
            self.store.mark_failed(record, "late failure")
        self.assertEqual(self.store.get_record(record.id).score, 50)

    def test_mark_failed_records_error(self):
        record = self.store.create_record("user-1", "resume", {})
        self.store.mark_failed(record, "disk full")
        stored = self.store.get_record(record.id)
        self.assertEqual(stored.status, "failed")
        self.assertEqual(stored.error, "disk full")
        self.assertIsNone(self.store.get_latest_completed("user-1", "resume"))

    def test_latest_by_type_covers_all_types(self):
        record = self.store.create_record("user-1", "resume", {})
        self._complete(record, 70, datetime.now(timezone.utc))
        latest = self.store.get_latest_by_type("user-1")
        self.assertEqual(set(latest), {"coding", "portfolio", "resume"})
        self.assertIsNone(latest["coding"])
        self.assertEqual(latest["resume"].score, 70)

    def test_readiness_snapshot_is_replaced(self):
        first = build_readiness("user-1", {"resume": 80}, "Backend Developer")
        self.store.save_readiness(first)
        second = build_readiness("user-1", {"resume": 80, "coding": 40}, "Frontend Developer")
        self.store.save_readiness(second)
        stored = self.store.get_readiness("user-1")
        self.assertEqual(stored.overall, second.overall)
        self.assertEqual(stored.target_role, "frontend")
        self.assertEqual(stored.weights, Weights(coding=0.20, portfolio=0.50, resume=0.30))
        self.assertIsNone(self.store.get_readiness("someone-else"))

    def test_purge_removes_only_stale_unfinished_records(self):
        old = datetime.now(timezone.utc) - timedelta(days=400)
        stale = AnalysisRecord(id="stale", user_id="user-1", type="coding", status="failed", created_at=old)
        self.store.save(stale)
        recent = AnalysisRecord(
            id="kept",
            user_id="user-1",
            type="coding",
            status="processing",
            created_at=datetime.now(timezone.utc),
        )
        self.store.save(recent)
        done = self.store.create_record("user-1", "resume", {})
        self._complete(done, 70, datetime.now(timezone.utc))

        deleted = self.store.purge_stale_records(retention_days=180)
        self.assertEqual(deleted["analysis_records"], 1)
        self.assertIsNone(self.store.get_record("stale"))
        self.assertIsNotNone(self.store.get_record("kept"))
        self.assertIsNotNone(self.store.get_record(done.id))

    def test_insight_run_log(self):
        self.store.log_insight_run(
            run_id="r1",
            task="resume",
            provider="openai",
            model="gpt-4o-mini",
            status="success",
            latency_ms=120,
        )
        self.store.log_insight_run(run_id="r2", task="coding", provider="none", model="", status="skipped")
        self.assertEqual(self.store.count_insight_runs(), 2)
        self.assertEqual(self.store.count_insight_runs("skipped"), 1)

    def test_writer_locks_are_released_after_use(self):
        with self.store.writer_lock("user-1", "coding"):
            with self.store.writer_lock("user-2", "coding"):
                self.assertEqual(len(self.store._writer_locks), 2)
            self.assertEqual(list(self.store._writer_locks), [("user-1", "coding")])
        self.assertEqual(self.store._writer_locks, {})

        with self.assertRaises(ValueError):
            with self.store.writer_lock("user-3", "resume"):
                raise ValueError("scoring failed")
        self.assertEqual(self.store._writer_locks, {})

    def test_sqlite_errors_are_wrapped(self):
        broken = AnalysisStore(self._tmp.name)
        with self.assertRaises(AnalysisStoreError):
            broken.get_latest_completed("user-1", "coding")


if __name__ == "__main__":
    unittest.main()
