from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Iterator

from app.core.config import settings
from app.schemas.career import (
    ANALYSIS_TYPES,
    FINAL_STATUSES,
    AnalysisRecord,
    AnalysisType,
    Insight,
    ReadinessScore,
    Weights,
)

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = (
    "id, user_id, type, raw_stats_json, result_json, score, insight_json, status, error, "
    "analyzed_at, expires_at, created_at"
)


class AnalysisStoreError(RuntimeError):
    def __init__(self, message: str, *, code: str = "storage_unavailable"):
        super().__init__(message)
        self.code = code


class RecordFinalizedError(AnalysisStoreError):
    def __init__(self, record_id: str, status: str):
        super().__init__(f"analysis record {record_id} is already {status}", code="record_finalized")
        self.record_id = record_id
        self.status = status


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise AnalysisStoreError(f"{operation} failed: {exc}") from exc


@dataclass
class _WriterSlot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class AnalysisStore:
    """SQLite persistence for analysis records, readiness snapshots and insight runs.

    One connection per store, shared across threads behind ``_conn_lock``. Writers for
    the same (user, type) are serialized with ``writer_lock`` for the whole
    processing -> completed/failed lifecycle.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._conn_lock = threading.Lock()
        self._writer_locks: dict[tuple[str, str], _WriterSlot] = {}
        self._writer_locks_guard = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        with self._conn_lock:
            if self._conn is not None:
                return self._conn

            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with _translate_errors("open"):
                conn = sqlite3.connect(
                    self.db_path,
                    check_same_thread=False,
                    timeout=5,
                    isolation_level=None,
                )
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute("PRAGMA synchronous=NORMAL;")
                conn.execute("PRAGMA busy_timeout=5000;")
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS analysis_records (
                        id TEXT PRIMARY KEY,
                        user_id TEXT NOT NULL,
                        type TEXT NOT NULL,
                        raw_stats_json TEXT NOT NULL,
                        result_json TEXT NOT NULL,
                        score INTEGER NOT NULL,
                        insight_json TEXT,
                        status TEXT NOT NULL,
                        error TEXT,
                        analyzed_at TEXT,
                        expires_at TEXT,
                        created_at TEXT NOT NULL
                    );
                    """
                )
                conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_analysis_records_latest
                    ON analysis_records (user_id, type, status, analyzed_at);
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS readiness_scores (
                        user_id TEXT PRIMARY KEY,
                        overall INTEGER NOT NULL,
                        coding_score INTEGER NOT NULL,
                        portfolio_score INTEGER NOT NULL,
                        resume_score INTEGER NOT NULL,
                        weights_json TEXT NOT NULL,
                        target_role TEXT NOT NULL,
                        target_role_name TEXT NOT NULL,
                        last_calculated TEXT NOT NULL
                    );
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS insight_runs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        created_at TEXT NOT NULL,
                        run_id TEXT NOT NULL,
                        task TEXT NOT NULL,
                        provider TEXT NOT NULL,
                        model TEXT NOT NULL,
                        status TEXT NOT NULL,
                        error_code TEXT,
                        latency_ms INTEGER
                    );
                    """
                )
                conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_insight_runs_created_at
                    ON insight_runs (created_at);
                    """
                )
            self._conn = conn
            return conn

    def init(self) -> None:
        self._get_connection()

    def close(self) -> None:
        with self._conn_lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @contextmanager
    def writer_lock(self, user_id: str, analysis_type: str) -> Iterator[None]:
        key = (user_id, analysis_type)
        with self._writer_locks_guard:
            slot = self._writer_locks.setdefault(key, _WriterSlot())
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            # Slots live only while someone holds or waits on them.
            with self._writer_locks_guard:
                slot.holders -= 1
                if slot.holders == 0:
                    self._writer_locks.pop(key, None)

    # Analysis records

    def create_record(self, user_id: str, analysis_type: AnalysisType, raw_stats: dict[str, Any]) -> AnalysisRecord:
        record = AnalysisRecord(
            id=uuid.uuid4().hex,
            user_id=user_id,
            type=analysis_type,
            raw_stats=raw_stats,
            status="processing",
            created_at=_utc_now(),
        )
        self.save(record)
        return record

    def save(self, record: AnalysisRecord) -> AnalysisRecord:
        conn = self._get_connection()
        insight_json = record.insight.model_dump_json() if record.insight is not None else None
        with self._conn_lock, _translate_errors("save"):
            row = conn.execute("SELECT status FROM analysis_records WHERE id = ?", (record.id,)).fetchone()
            if row and row[0] in FINAL_STATUSES:
                raise RecordFinalizedError(record.id, row[0])
            conn.execute(
                f"""
                INSERT OR REPLACE INTO analysis_records ({_RECORD_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.user_id,
                    record.type,
                    json.dumps(record.raw_stats, ensure_ascii=False),
                    json.dumps(record.result, ensure_ascii=False, default=str),
                    record.score,
                    insight_json,
                    record.status,
                    record.error,
                    _iso(record.analyzed_at),
                    _iso(record.expires_at),
                    _iso(record.created_at),
                ),
            )
        return record

    def mark_failed(self, record: AnalysisRecord, error: str) -> AnalysisRecord:
        failed = record.model_copy(update={"status": "failed", "error": error[:1000]})
        return self.save(failed)

    def get_record(self, record_id: str) -> AnalysisRecord | None:
        conn = self._get_connection()
        with self._conn_lock, _translate_errors("get_record"):
            row = conn.execute(
                f"SELECT {_RECORD_COLUMNS} FROM analysis_records WHERE id = ?",
                (record_id,),
            ).fetchone()
        return _row_to_record(row) if row else None

    def get_latest_completed(self, user_id: str, analysis_type: AnalysisType) -> AnalysisRecord | None:
        conn = self._get_connection()
        with self._conn_lock, _translate_errors("get_latest_completed"):
            row = conn.execute(
                f"""
                SELECT {_RECORD_COLUMNS} FROM analysis_records
                WHERE user_id = ? AND type = ? AND status = 'completed'
                ORDER BY analyzed_at DESC
                LIMIT 1
                """,
                (user_id, analysis_type),
            ).fetchone()
        return _row_to_record(row) if row else None

    def get_latest_by_type(self, user_id: str) -> dict[str, AnalysisRecord | None]:
        return {analysis_type: self.get_latest_completed(user_id, analysis_type) for analysis_type in ANALYSIS_TYPES}

    # Readiness snapshots

    def save_readiness(self, readiness: ReadinessScore) -> ReadinessScore:
        conn = self._get_connection()
        with self._conn_lock, _translate_errors("save_readiness"):
            conn.execute(
                """
                INSERT INTO readiness_scores (
                    user_id, overall, coding_score, portfolio_score, resume_score,
                    weights_json, target_role, target_role_name, last_calculated
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    overall = excluded.overall,
                    coding_score = excluded.coding_score,
                    portfolio_score = excluded.portfolio_score,
                    resume_score = excluded.resume_score,
                    weights_json = excluded.weights_json,
                    target_role = excluded.target_role,
                    target_role_name = excluded.target_role_name,
                    last_calculated = excluded.last_calculated
                """,
                (
                    readiness.user_id,
                    readiness.overall,
                    readiness.coding_score,
                    readiness.portfolio_score,
                    readiness.resume_score,
                    readiness.weights.model_dump_json(),
                    readiness.target_role,
                    readiness.target_role_name,
                    _iso(readiness.last_calculated),
                ),
            )
        return readiness

    def get_readiness(self, user_id: str) -> ReadinessScore | None:
        conn = self._get_connection()
        with self._conn_lock, _translate_errors("get_readiness"):
            row = conn.execute(
                """
                SELECT user_id, overall, coding_score, portfolio_score, resume_score,
                       weights_json, target_role, target_role_name, last_calculated
                FROM readiness_scores WHERE user_id = ?
                """,
                (user_id,),
            ).fetchone()
        if not row:
            return None
        return ReadinessScore(
            user_id=row[0],
            overall=row[1],
            coding_score=row[2],
            portfolio_score=row[3],
            resume_score=row[4],
            weights=Weights.model_validate_json(row[5]),
            target_role=row[6],
            target_role_name=row[7],
            last_calculated=datetime.fromisoformat(row[8]),
        )

    # Insight run log

    def log_insight_run(
        self,
        *,
        run_id: str,
        task: str,
        provider: str,
        model: str,
        status: str,
        error_code: str | None = None,
        latency_ms: int | None = None,
    ) -> None:
        conn = self._get_connection()
        with self._conn_lock, _translate_errors("log_insight_run"):
            conn.execute(
                """
                INSERT INTO insight_runs (
                    created_at, run_id, task, provider, model, status, error_code, latency_ms
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (_iso(_utc_now()), run_id, task, provider, model, status, error_code, latency_ms),
            )

    def count_insight_runs(self, status: str | None = None) -> int:
        conn = self._get_connection()
        with self._conn_lock, _translate_errors("count_insight_runs"):
            if status is None:
                row = conn.execute("SELECT COUNT(*) FROM insight_runs").fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM insight_runs WHERE status = ?", (status,)).fetchone()
        return int(row[0]) if row else 0

    # Retention

    def purge_stale_records(self, retention_days: int) -> dict[str, int]:
        """Delete unfinished/failed records and insight runs older than the retention window."""
        conn = self._get_connection()
        cutoff = _iso(_utc_now() - timedelta(days=max(1, int(retention_days))))
        with self._conn_lock, _translate_errors("purge_stale_records"):
            records = conn.execute(
                "DELETE FROM analysis_records WHERE status != 'completed' AND created_at < ?",
                (cutoff,),
            ).rowcount
            runs = conn.execute("DELETE FROM insight_runs WHERE created_at < ?", (cutoff,)).rowcount
        deleted = {"analysis_records": max(0, records), "insight_runs": max(0, runs)}
        if any(deleted.values()):
            logger.info(
                "analysis_store_purged analysis_records=%s insight_runs=%s",
                deleted["analysis_records"],
                deleted["insight_runs"],
            )
        return deleted


def _row_to_record(row: tuple[Any, ...]) -> AnalysisRecord:
    return AnalysisRecord(
        id=row[0],
        user_id=row[1],
        type=row[2],
        raw_stats=json.loads(row[3]) if row[3] else {},
        result=json.loads(row[4]) if row[4] else {},
        score=row[5],
        insight=Insight.model_validate_json(row[6]) if row[6] else None,
        status=row[7],
        error=row[8],
        analyzed_at=_parse_dt(row[9]),
        expires_at=_parse_dt(row[10]),
        created_at=datetime.fromisoformat(row[11]),
    )


@lru_cache(maxsize=1)
def get_analysis_store() -> AnalysisStore:
    return AnalysisStore(settings.analysis_db_path)
