"""Persistence layer for calibration run history."""

from __future__ import annotations

import os
import sqlite3
import tempfile
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from dynasty.errors import ConflictError, NotFoundError, ValidationError
from dynasty.models import AppConfig, CalibrationMetrics, CalibrationRun


DB_PATH_ENV = "DYNASTY_DB_PATH"
DEFAULT_DB_PATH = Path("data") / "dynasty.sqlite"


class CalibrationStore:
    """SQLite-backed run registry.

    ``begin`` takes a write lock with ``BEGIN IMMEDIATE`` before checking for a
    running run, and a partial unique index rejects a second running row, so
    the single-running-run rule holds across processes sharing the file.
    """

    def __init__(self, db_path: Path | str | None = None):
        self._use_uri = False
        env_db = os.getenv(DB_PATH_ENV)
        if env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif db_path is not None:
            self.db_path = Path(db_path)
        elif os.getenv("PYTEST_CURRENT_TEST"):
            test_dir = Path(tempfile.gettempdir()) / "dynasty-test"
            test_dir.mkdir(parents=True, exist_ok=True)
            self.db_path = test_dir / "dynasty.sqlite"
        else:
            self.db_path = DEFAULT_DB_PATH
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=10.0)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri, timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with closing(self._connect()) as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS calibration_runs (
                id TEXT PRIMARY KEY,
                status TEXT NOT NULL,
                started_at TEXT NOT NULL,
                completed_at TEXT,
                error TEXT,
                metrics_json TEXT NOT NULL,
                candidate_json TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS calibration_runs_single_running
            ON calibration_runs (status) WHERE status = 'running'
            """
        )
        conn.commit()

    def begin(self, run: CalibrationRun) -> CalibrationRun:
        running = run.model_copy(update={"status": "running"})
        with closing(self._connect()) as conn:
            conn.isolation_level = None
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT id FROM calibration_runs WHERE status = 'running' LIMIT 1"
                ).fetchone()
                if row is not None:
                    raise ConflictError(f"Calibration run {row['id']} is already running")
                conn.execute(
                    """
                    INSERT INTO calibration_runs (
                        id, status, started_at, completed_at, error, metrics_json, candidate_json
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    self._row_values(running),
                )
            except sqlite3.IntegrityError as exc:
                conn.execute("ROLLBACK")
                raise ConflictError(f"Calibration run could not start: {exc}") from exc
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        return running

    def finish(self, run: CalibrationRun) -> CalibrationRun:
        if not run.is_terminal:
            raise ValidationError("status", f"expected a terminal status, got {run.status!r}")
        with closing(self._connect()) as conn:
            cursor = conn.execute(
                """
                UPDATE calibration_runs
                SET status = ?, completed_at = ?, error = ?, metrics_json = ?, candidate_json = ?
                WHERE id = ? AND status = 'running'
                """,
                (
                    run.status,
                    run.completed_at.isoformat() if run.completed_at else None,
                    run.error,
                    run.metrics.model_dump_json(),
                    run.candidate_config.model_dump_json() if run.candidate_config else None,
                    run.run_id,
                ),
            )
            conn.commit()
            if cursor.rowcount == 0:
                row = conn.execute("SELECT status FROM calibration_runs WHERE id = ?", (run.run_id,)).fetchone()
                if row is None:
                    raise NotFoundError(f"Calibration run {run.run_id} not found")
                raise ConflictError(f"Calibration run {run.run_id} already {row['status']}")
        return run

    def get(self, run_id: str) -> Optional[CalibrationRun]:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT * FROM calibration_runs WHERE id = ?", (run_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_run(row)

    def list_runs(self, limit: int = 20) -> List[CalibrationRun]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM calibration_runs ORDER BY datetime(started_at) DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_run(row) for row in rows]

    def running(self) -> Optional[CalibrationRun]:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT * FROM calibration_runs WHERE status = 'running' LIMIT 1").fetchone()
        if row is None:
            return None
        return self._row_to_run(row)

    def _row_values(self, run: CalibrationRun) -> tuple:
        return (
            run.run_id,
            run.status,
            run.started_at.isoformat(),
            run.completed_at.isoformat() if run.completed_at else None,
            run.error,
            run.metrics.model_dump_json(),
            run.candidate_config.model_dump_json() if run.candidate_config else None,
        )

    def _row_to_run(self, row: sqlite3.Row) -> CalibrationRun:
        def _parse_ts(value: Optional[str]) -> Optional[datetime]:
            return datetime.fromisoformat(value) if value else None

        candidate = row["candidate_json"]
        return CalibrationRun(
            run_id=row["id"],
            status=row["status"],
            started_at=datetime.fromisoformat(row["started_at"]),
            completed_at=_parse_ts(row["completed_at"]),
            error=row["error"],
            metrics=CalibrationMetrics.model_validate_json(row["metrics_json"]),
            candidate_config=AppConfig.model_validate_json(candidate) if candidate else None,
        )


__all__ = ["CalibrationStore", "DB_PATH_ENV"]
