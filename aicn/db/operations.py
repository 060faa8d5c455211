"""Operation history in database."""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pendulum
from psycopg import Connection
from psycopg.types.json import Jsonb


class OperationRunStore:
    """Record manual and scheduled pipeline operations."""

    def create_run(
        self,
        conn: Connection,
        operation: str,
        started_at: Optional[datetime] = None,
    ) -> int:
        """
        Create a new operation record.

        Returns:
            Run ID
        """
        if started_at is None:
            started_at = pendulum.now("UTC")

        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO operation_runs (operation, started_at, status)
                VALUES (%s, %s, 'running')
                RETURNING id
                """,
                (operation, started_at),
            )
            run_id = cur.fetchone()["id"]

        conn.commit()
        return run_id

    def finish_run(
        self,
        conn: Connection,
        run_id: int,
        status: str,
        stats: Optional[Dict[str, Any]] = None,
        finished_at: Optional[datetime] = None,
    ) -> None:
        """Update run status and statistics."""
        if finished_at is None:
            finished_at = pendulum.now("UTC")

        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE operation_runs
                SET status = %s, finished_at = %s, stats_json = %s
                WHERE id = %s
                """,
                (status, finished_at, Jsonb(stats) if stats else None, run_id),
            )

        conn.commit()

    def get_recent_runs(self, conn: Connection, limit: int = 10) -> List[Dict]:
        """Get recent runs, newest first."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT * FROM operation_runs
                ORDER BY started_at DESC
                LIMIT %s
                """,
                (limit,),
            )
            return cur.fetchall()
