"""Editorial storage in database."""

from datetime import date
from typing import List, Optional

from psycopg import Connection

from ..models import Editorial, EditorialStatus


class EditorialStore:
    """Manage weekly editorials in database."""

    def create(self, conn: Connection, editorial: Editorial) -> Optional[int]:
        """
        Save a generated editorial as a draft.

        Returns:
            New editorial ID, or None if the week already has one
        """
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO editorials
                    (title, content, week_start, week_end, status, ai_generated_at)
                VALUES (%s, %s, %s, %s, 'draft', CURRENT_TIMESTAMP)
                ON CONFLICT (week_start) DO NOTHING
                RETURNING id
                """,
                (editorial.title, editorial.content, editorial.week_start, editorial.week_end),
            )
            row = cur.fetchone()
        conn.commit()
        return row["id"] if row else None

    def find_by_id(self, conn: Connection, editorial_id: int) -> Optional[Editorial]:
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM editorials WHERE id = %s", (editorial_id,))
            row = cur.fetchone()
        return Editorial(**row) if row else None

    def find_by_week(self, conn: Connection, week_start: date) -> Optional[Editorial]:
        """Get the editorial covering the week starting on a Monday."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM editorials WHERE week_start = %s", (week_start,))
            row = cur.fetchone()
        return Editorial(**row) if row else None

    def find_latest_published(self, conn: Connection) -> Optional[Editorial]:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT * FROM editorials
                WHERE status = 'published'
                ORDER BY published_at DESC
                LIMIT 1
                """
            )
            row = cur.fetchone()
        return Editorial(**row) if row else None

    def find_all(
        self,
        conn: Connection,
        status: Optional[EditorialStatus] = None,
        limit: int = 20,
    ) -> List[Editorial]:
        """List editorials, newest first."""
        query = "SELECT * FROM editorials"
        params: list = []
        if status is not None:
            query += " WHERE status = %s"
            params.append(status.value)
        query += " ORDER BY created_at DESC LIMIT %s"
        params.append(limit)

        with conn.cursor() as cur:
            cur.execute(query, params)
            return [Editorial(**row) for row in cur.fetchall()]

    def update(self, conn: Connection, editorial_id: int, title: str, content: str) -> bool:
        """Replace the title and body. Returns False if the editorial does not exist."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE editorials SET title = %s, content = %s WHERE id = %s",
                (title, content, editorial_id),
            )
            changed = cur.rowcount
        conn.commit()
        return changed > 0

    def publish(self, conn: Connection, editorial_id: int) -> bool:
        """Mark an editorial published now. Returns False if it does not exist."""
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE editorials
                SET status = 'published', published_at = CURRENT_TIMESTAMP
                WHERE id = %s
                """,
                (editorial_id,),
            )
            changed = cur.rowcount
        conn.commit()
        return changed > 0

    def delete(self, conn: Connection, editorial_id: int) -> bool:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM editorials WHERE id = %s", (editorial_id,))
            deleted = cur.rowcount
        conn.commit()
        return deleted > 0

    def count(self, conn: Connection, status: Optional[EditorialStatus] = None) -> int:
        query = "SELECT COUNT(*) AS n FROM editorials"
        params: list = []
        if status is not None:
            query += " WHERE status = %s"
            params.append(status.value)
        with conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchone()["n"]
