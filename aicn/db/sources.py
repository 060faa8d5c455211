"""Source management in database."""

from typing import Dict, List, Optional

from psycopg import Connection

from ..config import SourceConfig
from ..models import Source


class SourceManager:
    """Manage sources in database."""

    def sync_sources(
        self,
        conn: Connection,
        sources: List[SourceConfig],
    ) -> Dict[str, int]:
        """
        Upsert sources from config into the database.

        Returns:
            Mapping of source name to database ID
        """
        source_map = {}

        with conn.cursor() as cur:
            for source in sources:
                cur.execute(
                    """
                    INSERT INTO sources (name, url, rss_feed, language, active)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (name) DO UPDATE SET
                        url = EXCLUDED.url,
                        rss_feed = EXCLUDED.rss_feed,
                        language = EXCLUDED.language,
                        active = EXCLUDED.active
                    RETURNING id
                    """,
                    (
                        source.name,
                        source.url,
                        source.rss_feed,
                        source.language,
                        source.active,
                    ),
                )
                source_map[source.name] = cur.fetchone()["id"]

        conn.commit()
        return source_map

    def get_sources(self, conn: Connection) -> List[Source]:
        """Get all sources from database."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM sources ORDER BY name")
            return [Source(**row) for row in cur.fetchall()]

    def get_active(self, conn: Connection) -> List[Source]:
        """Get sources that should be scraped."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM sources WHERE active = TRUE ORDER BY name")
            return [Source(**row) for row in cur.fetchall()]

    def get_by_name(self, conn: Connection, name: str) -> Optional[Source]:
        """Get a source by name."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM sources WHERE name = %s", (name,))
            row = cur.fetchone()
        return Source(**row) if row else None

    def update_last_scraped(self, conn: Connection, source_id: int) -> None:
        """Stamp a source as scraped now."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE sources SET last_scraped = CURRENT_TIMESTAMP WHERE id = %s",
                (source_id,),
            )
        conn.commit()

    def set_active(self, conn: Connection, name: str, active: bool) -> bool:
        """Enable or disable a source. Sources are never deleted."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE sources SET active = %s WHERE name = %s",
                (active, name),
            )
            changed = cur.rowcount
        conn.commit()
        return changed > 0
