"""Tag lookup and article association."""

from typing import Dict, List, Sequence

from psycopg import Connection


class TagStore:
    """Manage tags in database."""

    def find_or_create(self, conn: Connection, name: str) -> int:
        """Get a tag ID by name, creating the tag if needed."""
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO tags (name) VALUES (%s)
                ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
                RETURNING id
                """,
                (name,),
            )
            return cur.fetchone()["id"]

    def tag_article(self, conn: Connection, article_id: int, names: Sequence[str]) -> List[int]:
        """
        Link an article to tags, creating missing ones.

        Does not commit; callers wrap this with the article write.
        """
        tag_ids = []
        for name in _normalize_tags(names):
            tag_id = self.find_or_create(conn, name)
            tag_ids.append(tag_id)
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO article_tags (article_id, tag_id)
                    VALUES (%s, %s)
                    ON CONFLICT DO NOTHING
                    """,
                    (article_id, tag_id),
                )
        return tag_ids

    def get_article_tags(self, conn: Connection, article_id: int) -> List[Dict]:
        """Get tags linked to an article."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT t.* FROM tags t
                JOIN article_tags at ON t.id = at.tag_id
                WHERE at.article_id = %s
                ORDER BY t.name
                """,
                (article_id,),
            )
            return cur.fetchall()


def _normalize_tags(names: Sequence[str]) -> List[str]:
    seen = []
    for name in names:
        cleaned = name.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen
