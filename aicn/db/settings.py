"""Settings key/value storage."""

import logging
from typing import Any, Dict, Optional

from psycopg import Connection
from psycopg.types.json import Jsonb
from pydantic import ValidationError

from ..errors import InvalidSettingsError
from ..models import SETTINGS_DEFAULTS, ContentSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Read and write admin-controlled settings with baked-in defaults."""

    def get_value(self, conn: Connection, key: str) -> Optional[Any]:
        """Get a single setting, falling back to its default when unset."""
        with conn.cursor() as cur:
            cur.execute("SELECT value FROM settings WHERE key = %s", (key,))
            row = cur.fetchone()
        if row:
            return row["value"]
        return SETTINGS_DEFAULTS.get(key)

    def set_value(self, conn: Connection, key: str, value: Any) -> None:
        """Set a single setting."""
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO settings (key, value, updated_at)
                VALUES (%s, %s, CURRENT_TIMESTAMP)
                ON CONFLICT (key) DO UPDATE SET
                    value = EXCLUDED.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, Jsonb(value)),
            )
        conn.commit()

    def get_all(self, conn: Connection) -> Dict[str, Any]:
        """Get every setting with defaults applied for absent keys."""
        settings = dict(SETTINGS_DEFAULTS)
        with conn.cursor() as cur:
            cur.execute("SELECT key, value FROM settings")
            for row in cur.fetchall():
                settings[row["key"]] = row["value"]
        return settings

    def get_content_settings(self, conn: Connection) -> ContentSettings:
        """Get validated content settings; unusable stored values yield defaults."""
        stored = self.get_all(conn)
        try:
            return ContentSettings(**{k: stored[k] for k in SETTINGS_DEFAULTS})
        except ValidationError as e:
            logger.warning("Stored settings are invalid, using defaults: %s", e)
            return ContentSettings()

    def update_multiple(self, conn: Connection, updates: Dict[str, Any]) -> ContentSettings:
        """
        Validate and store several settings at once.

        Unknown keys are ignored.

        Raises:
            InvalidSettingsError: if the merged settings break the content limits
        """
        known = {k: v for k, v in updates.items() if k in SETTINGS_DEFAULTS}
        merged = {**self.get_all(conn), **known}
        try:
            validated = ContentSettings(**{k: merged[k] for k in SETTINGS_DEFAULTS})
        except ValidationError as e:
            errors = "; ".join(err["msg"] for err in e.errors())
            raise InvalidSettingsError(errors) from e

        for key in known:
            self.set_value(conn, key, getattr(validated, key))
        return validated
