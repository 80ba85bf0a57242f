import logging
import sqlite3
import time
from typing import Any, Dict, List

from translator_backend.models.record_models import TranslationRecord
from translator_backend.services.errors import PersistenceError

logger = logging.getLogger("database.repository")

SCHEMA = """
CREATE TABLE IF NOT EXISTS translations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    original_text TEXT NOT NULL,
    translated_text TEXT NOT NULL,
    language TEXT NOT NULL,
    model TEXT NOT NULL,
    rating INTEGER CHECK (rating IS NULL OR (rating BETWEEN 1 AND 10))
);
"""


class TranslationRepository:
    def __init__(self, pool):
        self.pool = pool
        self._init_db()

    def _init_db(self):
        with self.pool.acquire() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    def _timed(self, label: str, func, *args):
        start_time = time.time()
        result = func(*args)
        duration = (time.time() - start_time) * 1000
        if duration > 30:
            logger.warning("Slow query detected (%s): %.2fms", label, duration)
        return result

    def _insert_row(self, original_text: str, text: str, language: str, model: str, rating) -> int:
        with self.pool.acquire() as conn:
            cursor = conn.execute(
                """
                INSERT INTO translations (original_text, translated_text, language, model, rating)
                VALUES (?, ?, ?, ?, ?)
                """,
                (original_text, text, language, model, rating),
            )
            conn.commit()
            return cursor.lastrowid

    def save(self, record: TranslationRecord) -> int:
        """
        Insert one row per model in ``record.translated_text``.

        Each row is committed on its own. When an insert fails the rows written
        before it stay in the table and PersistenceError reports how many there were.
        """
        saved = 0
        for model, text in record.translated_text.items():
            try:
                row_id = self._timed(
                    "insert",
                    self._insert_row,
                    record.original_text,
                    text,
                    record.language,
                    model,
                    record.rating_for(model),
                )
            except sqlite3.Error as e:
                logger.error("Error saving translation for model %s: %s", model, e)
                raise PersistenceError(f"Failed to save translation for model {model}: {e}", saved=saved) from e
            saved += 1
            logger.debug("Saved translation id=%s model=%s", row_id, model)
        logger.info("Saved %s translation rows", saved)
        return saved

    def list(self) -> List[Dict[str, Any]]:
        def _do_list():
            with self.pool.acquire() as conn:
                cursor = conn.execute(
                    "SELECT id, original_text, translated_text, language, model, rating FROM translations"
                )
                return [dict(row) for row in cursor.fetchall()]

        try:
            return self._timed("list", _do_list)
        except sqlite3.Error as e:
            logger.error("Error fetching translations: %s", e)
            raise PersistenceError(f"Failed to fetch translations: {e}") from e
