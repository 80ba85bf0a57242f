from .pool import SQLiteConnectionPool
from .repository import TranslationRepository

__all__ = ["SQLiteConnectionPool", "TranslationRepository"]
