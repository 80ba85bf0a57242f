"""
/**
 * @file translator_backend/services/errors.py
 * @description 翻译流程的异常类型。
 */
"""

from __future__ import annotations

from typing import Optional


class TranslatorError(Exception):
    """Base exception for the translation flow."""


class ValidationError(TranslatorError):
    """Submission rejected before any network call (empty text, unknown model)."""


class UnsupportedLanguage(ValidationError):
    """Target language has no short code for the provider that needs one."""

    def __init__(self, language: str, provider: str = "deepl"):
        super().__init__(f"Unsupported language: {language}")
        self.language = language
        self.provider = provider


class ProviderError(TranslatorError):
    """Transport or API failure reported by a provider."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class PersistenceError(TranslatorError):
    """Storage failure. Rows committed before the failure stay committed."""

    def __init__(self, message: str, saved: int = 0):
        super().__init__(message)
        self.message = message
        self.saved = saved
