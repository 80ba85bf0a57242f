"""
/**
 * @file translator_backend/models/translate_request_model.py
 * @description 中继接口请求/响应模型（Pydantic）。
 */
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class DeeplTranslateRequest(BaseModel):
    text: Optional[str] = None
    target_lang: Optional[str] = Field(default=None, alias="targetLang")


class SaveTranslationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    original_text: Optional[str] = Field(default=None, alias="originalText")
    translated_text: Optional[Dict[str, Optional[str]]] = Field(default=None, alias="translatedText")
    language: Optional[str] = None
    model: Optional[str] = None
    rating_number: Optional[int] = Field(default=None, alias="ratingNumber")
    ratings: Optional[Dict[str, Optional[int]]] = None

    def missing_fields(self) -> list:
        missing = []
        for name in ("original_text", "translated_text", "language", "model"):
            if not getattr(self, name):
                missing.append(name)
        return missing

    def invalid_ratings(self) -> list:
        """Names of ratings outside 1..10; `ratingNumber` is reported as rating_number."""
        invalid = []
        if self.rating_number is not None and not 1 <= self.rating_number <= 10:
            invalid.append("rating_number")
        for model, value in (self.ratings or {}).items():
            if value is not None and not 1 <= value <= 10:
                invalid.append(f"ratings.{model}")
        return invalid


class TranslationRow(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: int
    original_text: str
    translated_text: str
    language: str
    model: str
    rating: Optional[int] = None
