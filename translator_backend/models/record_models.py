from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TranslationRecord:
    original_text: str
    translated_text: Dict[str, Optional[str]]
    language: str
    model: str
    rating_number: Optional[int] = None
    ratings: Dict[str, Optional[int]] = field(default_factory=dict)

    def rating_for(self, model: str) -> Optional[int]:
        if self.ratings:
            return self.ratings.get(model)
        return self.rating_number if model == self.model else None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "originalText": self.original_text,
            "translatedText": dict(self.translated_text),
            "language": self.language,
            "model": self.model,
        }
        if self.rating_number is not None:
            payload["ratingNumber"] = self.rating_number
        if self.ratings:
            payload["ratings"] = dict(self.ratings)
        return payload

    @classmethod
    def from_request(cls, body) -> "TranslationRecord":
        return cls(
            original_text=body.original_text,
            translated_text=dict(body.translated_text or {}),
            language=body.language,
            model=body.model,
            rating_number=body.rating_number,
            ratings=dict(body.ratings or {}),
        )
