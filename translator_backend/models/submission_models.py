"""
/**
 * @file translator_backend/models/submission_models.py
 * @description 一次翻译提交的请求与状态（不可变值，每一步返回新状态）。
 */
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class Mode(str, Enum):
    TRANSLATE = "translate"
    CORRECT = "correct"


class Stage(str, Enum):
    IDLE = "idle"
    CORRECTING = "correcting"
    TRANSLATING = "translating"
    RATING = "rating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class TranslationRequest:
    original_text: str
    target_language: str
    model: str = "gpt-3.5-turbo"
    mode: Mode = Mode.TRANSLATE
    rating_enabled: bool = False
    persist_enabled: bool = False
    selected_models: Tuple[str, ...] = ()

    def models_to_use(self) -> Tuple[str, ...]:
        if self.rating_enabled:
            # keep selection order, drop repeats
            return tuple(dict.fromkeys(self.selected_models))
        return (self.model,)


@dataclass(frozen=True)
class ModelResult:
    translated_text: str
    rating: Optional[int] = None


@dataclass(frozen=True)
class SubmissionState:
    request: TranslationRequest
    stage: Stage = Stage.IDLE
    text: str = ""
    results: Tuple[Tuple[str, ModelResult], ...] = ()
    errors: Tuple[Tuple[str, str], ...] = ()
    persisted: Optional[bool] = None
    persist_error: Optional[str] = None
    error: Optional[Exception] = None

    @classmethod
    def start(cls, request: TranslationRequest) -> "SubmissionState":
        return cls(request=request, text=request.original_text)

    def evolve(self, **changes: Any) -> "SubmissionState":
        return dataclasses.replace(self, **changes)

    def fail(self, error: Exception) -> "SubmissionState":
        return self.evolve(stage=Stage.FAILED, error=error)

    def with_results(self, results: Iterable[Tuple[str, ModelResult]]) -> "SubmissionState":
        return self.evolve(results=tuple(results))

    def with_errors(self, errors: Iterable[Tuple[str, str]]) -> "SubmissionState":
        return self.evolve(errors=self.errors + tuple(errors))

    @property
    def result_map(self) -> Dict[str, ModelResult]:
        return dict(self.results)

    @property
    def translations(self) -> Dict[str, str]:
        return {model: r.translated_text for model, r in self.results}

    @property
    def ratings(self) -> Dict[str, Optional[int]]:
        return {model: r.rating for model, r in self.results}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "text": self.text,
            "results": {m: {"translated_text": r.translated_text, "rating": r.rating} for m, r in self.results},
            "errors": dict(self.errors),
            "persisted": self.persisted,
            "persist_error": self.persist_error,
            "error": str(self.error) if self.error else None,
        }
