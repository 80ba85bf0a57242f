"""
/**
 * @file translator_backend/services/orchestrator_service.py
 * @description 翻译编排：校验 -> 纠错(可选) -> 多模型并行翻译 -> 评分(可选) -> 保存(可选)。
 */
"""

from __future__ import annotations

import concurrent.futures
import logging
import re
import threading
from typing import Callable, List, Optional, Tuple

from translator_backend.config import Settings, load_settings
from translator_backend.models.record_models import TranslationRecord
from translator_backend.models.submission_models import (
    Mode,
    ModelResult,
    Stage,
    SubmissionState,
    TranslationRequest,
)
from translator_backend.services.errors import (
    PersistenceError,
    ProviderError,
    TranslatorError,
    UnsupportedLanguage,
    ValidationError,
)
from translator_backend.services.model_registry_service import (
    DEEPL,
    SUPPORTED_LANGUAGES,
    deepl_language_code,
    provider_for_model,
)
from translator_backend.services.provider_client_service import ProviderAdapter
from translator_backend.services.relay_client_service import RelayClient

logger = logging.getLogger(__name__)

RATING_RE = re.compile(r"^\s*([+-]?\d+)")

_EXECUTOR: Optional[concurrent.futures.ThreadPoolExecutor] = None
_EXECUTOR_LOCK = threading.Lock()


def shared_executor(max_workers: int = 4) -> concurrent.futures.ThreadPoolExecutor:
    """Process-wide pool used by every orchestrator that is not given its own."""
    global _EXECUTOR
    with _EXECUTOR_LOCK:
        if _EXECUTOR is None:
            _EXECUTOR = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="translate")
        return _EXECUTOR


def parse_rating(text: Optional[str]) -> Optional[int]:
    """Leading integer of a rating reply, or None when it is missing or outside 1..10."""
    match = RATING_RE.match(text or "")
    if not match:
        return None
    value = int(match.group(1))
    return value if 1 <= value <= 10 else None


class TranslationOrchestrator:
    def __init__(
        self,
        adapter: ProviderAdapter,
        relay: Optional[RelayClient] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        settings: Optional[Settings] = None,
    ):
        self.adapter = adapter
        self._initial_settings = settings
        self.relay = relay or RelayClient(settings=settings)
        self.executor = executor or shared_executor(self.settings.max_workers)

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    def _fan_out(self, func: Callable, items: List[Tuple[str, tuple]]) -> List[Tuple[str, object, Optional[TranslatorError]]]:
        futures = [(key, self.executor.submit(func, *args)) for key, args in items]
        outcomes = []
        for key, future in futures:
            try:
                outcomes.append((key, future.result(), None))
            except TranslatorError as e:
                logger.error("Task %s failed: %s", key, e)
                outcomes.append((key, None, e))
            except Exception as e:
                logger.exception("Task %s raised unexpectedly", key)
                outcomes.append((key, None, TranslatorError(f"Unexpected error: {e}")))
        return outcomes

    def validate(self, state: SubmissionState) -> SubmissionState:
        request = state.request
        if not (request.original_text or "").strip():
            return state.fail(ValidationError("Please enter the message."))

        for model in request.models_to_use():
            provider = provider_for_model(model, self.settings)
            if provider is None:
                return state.fail(ValidationError(f"Unknown model: {model}"))
            if provider == DEEPL and deepl_language_code(request.target_language) is None:
                return state.fail(UnsupportedLanguage(request.target_language))

        if request.target_language not in SUPPORTED_LANGUAGES:
            return state.fail(ValidationError(f"Unsupported target language: {request.target_language}"))
        return state

    def correct(self, state: SubmissionState) -> SubmissionState:
        if state.stage == Stage.FAILED or state.request.mode != Mode.CORRECT:
            return state
        state = state.evolve(stage=Stage.CORRECTING)
        try:
            corrected = self.adapter.correct(state.text, state.request.target_language)
        except TranslatorError as e:
            logger.error("Error during text correction: %s", e)
            return state.fail(e)
        if not corrected:
            return state.fail(ProviderError("openai", "Correction returned no text"))
        logger.debug("Corrected message: %s", corrected)
        return state.evolve(text=corrected)

    def translate(self, state: SubmissionState) -> SubmissionState:
        if state.stage == Stage.FAILED:
            return state
        state = state.evolve(stage=Stage.TRANSLATING)
        models = state.request.models_to_use()
        if not models:
            logger.info("No models selected, nothing to translate")
            return state

        language = state.request.target_language
        outcomes = self._fan_out(self.adapter.translate, [(m, (m, language, state.text)) for m in models])

        results = [(model, ModelResult(translated_text=text)) for model, text, error in outcomes if error is None]
        failures = [(model, error) for model, _, error in outcomes if error is not None]
        state = state.with_results(results).with_errors((model, str(error)) for model, error in failures)
        if not results:
            return state.fail(failures[0][1])
        return state

    def rate(self, state: SubmissionState) -> SubmissionState:
        if state.stage == Stage.FAILED or not state.request.rating_enabled or not state.results:
            return state
        state = state.evolve(stage=Stage.RATING)
        outcomes = self._fan_out(self.adapter.rate, [(m, (r.translated_text,)) for m, r in state.results])

        rated = []
        failures = []
        for (model, result), (_, reply, error) in zip(state.results, outcomes):
            if error is not None:
                failures.append((f"rating:{model}", str(error)))
                rated.append((model, result))
                continue
            rated.append((model, ModelResult(translated_text=result.translated_text, rating=parse_rating(reply))))
        return state.with_results(rated).with_errors(failures)

    def persist(self, state: SubmissionState) -> SubmissionState:
        if state.stage == Stage.FAILED or not state.request.persist_enabled or not state.results:
            return state
        state = state.evolve(stage=Stage.PERSISTING)
        request = state.request
        ratings = state.ratings if request.rating_enabled else {}
        record = TranslationRecord(
            original_text=request.original_text,
            translated_text=state.translations,
            language=request.target_language,
            model=request.model,
            rating_number=ratings.get(request.model),
            ratings=ratings,
        )
        try:
            self.relay.save(record)
        except PersistenceError as e:
            logger.error("Error saving translation: %s", e)
            return state.evolve(persisted=False, persist_error=str(e))
        return state.evolve(persisted=True)

    def run(self, request: TranslationRequest) -> SubmissionState:
        state = SubmissionState.start(request)
        for step in (self.validate, self.correct, self.translate, self.rate, self.persist):
            state = step(state)
            if state.stage == Stage.FAILED:
                logger.warning("Submission failed at %s: %s", step.__name__, state.error)
                return state
        return state.evolve(stage=Stage.DONE)

    def submit(self, request: TranslationRequest) -> SubmissionState:
        """Run a submission and raise its error if it ended in the failed stage."""
        state = self.run(request)
        if state.stage == Stage.FAILED and state.error is not None:
            raise state.error
        return state


def build_orchestrator(settings: Optional[Settings] = None) -> TranslationOrchestrator:
    return TranslationOrchestrator(ProviderAdapter(settings=settings), RelayClient(settings=settings), settings=settings)
