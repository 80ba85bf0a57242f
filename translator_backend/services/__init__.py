"""
/**
 * @file translator_backend/services/__init__.py
 * @description 业务服务层导出。
 */
"""

from .deepl_service import DeeplTranslationService
from .errors import PersistenceError, ProviderError, TranslatorError, UnsupportedLanguage, ValidationError
from .model_registry_service import list_available_models, provider_for_model
from .orchestrator_service import TranslationOrchestrator, build_orchestrator, parse_rating
from .provider_client_service import ProviderAdapter
from .relay_client_service import RelayClient

__all__ = [
    "DeeplTranslationService",
    "PersistenceError",
    "ProviderAdapter",
    "ProviderError",
    "RelayClient",
    "TranslationOrchestrator",
    "TranslatorError",
    "UnsupportedLanguage",
    "ValidationError",
    "build_orchestrator",
    "list_available_models",
    "parse_rating",
    "provider_for_model",
]
