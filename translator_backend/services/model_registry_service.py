"""
/**
 * @file translator_backend/services/model_registry_service.py
 * @description 模型目录服务：各服务商可用模型、支持的语言与 DeepL 语言代码。
 */
"""

from __future__ import annotations

from typing import Dict, List, Optional

from translator_backend.config import Settings, load_settings


OPENAI = "openai"
GOOGLE = "google"
DEEPL = "deepl"

PROVIDERS = (OPENAI, GOOGLE, DEEPL)

# 默认模型列表，作为后备
DEFAULT_CATALOGS: Dict[str, List[str]] = {
    OPENAI: ["gpt-3.5-turbo", "gpt-4", "gpt-4-turbo"],
    GOOGLE: ["gemini-1.5-flash", "gemini-1.5-ultra", "gemini-1.5-pro-002", "gemini-1.5-flash-002"],
    DEEPL: ["Default"],
}

SUPPORTED_LANGUAGES = ["Hindi", "Spanish", "English", "Japanese", "French", "German"]

DEEPL_LANGUAGE_CODES: Dict[str, str] = {
    "English": "EN-US",
    "Spanish": "ES",
    "French": "FR",
    "German": "DE",
    "Japanese": "JA",
}


def provider_catalogs(settings: Settings | None = None) -> Dict[str, List[str]]:
    s = settings or load_settings()
    catalogs = {}
    for provider in PROVIDERS:
        catalogs[provider] = s.model_catalog(provider) or list(DEFAULT_CATALOGS[provider])
    return catalogs


def provider_for_model(model_id: str, settings: Settings | None = None) -> Optional[str]:
    for provider, models in provider_catalogs(settings).items():
        if model_id in models:
            return provider
    return None


def deepl_language_code(language: str) -> Optional[str]:
    return DEEPL_LANGUAGE_CODES.get(language)


def list_available_models(settings: Settings | None = None) -> Dict[str, object]:
    return {
        "providers": provider_catalogs(settings),
        "languages": list(SUPPORTED_LANGUAGES),
        "deepl_language_codes": dict(DEEPL_LANGUAGE_CODES),
    }
