"""
/**
 * @file translator_backend/services/deepl_service.py
 * @description DeepL 翻译服务（中继端持有密钥）。
 */
"""

from __future__ import annotations

import logging
from typing import Optional

import deepl

from translator_backend.services.errors import ProviderError

logger = logging.getLogger("services.deepl")


class DeeplTranslationService:
    def __init__(self, api_key: Optional[str], translator: Optional[deepl.Translator] = None) -> None:
        self.api_key = api_key
        self._translator = translator

    @property
    def configured(self) -> bool:
        return self._translator is not None or bool(self.api_key)

    @property
    def translator(self) -> deepl.Translator:
        if self._translator is None:
            if not self.api_key:
                raise ProviderError("deepl", "Missing API key. Set DEEPL_API_KEY or config.local.json")
            self._translator = deepl.Translator(self.api_key)
        return self._translator

    def translate(self, text: str, target_lang: str) -> str:
        try:
            result = self.translator.translate_text(text, source_lang=None, target_lang=target_lang)
        except deepl.DeepLException as e:
            logger.error("DeepL translation error: %s", e)
            raise ProviderError("deepl", str(e)) from e
        if isinstance(result, list):
            translated = " ".join(r.text for r in result)
        else:
            translated = result.text
        logger.info("Translation result: %s", translated)
        return translated
