"""
/**
 * @file translator_backend/services/provider_client_service.py
 * @description 服务商调用封装：OpenAI（对话补全）/ Google Gemini（单提示生成）/ DeepL（经中继转发）。
 */
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from translator_backend.config import Settings, load_settings
from translator_backend.services.errors import ProviderError, UnsupportedLanguage, ValidationError
from translator_backend.services.model_registry_service import (
    DEEPL,
    GOOGLE,
    OPENAI,
    deepl_language_code,
    provider_for_model,
)

logger = logging.getLogger("services.provider_client")

TRANSLATION_MAX_TOKENS = 100
RATING_MAX_TOKENS = 10

SAMPLING = {
    "temperature": 0.3,
    "top_p": 1.0,
    "frequency_penalty": 0.0,
    "presence_penalty": 0.0,
}


def translation_prompt(language: str) -> str:
    return (
        f"You are a translator. Translate the following text to {language}, do not correct the grammatical "
        "errors and do not write anything else other than the provided text translated."
    )


def correction_prompt(language: str) -> str:
    return (
        f"Correct and improve the following text in {language}. Do not add any comments, titles, or extra "
        "information. Provide only the corrected and improved version of the original message."
    )


RATING_PROMPT = (
    "Rate the quality of the following translation on a scale of 1 to 10. Provide only the rating number."
)


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return response.text


class ProviderAdapter:
    """
    Uniform entry point for the three providers.

    One requests.Session per provider is created up front and reused for every call,
    so a single adapter instance is meant to live for the whole process.
    """

    def __init__(self, settings: Optional[Settings] = None, sessions: Optional[Dict[str, requests.Session]] = None):
        self._initial_settings = settings
        sessions = sessions or {}
        self._sessions = {provider: sessions.get(provider) or requests.Session() for provider in (OPENAI, GOOGLE, DEEPL)}

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    @property
    def pinned_model(self) -> str:
        return self.settings.pinned_model

    def close(self) -> None:
        for session in self._sessions.values():
            session.close()

    def _post(self, provider: str, url: str, **kwargs) -> requests.Response:
        try:
            return self._sessions[provider].post(url, timeout=self.settings.request_timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s request failed: %s", provider, e)
            raise ProviderError(provider, str(e)) from e

    def _json(self, provider: str, response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(provider, f"Invalid response body: {response.text}", response.status_code) from e
        if not isinstance(data, dict):
            raise ProviderError(provider, f"Unexpected response: {data!r}", response.status_code)
        return data

    def call_openai(self, model: str, system_prompt: str, user_text: str, max_tokens: int = TRANSLATION_MAX_TOKENS) -> str:
        key = self.settings.resolve_openai_key()
        if not key:
            raise ProviderError(OPENAI, "API key is missing. Set OPENAI_API_KEY or config.local.json")
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            "max_tokens": max_tokens,
            **SAMPLING,
        }
        headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}
        response = self._post(OPENAI, self.settings.endpoints[OPENAI], headers=headers, json=payload)
        if response.status_code != 200:
            raise ProviderError(OPENAI, _error_message(response), response.status_code)
        data = self._json(OPENAI, response)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(OPENAI, f"Unexpected response: {data}", response.status_code) from e
        return (content or "").strip()

    def call_google(self, model: str, system_prompt: str, user_text: str) -> str:
        key = self.settings.resolve_google_key()
        if not key:
            raise ProviderError(GOOGLE, "API key is missing. Set GOOGLE_API_KEY or config.local.json")
        url = f"{self.settings.endpoints[GOOGLE].rstrip('/')}/{model}:generateContent"
        payload = {"contents": [{"parts": [{"text": f"{system_prompt}, text is: {user_text}"}]}]}
        headers = {"x-goog-api-key": key, "Content-Type": "application/json"}
        response = self._post(GOOGLE, url, headers=headers, json=payload)
        if response.status_code != 200:
            raise ProviderError(GOOGLE, _error_message(response), response.status_code)
        data = self._json(GOOGLE, response)
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            raise ProviderError(GOOGLE, f"No candidates returned: {data}")
        candidate = candidates[0]
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        # returned untrimmed
        text = "".join(part.get("text") or "" for part in parts if isinstance(part, dict))
        if not text:
            # blocked replies carry a finishReason and no content
            raise ProviderError(GOOGLE, f"No text returned (finishReason={candidate.get('finishReason')})")
        return text

    def call_deepl(self, text: str, language: str) -> str:
        target_lang = deepl_language_code(language)
        if not target_lang:
            raise UnsupportedLanguage(language)
        base_url = self.settings.relay_base_url
        try:
            response = self._sessions[DEEPL].post(
                f"{base_url}/api/translate-deepl",
                json={"targetLang": target_lang, "text": text},
                timeout=self.settings.request_timeout,
            )
        except requests.ConnectionError as e:
            raise ProviderError(
                DEEPL, f"Network error: Please ensure your server is running and reachable at {base_url}."
            ) from e
        except requests.RequestException as e:
            raise ProviderError(DEEPL, str(e)) from e
        if not response.ok:
            logger.error("Error response text: %s", response.text)
            raise ProviderError(DEEPL, f"Failed to fetch translation from DeepL: {response.text}", response.status_code)
        data = self._json(DEEPL, response)
        return data.get("translation") or ""

    def invoke(
        self,
        provider: str,
        model_id: str,
        system_prompt: str,
        user_text: str,
        language: Optional[str] = None,
        max_tokens: int = TRANSLATION_MAX_TOKENS,
    ) -> str:
        if provider == OPENAI:
            return self.call_openai(model_id, system_prompt, user_text, max_tokens=max_tokens)
        if provider == GOOGLE:
            return self.call_google(model_id, system_prompt, user_text)
        if provider == DEEPL:
            if not language:
                raise ValidationError("DeepL needs a target language")
            return self.call_deepl(user_text, language)
        raise ValidationError(f"Unknown provider: {provider}")

    def translate(self, model_id: str, language: str, text: str) -> str:
        provider = provider_for_model(model_id, self.settings)
        if provider is None:
            raise ValidationError(f"Unknown model: {model_id}")
        logger.debug("translate model=%s provider=%s language=%s", model_id, provider, language)
        return self.invoke(provider, model_id, translation_prompt(language), text, language=language)

    def correct(self, text: str, language: str) -> str:
        return self.call_openai(self.pinned_model, correction_prompt(language), text, max_tokens=TRANSLATION_MAX_TOKENS)

    def rate(self, translated_text: str) -> str:
        return self.call_openai(self.pinned_model, RATING_PROMPT, translated_text, max_tokens=RATING_MAX_TOKENS)
