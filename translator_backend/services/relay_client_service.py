"""
/**
 * @file translator_backend/services/relay_client_service.py
 * @description 中继客户端：保存翻译记录与读取全部记录。
 */
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from translator_backend.config import Settings, load_settings
from translator_backend.models.record_models import TranslationRecord
from translator_backend.services.errors import PersistenceError

logger = logging.getLogger("services.relay_client")


class RelayClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/") if base_url else None
        self._initial_settings = settings
        self._session = session or requests.Session()

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    @property
    def base_url(self) -> str:
        return self._base_url or self.settings.relay_base_url

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.settings.request_timeout, **kwargs)
        except requests.ConnectionError as e:
            raise PersistenceError(
                f"Network error: Please ensure your server is running and reachable at {self.base_url}."
            ) from e
        except requests.RequestException as e:
            raise PersistenceError(str(e)) from e
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def save(self, record: TranslationRecord) -> Dict[str, Any]:
        logger.info("Saving translation for models %s", list(record.translated_text))
        response = self._request("POST", "/api/save-translation", json=record.to_payload())
        if not response.ok:
            logger.error("Error response text: %s", response.text)
            raise PersistenceError(f"Failed to save translation: {response.text}")
        try:
            return response.json()
        except ValueError:
            return {"message": response.text}

    def list(self) -> List[Dict[str, Any]]:
        response = self._request("GET", "/api/get-translations")
        if not response.ok:
            raise PersistenceError("Failed to fetch translations")
        try:
            data = response.json()
        except ValueError as e:
            raise PersistenceError(f"Invalid response body: {response.text}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"Unexpected response: {data!r}")
        return data
