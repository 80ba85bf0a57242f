"""
/**
 * @file translator_backend/config/settings.py
 * @description 后端配置加载与合并（config.json + config.local.json），环境变量优先。
 */
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(REPO_ROOT, "config.json")
CONFIG_LOCAL_PATH = os.path.join(REPO_ROOT, "config.local.json")
CONFIG_EXAMPLE_PATH = os.path.join(REPO_ROOT, "config.example.json")

DEFAULT_RELAY_BASE_URL = "http://localhost:3000"
DEFAULT_ENDPOINTS = {
    "openai": "https://api.openai.com/v1/chat/completions",
    "google": "https://generativelanguage.googleapis.com/v1beta/models",
}

logger = logging.getLogger("config_loader")


def _load_json(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            value = json.load(f)
            return value if isinstance(value, dict) else {}
    except FileNotFoundError:
        return {}


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge_dicts(base[key], value)
        else:
            base[key] = value
    return base


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class Settings:
    raw: Dict[str, Any]

    @property
    def endpoints(self) -> Dict[str, str]:
        merged = dict(DEFAULT_ENDPOINTS)
        merged.update({k: v for k, v in _section(self.raw, "endpoints").items() if isinstance(v, str) and v})
        return merged

    @property
    def api_keys(self) -> Dict[str, str]:
        return _section(self.raw, "api_keys")

    @property
    def models(self) -> Dict[str, Any]:
        return _section(self.raw, "models")

    @property
    def parameters(self) -> Dict[str, Any]:
        return _section(self.raw, "parameters")

    def model_catalog(self, provider: str) -> Optional[List[str]]:
        """Configured model list for a provider, or None to keep the built-in catalog."""
        value = self.models.get(provider)
        if isinstance(value, list) and all(isinstance(m, str) and m for m in value) and value:
            return list(value)
        return None

    @property
    def pinned_model(self) -> str:
        value = self.models.get("pinned")
        return value if isinstance(value, str) and value else "gpt-3.5-turbo"

    @property
    def relay_base_url(self) -> str:
        env = os.getenv("RELAY_BASE_URL")
        if env:
            return env.rstrip("/")
        value = _section(self.raw, "relay").get("base_url")
        if isinstance(value, str) and value:
            return value.rstrip("/")
        return DEFAULT_RELAY_BASE_URL

    @property
    def database_path(self) -> str:
        env = os.getenv("TRANSLATIONS_DB_PATH")
        if env:
            return env
        value = _section(self.raw, "storage").get("database_path")
        if isinstance(value, str) and value:
            return value if os.path.isabs(value) else os.path.join(REPO_ROOT, value)
        return os.path.join(REPO_ROOT, "data", "translations.db")

    @property
    def pool_size(self) -> int:
        value = _section(self.raw, "storage").get("pool_size")
        return value if isinstance(value, int) and value > 0 else 10

    @property
    def request_timeout(self) -> float:
        value = self.parameters.get("request_timeout")
        return float(value) if isinstance(value, (int, float)) and value > 0 else 60.0

    @property
    def max_workers(self) -> int:
        value = self.parameters.get("max_workers")
        return value if isinstance(value, int) and value > 0 else 4

    def _resolve_key(self, name: str, *env_names: str) -> Optional[str]:
        for env_name in env_names:
            value = os.getenv(env_name)
            if value:
                return value
        value = self.api_keys.get(name)
        return value if isinstance(value, str) and value else None

    def resolve_openai_key(self) -> Optional[str]:
        return self._resolve_key("openai", "OPENAI_API_KEY")

    def resolve_google_key(self) -> Optional[str]:
        return self._resolve_key("google", "GOOGLE_API_KEY")

    def resolve_deepl_key(self) -> Optional[str]:
        return self._resolve_key("deepl", "DEEPL_API_KEY")


_CACHED_SETTINGS: Optional[Settings] = None
_LAST_LOAD_TIME = 0.0
_CONFIG_HASH = ""
_SETTINGS_LOCK = threading.Lock()


def _deep_diff(d1: Dict[str, Any], d2: Dict[str, Any], path="") -> list:
    diffs = []
    for k in set(d1.keys()) | set(d2.keys()):
        p = f"{path}.{k}" if path else k
        if k not in d1:
            diffs.append(f"Added: {p}")
        elif k not in d2:
            diffs.append(f"Removed: {p}")
        elif isinstance(d1[k], dict) and isinstance(d2[k], dict):
            diffs.extend(_deep_diff(d1[k], d2[k], p))
        elif d1[k] != d2[k]:
            # values may hold api keys
            diffs.append(f"Changed: {p}")
    return diffs


def reload_settings(
    base_path: str = CONFIG_PATH,
    local_path: str = CONFIG_LOCAL_PATH,
    example_path: str = CONFIG_EXAMPLE_PATH,
    force: bool = False,
) -> Settings:
    global _CACHED_SETTINGS, _LAST_LOAD_TIME, _CONFIG_HASH

    with _SETTINGS_LOCK:
        now = time.time()
        # Debounce: 500ms
        if not force and _CACHED_SETTINGS and (now - _LAST_LOAD_TIME < 0.5):
            return _CACHED_SETTINGS

        try:
            base_cfg = _load_json(base_path)
            if not base_cfg and os.path.exists(example_path):
                base_cfg = _load_json(example_path)

            local_cfg = _load_json(local_path)
            merged = _merge_dicts(base_cfg, local_cfg)

            new_hash = hashlib.md5(json.dumps(merged, sort_keys=True).encode("utf-8")).hexdigest()

            if _CACHED_SETTINGS and new_hash == _CONFIG_HASH:
                _LAST_LOAD_TIME = now
                return _CACHED_SETTINGS

            is_reload = _CACHED_SETTINGS is not None
            if is_reload:
                diffs = _deep_diff(_CACHED_SETTINGS.raw, merged)
                if diffs:
                    logger.info("Config changes detected: %s", "; ".join(diffs))

            _CACHED_SETTINGS = Settings(raw=merged)
            _CONFIG_HASH = new_hash
            _LAST_LOAD_TIME = now

            if is_reload:
                logger.info("Configuration reloaded successfully.")

        except (OSError, ValueError) as e:
            logger.error("Failed to reload config: %s. Keeping old config.", e)
            if not _CACHED_SETTINGS:
                logger.warning("Initializing with empty settings due to load failure.")
                _CACHED_SETTINGS = Settings(raw={})

    return _CACHED_SETTINGS


def load_settings() -> Settings:
    """
    Get current settings. Lazy loads on first call.
    Subsequent reloads are handled by the file watcher calling reload_settings().
    """
    if _CACHED_SETTINGS is None:
        return reload_settings()
    return _CACHED_SETTINGS
