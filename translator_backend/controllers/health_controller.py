"""
/**
 * @file translator_backend/controllers/health_controller.py
 * @description 健康检查控制器。
 */
"""

import sqlite3

from fastapi import APIRouter, Request


router = APIRouter()


@router.get("/health")
def health(request: Request):
    from translator_backend.config import load_settings

    settings = load_settings()

    # Check API keys
    api_keys_status = {
        "openai": bool(settings.resolve_openai_key()),
        "google": bool(settings.resolve_google_key()),
        "deepl": bool(settings.resolve_deepl_key()),
    }

    # Check storage
    pool = getattr(request.app.state, "db_pool", None)
    db_status = {"initialized": pool is not None, "reachable": False}
    if pool is not None:
        try:
            with pool.acquire() as conn:
                conn.execute("SELECT 1")
            db_status["reachable"] = True
        except (sqlite3.Error, TimeoutError):
            db_status["reachable"] = False
        db_status.update(pool.stats())

    is_healthy = api_keys_status["deepl"] and db_status["reachable"]

    return {
        "status": "ok" if is_healthy else "degraded",
        "checks": {
            "api_keys": api_keys_status,
            "database": db_status,
        },
    }
