"""
/**
 * @file translator_backend/controllers/dependencies.py
 * @description 路由依赖：从 app.state 取出启动时创建的单例服务。
 */
"""

from fastapi import HTTPException, Request

from translator_backend.database import TranslationRepository
from translator_backend.services import DeeplTranslationService


def get_translation_repository(request: Request) -> TranslationRepository:
    repo = getattr(request.app.state, "translation_repository", None)
    if repo is None:
        raise HTTPException(status_code=500, detail={"error": "Storage is not initialized"})
    return repo


def get_deepl_service(request: Request) -> DeeplTranslationService:
    service = getattr(request.app.state, "deepl_service", None)
    if service is None:
        raise HTTPException(status_code=500, detail={"error": "DeepL is not initialized"})
    return service
