"""
/**
 * @file translator_backend/controllers/translate_controller.py
 * @description DeepL 翻译中继控制器。
 */
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from translator_backend.controllers.dependencies import get_deepl_service
from translator_backend.models.translate_request_model import DeeplTranslateRequest
from translator_backend.services import DeeplTranslationService, ProviderError


logger = logging.getLogger("controllers.translate")

router = APIRouter()


@router.post("/api/translate-deepl")
def translate_deepl(req: DeeplTranslateRequest, service: DeeplTranslationService = Depends(get_deepl_service)):
    if not req.text or not req.target_lang:
        raise HTTPException(status_code=400, detail={"error": "Text and targetLang are required"})
    try:
        translation = service.translate(req.text, req.target_lang)
    except ProviderError as e:
        logger.error("DeepL translation failed: %s", e)
        raise HTTPException(status_code=500, detail={"error": "Translation failed"})
    return {"translation": translation}
