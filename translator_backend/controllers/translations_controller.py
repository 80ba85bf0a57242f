"""
/**
 * @file translator_backend/controllers/translations_controller.py
 * @description 翻译记录控制器：读取全部记录 / 保存记录（每个模型一行）。
 */
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from translator_backend.controllers.dependencies import get_translation_repository
from translator_backend.database import TranslationRepository
from translator_backend.models.record_models import TranslationRecord
from translator_backend.models.translate_request_model import SaveTranslationRequest, TranslationRow
from translator_backend.services import PersistenceError

logger = logging.getLogger("controllers.translations")

router = APIRouter()


@router.get("/api/get-translations", tags=["Translations"], response_model=List[TranslationRow])
def get_translations(repo: TranslationRepository = Depends(get_translation_repository)):
    try:
        return repo.list()
    except PersistenceError as e:
        logger.error("Error fetching translations: %s", e)
        raise HTTPException(status_code=500, detail={"error": "Internal server error"})


@router.post("/api/save-translation", tags=["Translations"])
def save_translation(body: SaveTranslationRequest, repo: TranslationRepository = Depends(get_translation_repository)):
    missing = body.missing_fields()
    if missing:
        raise HTTPException(status_code=400, detail={"error": "Missing required fields", "fields": missing})
    invalid = body.invalid_ratings()
    if invalid:
        raise HTTPException(status_code=400, detail={"error": "Rating must be between 1 and 10", "fields": invalid})

    try:
        repo.save(TranslationRecord.from_request(body))
    except PersistenceError as e:
        logger.error("Error saving translation (%s rows committed): %s", e.saved, e)
        raise HTTPException(status_code=500, detail={"error": "Failed to save translation"})
    return {"message": "Translations saved successfully!"}
