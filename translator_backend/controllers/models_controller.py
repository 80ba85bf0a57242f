"""
/**
 * @file translator_backend/controllers/models_controller.py
 * @description 模型列表控制器。
 */
"""

from fastapi import APIRouter

from translator_backend.services import list_available_models


router = APIRouter()


@router.get("/api/models")
def list_models():
    return list_available_models()
