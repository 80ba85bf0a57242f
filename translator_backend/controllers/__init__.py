"""
/**
 * @file translator_backend/controllers/__init__.py
 * @description 控制器（路由）导出。
 */
"""

from .health_controller import router as health_router
from .models_controller import router as models_router
from .translate_controller import router as translate_router
from .translations_controller import router as translations_router

__all__ = [
    "health_router",
    "models_router",
    "translate_router",
    "translations_router",
]
