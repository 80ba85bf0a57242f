"""
/**
 * @file translator_backend/models/__init__.py
 * @description 数据模型导出。
 */
"""

from .record_models import TranslationRecord
from .submission_models import Mode, ModelResult, Stage, SubmissionState, TranslationRequest
from .translate_request_model import DeeplTranslateRequest, SaveTranslationRequest, TranslationRow

__all__ = [
    "DeeplTranslateRequest",
    "Mode",
    "ModelResult",
    "SaveTranslationRequest",
    "Stage",
    "SubmissionState",
    "TranslationRecord",
    "TranslationRequest",
    "TranslationRow",
]
