"""
/**
 * @file translator_backend/main.py
 * @description FastAPI 中继入口（仅装配路由、中间件与启动时创建的单例服务）。
 */
"""

import logging
import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from translator_backend.config import load_settings, reload_settings, CONFIG_PATH, CONFIG_LOCAL_PATH
from translator_backend.controllers import health_router, models_router, translate_router, translations_router
from translator_backend.database import SQLiteConnectionPool, TranslationRepository
from translator_backend.services import DeeplTranslationService

app = FastAPI(title="translator-relay")
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("app")


def _refresh_deepl_service(settings) -> None:
    current = getattr(app.state, "deepl_service", None)
    key = settings.resolve_deepl_key()
    if current is None or current.api_key != key:
        app.state.deepl_service = DeeplTranslationService(key)
        if current is not None:
            logger.info("DeepL credential changed, translator rebuilt")


class ConfigEventHandler(FileSystemEventHandler):
    """Handler for config file changes"""
    def on_modified(self, event):
        if event.is_directory:
            return
        if event.src_path in (CONFIG_PATH, CONFIG_LOCAL_PATH):
            _refresh_deepl_service(reload_settings())


_observer = None


@app.on_event("startup")
async def startup_event():
    global _observer
    settings = load_settings()

    pool = SQLiteConnectionPool.from_settings(settings)
    app.state.db_pool = pool
    app.state.translation_repository = TranslationRepository(pool)
    logger.info("Translation storage ready at %s", settings.database_path)

    _refresh_deepl_service(settings)
    if not app.state.deepl_service.configured:
        logger.warning("DEEPL_API_KEY is not configured, /api/translate-deepl will fail")

    try:
        _observer = Observer()
        config_dir = os.path.dirname(CONFIG_PATH)
        _observer.schedule(ConfigEventHandler(), config_dir, recursive=False)
        _observer.start()
        logger.info("Config watcher started on %s", config_dir)
    except OSError as e:
        logger.error("Failed to start config watcher: %s", e)
        _observer = None


@app.on_event("shutdown")
async def shutdown_event():
    global _observer

    if _observer:
        _observer.stop()
        _observer.join()
        _observer = None
    pool = getattr(app.state, "db_pool", None)
    if pool is not None:
        pool.close_all()


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["POST", "GET"],
    allow_headers=["Content-Type"],
)

app.include_router(health_router)
app.include_router(models_router)
app.include_router(translate_router)
app.include_router(translations_router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
