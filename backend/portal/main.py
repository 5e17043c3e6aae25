# backend/portal/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import models
from .api import auth_router, news_router, contact_router, docs_router, admins_router
from .config import settings
from .core.errors import register_error_handlers
from .database import build_engine, build_session_factory
from .services.media import build_media_storage
from .utils.logging import api_logger


def create_app() -> FastAPI:
    """Build the application with its persistence handle and attachment store"""
    app = FastAPI(title="Zone Portal API")

    engine = build_engine(settings.DATABASE_URL)
    models.Base.metadata.create_all(bind=engine)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.media_storage = build_media_storage()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.STORAGE_BACKEND == "local":
        app.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=str(settings.UPLOADS_PATH)), name="uploads")

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(news_router)
    app.include_router(contact_router)
    app.include_router(docs_router)
    app.include_router(admins_router)

    @app.get("/")
    async def root():
        return {"message": "Zone Portal API is running"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    api_logger.info("Application created", extra={
        "environment": settings.ENVIRONMENT,
        "storage_backend": settings.STORAGE_BACKEND
    })
    return app


app = create_app()
