from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from gallery_quest.api.editor.router import router as editor_router
from gallery_quest.api.metrics import router as metrics_router
from gallery_quest.api.public.gallery_images import router as gallery_images_router
from gallery_quest.api.public.healthz import router as healthz_router
from gallery_quest.api.public.tags import router as tags_router
from gallery_quest.core.cache import build_cache_store
from gallery_quest.core.config import load_settings
from gallery_quest.core.errors import ApiError, ErrorCode, json_error_response
from gallery_quest.core.gallery_images import GalleryImageQueryService
from gallery_quest.core.invalidation import CacheInvalidationPolicy
from gallery_quest.core.logging import configure_logging, get_logger
from gallery_quest.core.renditions import RenditionResolver
from gallery_quest.core.request_id import RequestIdMiddleware
from gallery_quest.db.engine import create_engine
from gallery_quest.db.models.base import Base
from gallery_quest.db.versions import VersionStore

log = get_logger(__name__)


def _validation_details(exc: RequestValidationError) -> dict:
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in {"body", "query", "path"}]
        if loc:
            fields.append(".".join(loc))
    return {"fields": sorted(set(fields))}


def create_app() -> FastAPI:
    configure_logging()
    settings = load_settings()

    app = FastAPI(title="gallery-quest", docs_url="/api/docs", redoc_url="/api/redoc")

    @app.exception_handler(ApiError)
    async def _api_error_handler(request: Request, exc: ApiError):  # type: ignore[no-redef]
        return json_error_response(
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            request=request,
            details=exc.details,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore[no-redef]
        return json_error_response(
            code=ErrorCode.BAD_REQUEST,
            message="Invalid request parameters",
            status_code=400,
            request=request,
            details=_validation_details(exc),
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[no-redef]
        log.exception("unhandled_exception path=%s", request.url.path)
        return json_error_response(
            code=ErrorCode.API_ERROR,
            message="Internal server error",
            status_code=500,
            request=request,
        )

    app.add_middleware(RequestIdMiddleware)

    engine = create_engine(settings.database_url)
    versions = VersionStore(engine)
    cache = build_cache_store(settings.cache_backend, engine=engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.versions = versions
    app.state.cache = cache
    app.state.invalidation = CacheInvalidationPolicy(versions)
    app.state.gallery_images = GalleryImageQueryService(
        engine=engine,
        versions=versions,
        cache=cache,
        renditions=RenditionResolver(settings.media_base_url),
        cache_ttl_s=settings.cache_ttl_s,
    )

    @app.on_event("startup")
    async def _startup() -> None:  # type: ignore[no-redef]
        if not settings.auto_create_schema:
            return
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("schema_ready database=%s", engine.url.get_backend_name())

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # type: ignore[no-redef]
        await engine.dispose()

    app.include_router(healthz_router)
    app.include_router(gallery_images_router)
    app.include_router(tags_router)
    app.include_router(metrics_router)
    app.include_router(editor_router)

    log.info(
        "app_created env=%s cache_backend=%s cache_ttl_s=%s",
        settings.app_env,
        settings.cache_backend,
        settings.cache_ttl_s,
    )
    return app


app = create_app()
