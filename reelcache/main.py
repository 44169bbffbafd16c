"""Entry point for the FastAPI-powered movie catalog service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware

from .cache.images import AssetType
from .config import settings
from .context import ApplicationContext
from .errors import RemoteError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    context = await ApplicationContext.create(settings)
    fastapi_app.state.context = context
    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await context.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Cache-first movie catalog backed by TMDB",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_context(app: FastAPI) -> ApplicationContext:
    context = getattr(app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context not initialised")
    return context


def _remote_failure(exc: RemoteError) -> HTTPException:
    logger.warning("Remote movie data unavailable: %s", exc)
    return HTTPException(status_code=502, detail=exc.to_dict())


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/categories")
    async def list_categories() -> list[dict[str, Any]]:
        context = get_context(fastapi_app)
        try:
            categories = await context.get_categories.execute()
        except RemoteError as exc:
            raise _remote_failure(exc) from exc
        return [category.model_dump(mode="json") for category in categories]

    @fastapi_app.get("/movies/{movie_id}")
    async def movie_details(movie_id: int) -> dict[str, Any]:
        context = get_context(fastapi_app)
        try:
            movie = await context.get_movie_details.execute(movie_id)
        except RemoteError as exc:
            raise _remote_failure(exc) from exc
        return movie.model_dump(mode="json")

    @fastapi_app.get("/images/{asset_type}")
    async def image(asset_type: str, url: str = Query(..., min_length=1)) -> Response:
        try:
            resolved_type = AssetType(asset_type.rstrip("s"))
        except ValueError as exc:
            raise HTTPException(
                status_code=400, detail=f"Unknown image type: {asset_type}"
            ) from exc
        context = get_context(fastapi_app)
        try:
            data = await context.image_service.fetch(url, resolved_type)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except RemoteError as exc:
            raise _remote_failure(exc) from exc
        return Response(content=data, media_type="image/jpeg")

    @fastapi_app.delete("/cache", status_code=204)
    async def clear_cache() -> Response:
        context = get_context(fastapi_app)
        await context.clear_caches()
        logger.info("Cleared movie and image caches")
        return Response(status_code=204)


app = create_app()
