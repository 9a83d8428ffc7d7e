import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from recipe_browser.core.dependencies import get_cache_store, get_recipe_catalog
from recipe_browser.errors import (
    BadRequest,
    CacheError,
    Forbidden,
    InvalidURL,
    NetworkError,
    NotFound,
    Unauthorized,
)
from recipe_browser.routes import api

logger = logging.getLogger(__name__)

# App configuration
APP_NAME = "Recipe Browser"
VERSION = "1.0.0"

# NetworkError kinds that mirror a client-side problem; everything else is a bad gateway.
_NETWORK_ERROR_STATUS = {
    InvalidURL: 400,
    BadRequest: 400,
    Unauthorized: 401,
    Forbidden: 403,
    NotFound: 404,
}


def _resolve(app: FastAPI, provider):
    return app.dependency_overrides.get(provider, provider)()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start every session with an empty image cache and a fresh recipe list."""
    cache = _resolve(app, get_cache_store)
    await run_in_threadpool(cache.reset)

    catalog = _resolve(app, get_recipe_catalog)
    if await run_in_threadpool(catalog.refresh_safely):
        logger.info("Loaded %d recipes at startup", len(catalog.recipes))
    else:
        logger.warning("Startup recipe fetch failed: %s", catalog.last_error)

    yield


# Create FastAPI app
app = FastAPI(title=APP_NAME, version=VERSION, lifespan=lifespan)

# Include routers
app.include_router(api.router)


@app.exception_handler(NetworkError)
async def network_error_handler(request: Request, exc: NetworkError):
    status = _NETWORK_ERROR_STATUS.get(type(exc), 502)
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": exc.kind})


@app.exception_handler(CacheError)
async def cache_error_handler(request: Request, exc: CacheError):
    return JSONResponse(status_code=500, content={"detail": str(exc), "error": exc.kind})


# Basic health check
@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
