from fastapi import FastAPI
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.cors import CORSMiddleware

from gstledger.api.rate_limit import increment_rate_limit_exceeded, limiter
from gstledger.api.routes_gst import router as gst_router
from gstledger.api.routes_health import router as health_router
from gstledger.api.routes_metrics import router as metrics_router
from gstledger.core.config import settings
from gstledger.core.errors import register_error_handlers
from gstledger.core.logger import init_logging
from gstledger.core.monitoring import init_monitoring


async def _rate_limit_handler(request, exc: RateLimitExceeded):
    increment_rate_limit_exceeded()
    return JSONResponse(status_code=429, content={"detail": "Too many requests"})


def create_app() -> FastAPI:
    init_logging()
    init_monitoring()

    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    register_error_handlers(app)
    app.include_router(gst_router)
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)
    return app


app = create_app()
