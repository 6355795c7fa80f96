import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizense.otel import init_otel, instrument_app

init_otel("bizense-backend", environment=os.environ.get("ENV"))

from bizense.api.router import api_router
from bizense.config import Settings
from bizense.context import AppContext
from bizense.core.errors import StoreError
from bizense.core.logging import LoggingMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, context: AppContext | None = None) -> FastAPI:
    """Build the API. Settings are read once here and shared through app.state."""
    if context is None:
        context = AppContext.from_settings(settings or Settings())

    app = FastAPI(
        title="BiZense API",
        version="0.1.0",
    )
    app.state.context = context

    @app.on_event("startup")
    async def announce() -> None:
        logger.info(
            "BiZense backend starting (env=%s, staging_dir=%s)",
            context.settings.ENV,
            context.staging_dir,
        )

    @app.on_event("shutdown")
    async def dispose() -> None:
        await context.close()

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"detail": {"error": {"code": "store_error", "message": exc.message}}},
        )

    app.add_middleware(LoggingMiddleware)
    origins = context.settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed responses for a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    instrument_app(app)
    app.include_router(api_router)
    return app


app = create_app()
