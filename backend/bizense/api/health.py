from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from bizense.db import check_db

router = APIRouter(tags=["health"])


class DbHealth(BaseModel):
    ok: bool
    latency_ms: float


class HealthResponse(BaseModel):
    ok: bool
    status: str
    env: str
    db: DbHealth
    time: str


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request, response: Response):
    """Liveness plus a store round-trip. Never cached; needs no token."""
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    context = request.app.state.context
    db_ok, latency_ms = await check_db(context.session_factory)
    return HealthResponse(
        ok=True,
        # The process is up even when the store is not
        status="OK" if db_ok else "DEGRADED",
        env=context.settings.ENV,
        db=DbHealth(ok=db_ok, latency_ms=round(latency_ms, 2)),
        time=datetime.now(timezone.utc).isoformat(),
    )
