import logging

from fastapi import APIRouter, Request

from sinapse_regulation.config import get_settings
from sinapse_regulation.middleware.rate_limit import limiter, HEALTH_RATE_LIMIT
from sinapse_regulation.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@limiter.limit(HEALTH_RATE_LIMIT)
async def health_check(request: Request) -> HealthResponse:
    settings = get_settings()
    checks: dict[str, str] = {}
    status = "healthy"

    firestore = getattr(request.app.state, "firestore", None)
    if firestore is not None:
        try:
            ok = await firestore.health_check()
            checks["firestore"] = "ok" if ok else "fail"
        except Exception:
            logger.warning("Firestore health check failed", exc_info=True)
            checks["firestore"] = "fail"
    else:
        checks["firestore"] = "not_configured"

    # Pub/Sub is best-effort; its absence only degrades notifications
    checks["pubsub"] = "ok" if getattr(request.app.state, "pubsub", None) else "not_configured"

    if checks["firestore"] == "fail":
        status = "unhealthy"
    elif checks["pubsub"] == "not_configured" and checks["firestore"] == "ok":
        status = "degraded"

    return HealthResponse(
        status=status,
        environment=settings.env,
        checks=checks,
    )
