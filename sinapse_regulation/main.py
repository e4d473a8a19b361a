import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sinapse_regulation.api import health, nir, regulation_config, regulations
from sinapse_regulation.config import get_settings
from sinapse_regulation.errors import RegulationError
from sinapse_regulation.logging_config import configure_logging
from sinapse_regulation.middleware.error_handler import (
    generic_exception_handler,
    regulation_error_handler,
)
from sinapse_regulation.middleware.rate_limit import limiter
from sinapse_regulation.notifications.notifier import RegulationNotifier
from sinapse_regulation.services.firestore import RegulationFirestore
from sinapse_regulation.services.pubsub import RegulationPubSub

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services at startup, clean up at shutdown."""
    settings = get_settings()
    configure_logging("regulation-service", settings.env)

    app.state.firestore = RegulationFirestore(settings)
    app.state.pubsub = None
    try:
        app.state.pubsub = RegulationPubSub(settings)
    except Exception:
        logger.warning("Pub/Sub not available, regulation notifications disabled", exc_info=True)
    app.state.notifier = RegulationNotifier(app.state.pubsub)

    logger.info("Sinapse regulation service started (env=%s)", settings.env)
    yield

    await app.state.notifier.drain()
    await app.state.firestore.close()
    logger.info("Sinapse regulation service shut down")


app = FastAPI(
    title="Sinapse Regulation Service",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Error handling
app.add_exception_handler(RegulationError, regulation_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# CORS
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
)

app.include_router(health.router)
app.include_router(regulation_config.router)
app.include_router(regulations.router)
app.include_router(nir.router)
