from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.database import engine, Base
from app.core.logging_config import (
    setup_logging,
    CorrelationIdMiddleware,
    log_tag_event,
)
from app.api.error_handlers import register_exception_handlers
from app.api.endpoints import tags, article_tags
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import logging

# Configure structured JSON logging
audit_logger = setup_logging()
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Starting {settings.PROJECT_NAME}...")

    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}...")
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Blog backend: tags, article-tag links and tag popularity",
    version="1.0.0",
    lifespan=lifespan,
)

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

register_exception_handlers(app)

log_tag_event(
    event_type="app.startup",
    message=f"{settings.PROJECT_NAME} starting",
    event_category="system",
    debug=settings.DEBUG,
    rate_limit_enabled=settings.RATE_LIMIT_ENABLED,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tags.router, prefix="/api/tags", tags=["tags"])
app.include_router(
    article_tags.router, prefix="/api/article-tags", tags=["article-tags"]
)


@app.get("/")
def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": "1.0.0",
        "description": "Blog tag and article-tag service",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
