from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from app.core.exceptions import BlogException

logger = logging.getLogger(__name__)


async def blog_exception_handler(request: Request, exc: BlogException) -> JSONResponse:
    """Render any BlogException subclass as ``{"detail", "code"}``."""
    logger.warning(
        f"{exc.error_code.value}: {exc.message} ({request.method} {request.url.path})"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.error_code.value},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogException, blog_exception_handler)
