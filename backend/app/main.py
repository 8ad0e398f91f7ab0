from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError

from backend.app.core.config import settings
from backend.app.core.logging_config import configure_logging
from backend.app.db.store import init_store
from backend.app.services.notifier import close_notifier, init_notifier
import backend.app.routers.health as health
import backend.app.routers.reservations as reservations
from backend.app.routers.static_site import SiteStaticFiles


configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_store(settings)
    init_notifier(settings)
    logger.info("Reservation API started", site=settings.SITE_NAME, store=str(settings.reservations_path))
    try:
        yield
    finally:
        await close_notifier(settings.NOTIFY_DRAIN_SECONDS)


app = FastAPI(
    title=f"{settings.SITE_NAME} Reservations",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    return reservations.error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body.")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", path=request.url.path, exc_info=exc)
    return reservations.error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, reservations.INTERNAL_ERROR_MESSAGE
    )


app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(reservations.router, prefix=settings.API_PREFIX)
# Static site last so API routes take precedence
if settings.STATIC_DIR is not None and settings.STATIC_DIR.is_dir():
    app.mount(
        "/",
        SiteStaticFiles(directory=settings.STATIC_DIR, excluded_prefixes=(settings.API_PREFIX,)),
        name="static",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.app.main:app", host=settings.HOST, port=settings.PORT)
