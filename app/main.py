# app/main.py
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.core.middleware import BodySizeLimitMiddleware
from app.ticket.notifier import NotificationDispatcher
from app.ticket.routes import debug_router
from app.ticket.routes import router as ticket_router
from app.ticket.store import TicketStore

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    http = httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT_SECONDS, transport=transport)
    store = TicketStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "support_backend_starting",
            port=settings.PORT,
            email_channel="configured" if settings.email_configured else "skipped",
            whatsapp_channel="configured" if settings.whatsapp_configured else "skipped",
            debug_routes=settings.ENABLE_DEBUG_ROUTES,
        )
        yield
        await http.aclose()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESC,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.dispatcher = NotificationDispatcher.from_settings(settings, store, http)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)

    register_exception_handlers(app)

    # Routers
    app.include_router(ticket_router)
    if settings.ENABLE_DEBUG_ROUTES:
        app.include_router(debug_router)

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
