from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import structlog
import logging

from core.config import settings
from core.db import create_client, get_database
from core.errors import register_error_handlers
from stores.admins import AdminStore
from stores.registrants import RegistrantStore
from utils.email import EmailSender

from routes.routes import router as rest_router
from routes.users import router as users_router
from routes.admin import router as admin_router


logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO), format="%(message)s")

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)
log = structlog.get_logger(__name__)


def create_app(registrants=None, admins=None, mailer=None) -> FastAPI:
    """
    Builds the application. Stores and the mail sender can be passed in;
    otherwise they are created from settings and owned by the app.
    """
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_error_handlers(app)

    client = None
    if registrants is None or admins is None:
        client = create_client()
        database = get_database(client)
        registrants = registrants or RegistrantStore(database["registrants"])
        admins = admins or AdminStore(database["admins"])

    app.state.mongo_client = client
    app.state.registrants = registrants
    app.state.admins = admins
    app.state.mailer = mailer or EmailSender()

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        return await call_next(request)

    @app.on_event("startup")
    async def prepare_store():
        await app.state.registrants.ensure_indexes()
        await app.state.admins.ensure_indexes()
        log.info("app.startup")

    @app.on_event("shutdown")
    async def close_store():
        if app.state.mongo_client is not None:
            app.state.mongo_client.close()
        log.info("app.shutdown")

    app.include_router(rest_router)
    app.include_router(users_router)
    app.include_router(admin_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3000)
