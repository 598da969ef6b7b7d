import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .db import Base, engine
from .errors import APIError, BadRequest, InternalError, code_for_status, format_error_response
from .routes import auth, clinics, dashboard, inventory, orders, products, settings, templates, users
from .storage import MemoryStore, RecordStore
from .validation import format_errors, is_malformed_json

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.get_settings().storage_backend == "sql":
        # Create tables if not existing. In production, use migrations.
        Base.metadata.create_all(bind=engine)
        logger.info("sql storage ready at %s", engine.url.render_as_string(hide_password=True))
    else:
        logger.info("using in-memory storage")
    yield


def register_error_handlers(app: FastAPI):
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request body" if is_malformed_json(errors) else format_errors(errors)
        return JSONResponse(status_code=BadRequest.status_code, content=BadRequest(message).to_response())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=format_error_response(str(exc.detail), code_for_status(exc.status_code), exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=InternalError.status_code, content=InternalError().to_response())


def create_app(store: Optional[RecordStore] = None) -> FastAPI:
    config.configure_logging()
    app = FastAPI(title="Clinic Supply Ordering API", lifespan=lifespan)
    # used when STORAGE_BACKEND=memory; the sql backend opens a session per request
    app.state.store = store if store is not None else MemoryStore()
    register_error_handlers(app)

    for module in (auth, users, clinics, products, orders, templates, settings, inventory, dashboard):
        app.include_router(module.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "storage": config.get_settings().storage_backend}

    return app


app = create_app()
