import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

from todo_api import handlers
from todo_api.config import Settings
from todo_api.errors import TodoAppError
from todo_api.storage import Database

logger = logging.getLogger(__name__)

requests_total = Counter("todo_requests_total", "Total HTTP requests", ["method", "status"])


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the API.

    A ``database`` passed in is used as is and left open on shutdown;
    otherwise one is built from ``settings`` at startup and must answer a
    ping before the app starts serving.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "database", None) is None
        if owned:
            db = Database.from_settings(settings)
            try:
                db.ping()
            except TodoAppError:
                db.close()
                logger.critical("database unreachable, aborting startup")
                raise
            if settings.db_create_schema:
                db.create_schema()
            app.state.database = db
        logger.info("todo api started")

        yield

        logger.info("todo api shutting down")
        if owned:
            app.state.database.close()
            app.state.database = None

    app = FastAPI(title="Todo API", lifespan=lifespan)
    if database is not None:
        app.state.database = database

    @app.middleware("http")
    async def count_requests(request: Request, call_next):
        response = await call_next(request)
        requests_total.labels(request.method, str(response.status_code)).inc()
        return response

    @app.exception_handler(TodoAppError)
    async def todo_error_handler(request: Request, exc: TodoAppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def body_error_handler(request: Request, exc: RequestValidationError):
        logger.info("%s %s rejected body: %s", request.method, request.url.path, exc.errors())
        return JSONResponse({"message": "body must be a todo json object"}, status_code=400)

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.get("/metrics", response_class=PlainTextResponse)
    def metrics():
        return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(handlers.router)
    return app


app = create_app()


def main():
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.ap_host, port=settings.ap_port)


if __name__ == "__main__":
    main()
