import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizapp.core.config import Settings, settings as default_settings
from quizapp.db.session import Database
from quizapp.routes import questions, quizzes, submissions, users

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Invalid request",
            "details": [
                {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
                for err in exc.errors()
            ],
        },
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API. A database passed in is used as-is and left open on shutdown."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if database is not None:
            app.state.database = database
            yield
            return
        app.state.database = Database(settings.ASYNC_DATABASE_URL)
        logger.info("Database engine created")
        try:
            yield
        finally:
            await app.state.database.dispose()

    app = FastAPI(title="Quiz Platform API", version="1.0.0", lifespan=lifespan)
    if database is not None:
        app.state.database = database

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(quizzes.router, prefix="/quizzes", tags=["quizzes"])
    app.include_router(questions.router, prefix="/questions", tags=["questions"])
    app.include_router(submissions.router, prefix="/submissions", tags=["submissions"])

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app
