import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from .config import settings
from .core.enums import ErrorCode
from .core.exceptions import GameException
from .database import engine, Base

# Import all models to ensure they're registered with SQLAlchemy
from .combat.models import CombatSessionRecord, CombatLogRecord

from .combat.router import router as combat_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("combat-tracker")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.app_name,
    description="""
## Combat Tracker API

Live combat tracking for tabletop RPG encounters:

- **Initiative**: participants ordered highest initiative first, ties keep entry order
- **Hit points**: damage burns temporary HP first and may drive HP negative (overkill);
  healing caps at max HP and never restores temporary HP
- **Status effects**: timed effects tick down once per round and expire at zero;
  permanent effects never expire
- **Turns**: next/previous turn with automatic round counting

### Flow
1. Create a session with `POST /combat-sessions`
2. Step through turns with `POST /combat-sessions/{id}/actions/next-turn`
3. Apply damage, healing and effects through the other `actions/*` endpoints
4. Read the combat log with `GET /combat-sessions/{id}/log`
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details or {}}}


@app.exception_handler(GameException)
async def game_exception_handler(request: Request, exc: GameException):
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(_error_body(exc.code.value, exc.detail, exc.details)),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder(
            _error_body(ErrorCode.VALIDATION_ERROR.value, "Request validation failed", {"errors": exc.errors()})
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=_error_body(ErrorCode.INTERNAL_SERVER_ERROR.value, "Internal server error"),
    )


app.include_router(combat_router)


@app.get("/", tags=["root"])
def root():
    """API root - returns basic info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health", tags=["root"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
