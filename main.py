import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlmodel import Session

from tourney.config import ADMIN_PASSWORD, ADMIN_USERNAME, LOG_LEVEL
from tourney.database import create_db_and_tables, engine
from tourney.errors import EngineError, InvalidInput
from tourney.limiter import limiter
from tourney.services.auth import create_user, get_user_by_username

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create database tables and seed the admin account
    create_db_and_tables()
    with Session(engine) as db:
        if not get_user_by_username(db, ADMIN_USERNAME):
            create_user(db, username=ADMIN_USERNAME, password=ADMIN_PASSWORD, role="admin")
            logger.info("seeded admin user %s", ADMIN_USERNAME)
    yield


app = FastAPI(
    title="Tournament Competition Engine",
    description="Team registration, check-in, brackets and match reporting for community tournaments",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg") if errors else None
    error = InvalidInput(detail)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


from tourney.routers import admin, auth, matches, teams, tournaments  # noqa: E402

app.include_router(auth.router, tags=["auth"])
app.include_router(tournaments.router, tags=["tournaments"])
app.include_router(teams.router, tags=["teams"])
app.include_router(matches.router, tags=["matches"])
app.include_router(admin.router, tags=["admin"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
