import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import LOG_LEVEL, STATIC_DIR
from db import create_db_and_tables
from routers import (
    admin,
    auth,
    crisis,
    discover,
    emergency_contacts,
    forums,
    pages,
    payments,
    professional_backups,
    ratings,
    recordings,
    sessions,
    users,
    wallet,
)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(title="TimeRent")

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.on_event("startup")
def on_startup() -> None:
    create_db_and_tables()
    logger.info("Database tables ready")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log anything a route did not handle and answer with a bare 500."""
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth.router)
app.include_router(users.router, prefix="/users")
app.include_router(sessions.router, prefix="/sessions")
app.include_router(discover.router)
app.include_router(payments.router, prefix="/payments")
app.include_router(wallet.router, prefix="/wallet")
app.include_router(ratings.router, prefix="/ratings")
app.include_router(crisis.router, prefix="/crisis")
app.include_router(emergency_contacts.router, prefix="/emergency-contacts")
app.include_router(professional_backups.router, prefix="/professional-backups")
app.include_router(forums.router, prefix="/community/forums")
app.include_router(recordings.router, prefix="/session-recordings")
app.include_router(admin.router, prefix="/admin")

app.include_router(pages.router)
