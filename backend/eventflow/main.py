"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventflow.config import settings
from eventflow.database import Base, engine
from eventflow.errors import WorkflowError

# Import routers
from eventflow.routers import events, planning, reviews, users, venues

# Import all models so Base.metadata knows about them
from eventflow.models.user import User                              # noqa: F401
from eventflow.models.venue import Venue                            # noqa: F401
from eventflow.models.event import Event                            # noqa: F401
from eventflow.models.event_version import EventVersion             # noqa: F401
from eventflow.models.approval import Approval                      # noqa: F401
from eventflow.models.audit_log import AuditLogEntry                # noqa: F401
from eventflow.models.debrief import Debrief                        # noqa: F401
from eventflow.models.ai_content_version import AiContentVersion    # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Flow",
    description="Venue event proposal, review and debrief workflow",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(venues.router, prefix="/api/venues", tags=["Venues"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(planning.router, prefix="/api/planning", tags=["Planning"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "field_errors": exc.field_errors},
    )


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
