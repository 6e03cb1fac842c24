"""Event Desk web application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventdesk.core.auth import AuthContext
from eventdesk.core.config import settings
from eventdesk.core.scheduler import shutdown_scheduler, start_scheduler
from eventdesk.routes import events, expenses, registrations, sync
from eventdesk.service.module import get_events_module

# Configure logging
settings.log_dir.mkdir(parents=True, exist_ok=True)
log_file = settings.log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
# Request lines from the HTTP client are noise at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Event Desk application")
    module = get_events_module()
    await module.sync(AuthContext.service())
    start_scheduler(module)
    yield
    # Shutdown
    shutdown_scheduler()
    await module.aclose()
    logger.info("Event Desk application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Event lifecycle, registration and budget tracking backed by a remote Event Service",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(expenses.router)
app.include_router(sync.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
