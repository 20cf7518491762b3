import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import engine
from app.exceptions import setup_exception_handlers
from app.logging_config import setup_logging
from app.middleware import TimingMiddleware
from app.routers import projects, sections, users

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.LOG_LEVEL)
    if not settings.MAIL_API_KEY:
        logger.warning("MAIL_API_KEY is not configured; invitation emails will only be logged")
    logger.info("Project service starting (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()

app = FastAPI(
    title="Project Service",
    description="Projects, team membership and email invitations",
    version="1.0.0",
    lifespan=lifespan,
)

setup_exception_handlers(app)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(projects.router)
app.include_router(sections.router)
app.include_router(users.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
