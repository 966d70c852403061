"""
FastAPI application entry point for Brototype Resolve
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from resolve.config import get_settings
from resolve.constants import APP_DESCRIPTION, APP_NAME
from resolve.database import supabase_manager
from resolve.errors import ResolveError
from resolve.logging_config import setup_logging
from resolve.routes import admin, auth, complaints, dashboard, functions, security
from resolve.services.scheduler import scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info(f"{APP_NAME} starting up")

    await supabase_manager.initialize()
    scheduler.start()

    yield

    # Shutdown
    await scheduler.stop()
    await supabase_manager.close()
    logger.info(f"{APP_NAME} shutting down")


# Initialize FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan
)

# Get settings
settings = get_settings()


@app.exception_handler(ResolveError)
async def resolve_error_handler(request: Request, exc: ResolveError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(auth.router)
app.include_router(complaints.router)
app.include_router(dashboard.router)
app.include_router(security.router)
app.include_router(admin.router)
app.include_router(functions.router)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": f"{APP_NAME} is running", "status": "healthy"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    backend = await supabase_manager.health_check()
    return {
        "status": "healthy" if backend else "degraded",
        "service": "brototype-resolve",
        "backend": backend,
        "scheduler": scheduler.get_status(),
    }
