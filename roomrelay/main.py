import logging
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.settings import get_settings
from roomrelay.api.restful.rooms import router as rooms_router
from roomrelay.api.ws.relay import router as relay_router
from roomrelay.api.ws.connection.connection_manager import ConnectionManager
from roomrelay.api.ws.connection.router import EventRouter

# Get settings instance
settings = get_settings()

# Configure logging
handlers = [logging.StreamHandler()]
if settings.log_file:
    handlers.append(logging.FileHandler(settings.log_file))
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format=settings.log_format,
    handlers=handlers,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("FastAPI server is starting up...")
    app.state.connection_manager = ConnectionManager.from_settings(settings)
    app.state.event_router = EventRouter(app.state.connection_manager)
    yield
    manager = app.state.connection_manager
    for connection in manager.registry:
        manager.disconnect(connection)
    logger.info("FastAPI server is shutting down...")


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan
)

# Add CORS middleware with configurable settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)

app.include_router(rooms_router)
app.include_router(relay_router)


@app.get("/")
async def root():
    logger.info("Root endpoint accessed")
    return {"message": "Welcome to Room Relay", "status": "running"}


@app.get("/health")
async def health_check():
    manager = app.state.connection_manager
    return {
        "status": "healthy",
        "service": settings.app_name,
        "connections": manager.get_total_connections(),
        "rooms": len(manager.directory),
    }


@app.get("/settings")
async def get_app_settings():
    """Get current application settings (excluding sensitive information)"""
    logger.info("Settings endpoint accessed")
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
        "host": settings.host,
        "port": settings.port,
        "log_level": settings.log_level,
        "max_connections": settings.max_connections,
        "outbox_max_size": settings.outbox_max_size,
    }

if __name__ == "__main__":
    logger.info("Starting server with Uvicorn...")
    uvicorn.run(
        "roomrelay.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
