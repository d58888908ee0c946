import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.database import check_db_connection, init_db
from .core.exception_handlers import register_exception_handlers
from .core.middleware import TimeoutMiddleware, request_logging_middleware
from .core.rabbitmq import RabbitMQPublisher
from .routers import audit_logs, notifications, tasks

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database and the optional RabbitMQ publisher"""
    logger.info("Starting Task Hub...")
    if init_db():
        logger.info("Database initialized successfully")
    else:
        logger.error("Database initialization failed")

    app.state.publisher = None
    if settings.rabbitmq_enabled:
        publisher = RabbitMQPublisher.from_settings(settings)
        # One attempt, off the event loop; publish_event reconnects on demand
        if await run_in_threadpool(publisher.connect, max_retries=1):
            logger.info("RabbitMQ connection established")
        else:
            logger.warning("RabbitMQ connection failed - notification events will be retried per publish")
        app.state.publisher = publisher

    logger.info("Task Hub startup completed")
    yield

    logger.info("Shutting down Task Hub...")
    if app.state.publisher is not None:
        app.state.publisher.close()
    logger.info("Task Hub shutdown completed")


# Create FastAPI application
app = FastAPI(
    title="Task Hub",
    description="Task management with ownership checks, assignment notifications and an audit trail",
    version=settings.service_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_logging_middleware)
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

register_exception_handlers(app)

app.include_router(tasks.router, prefix=settings.api_prefix + "/tasks", tags=["tasks"])
app.include_router(notifications.router, prefix=settings.api_prefix + "/notifications", tags=["notifications"])
app.include_router(audit_logs.router, prefix=settings.api_prefix + "/audit-logs", tags=["audit"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "running",
        "message": "Task Management API is running..."
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    db_healthy = check_db_connection()
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "healthy" if db_healthy else "unhealthy",
        "database": "connected" if db_healthy else "disconnected",
        "timestamp": time.time()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("taskhub.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
