"""
Main FastAPI application
Quiz attempt lifecycle: answer scoring, performance analysis, feedback and points
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging
import time

from quizattempts.config import settings
from quizattempts.database import SessionLocal, engine, init_db, check_connection
from quizattempts.exceptions import QuizAttemptError, ConcurrencyConflictError
from quizattempts.services.event_publisher import event_publisher
from quizattempts.utils.cache import cache_service
from quizattempts.api import attempts, quizzes, analytics

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Tracks quiz attempts and turns answers into scores, strengths, feedback and reward points",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    """Log method, path, status and duration; expose the duration as a header"""

    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    # Health probes would drown out real traffic at INFO
    log = logger.debug if request.url.path == "/health" else logger.info
    log(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed * 1000:.1f}ms")

    return response


@app.exception_handler(QuizAttemptError)
async def quiz_attempt_error_handler(request: Request, exc: QuizAttemptError):
    """Domain errors carry their own status code and error identifier"""

    logger.warning(f"{request.method} {request.url.path} rejected ({exc.error}): {exc.message}")

    headers = None
    if isinstance(exc, ConcurrencyConflictError):
        # Safe to retry once with freshly loaded state
        headers = {"Retry-After": "0"}

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Format HTTP exceptions consistently"""

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "message": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Last resort: log with traceback, hide details unless DEBUG"""

    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
            "detail": str(exc) if settings.DEBUG else None
        }
    )


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring

    The database is required (503 when unreachable). Redis is optional:
    without it the quiz cache is bypassed and events wait in the outbox.
    """
    database_ok = check_connection()

    if not cache_service.is_available:
        redis_status = "disabled"
    else:
        redis_status = "ok" if cache_service.ping() else "unreachable"

    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "dependencies": {
            "database": "ok" if database_ok else "unreachable",
            "redis": redis_status,
        },
        "timestamp": time.time()
    }

    return JSONResponse(status_code=200 if database_ok else 503, content=body)


@app.get("/")
async def root():
    """API entry point"""
    return {
        "message": "Quiz Attempt & Scoring API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "quizzes": "/api/quizzes",
            "attempts": "/api/attempts/{attempt_id}",
            "users": "/api/users/{user_id}/attempts"
        }
    }


app.include_router(quizzes.router)
app.include_router(attempts.router)
app.include_router(analytics.router)


@app.on_event("startup")
async def startup_event():
    """Create tables before serving traffic"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    if not cache_service.is_available:
        logger.warning("Running without Redis: events will accumulate in the outbox")
    else:
        drain_outbox()

    logger.info("Application startup complete")


def drain_outbox() -> int:
    """Deliver events left pending by an earlier Redis outage"""
    db = SessionLocal()
    try:
        delivered = event_publisher.drain(db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not drain pending events: {str(e)}")
        return 0
    finally:
        db.close()

    if delivered:
        logger.info(f"Delivered {delivered} pending events at startup")
    return delivered


@app.on_event("shutdown")
async def shutdown_event():
    """Release pooled connections"""
    engine.dispose()
    logger.info("Shutting down application")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "quizattempts.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
