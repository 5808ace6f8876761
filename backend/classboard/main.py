"""
Classboard - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Maps classroom errors to JSON error responses
5. Registers all API route handlers
6. Provides health check endpoint

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (codes, credentials, sessions, store, archive, stats)
- client/: HTTP client, session restore and polling for consumer views
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from classboard.config import CORS_ALLOW_ORIGINS
from classboard.errors import ClassroomError
from classboard.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from classboard.routes import public, teacher_auth, teacher_actions, stats
from classboard.database import DATABASE_URL, create_tables

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite - creating tables directly")
    create_tables()

# ──────────────────────────────────────────────────────────────
# Create FastAPI application
# ──────────────────────────────────────────────────────────────
app = FastAPI(
    title="Classboard",
    description=(
        "Classroom scoreboard: teachers manage per-student scores under a "
        "password-protected session, students follow their own and the "
        "class's scores, and score resets are archived into each student's history."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ──────────────────────────────────────────────────────────────
# CORS Middleware
#
# Allows a browser frontend served from another origin to call the API.
# Restrict CORS_ALLOW_ORIGINS to the frontend domain in production.
# ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a unique UUID per incoming request and:
# 1. Stores it in a context variable (available to all log entries)
# 2. Returns it in the X-Request-ID response header
# 3. Logs request start/end with latency measurement
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Middleware that generates a unique request ID for every HTTP request.

    The teacher token header is never logged.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Classroom errors → JSON responses
#
# Services raise ClassroomError subclasses; each carries its status code
# and a message that can be shown to the user as-is.
# ──────────────────────────────────────────────────────────────
@app.exception_handler(ClassroomError)
async def classroom_error_handler(request: Request, exc: ClassroomError):
    log_with_context(logger, "WARNING",
        f"{type(exc).__name__}: {exc.message}",
        extra_data={"path": request.url.path, "status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(teacher_auth.router, tags=["Teacher Auth"])
app.include_router(teacher_actions.router, tags=["Teacher Actions"])
app.include_router(public.router, tags=["Classroom"])
app.include_router(stats.router, tags=["Stats"])


# ──────────────────────────────────────────────────────────────
# Health check endpoint
# ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker health checks and monitoring."""
    return {"status": "healthy", "service": "classboard-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Classboard",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "create_classroom": "POST /api/classrooms",
            "classroom": "GET /api/classrooms/{id}",
            "join": "POST /api/classrooms/{id}/join",
            "set_name": "POST /api/classrooms/{id}/students/name",
            "login": "POST /api/classrooms/{id}/login",
            "secret_question": "GET /api/classrooms/{id}/secret-question",
            "reset_password": "POST /api/classrooms/{id}/reset-password",
            "add_student": "POST /api/classrooms/{id}/students",
            "update_score": "PUT /api/classrooms/{id}/students/{student_id}/score",
            "remove_student": "DELETE /api/classrooms/{id}/students/{student_id}",
            "reset_scores": "POST /api/classrooms/{id}/reset-scores",
            "announcement": "PUT /api/classrooms/{id}/announcement",
            "delete_classroom": "DELETE /api/classrooms/{id}",
            "stats": "GET /api/classrooms/{id}/stats"
        }
    }
