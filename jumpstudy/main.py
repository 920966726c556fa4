"""Main FastAPI application entry point.

Provides CORS, health endpoints, the public course catalog and the admin API.
"""

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
from datetime import datetime

# Import routers
from jumpstudy.routers import (
    admin_drafts,
    admin_users,
    advocates,
    auth,
    avatar,
    courses,
    drafts,
    health,
    organizations,
)
from jumpstudy.db.config import close_db, create_tables
from jumpstudy.utils.validation import format_validation_errors

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Application metadata
APP_NAME = "JumpStudy API"
VERSION = "1.0.0"
DESCRIPTION = """
JumpStudy Backend API

## Features

* **Course Catalog**: Public listing with search, badge filters and sorting
* **Administration**: Courses, organizations, users and the admin allowlist
* **Draft Review**: Staged course/organization proposals with approval
* **Advocate Profiles**: Self-service profiles with moderation
"""

# Initialize FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=DESCRIPTION,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware configuration
cors_origins = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Global exception handlers


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions with consistent error format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url)
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """Report payload validation failures as 400 with per-field messages"""
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation failed",
            "details": format_validation_errors(exc.errors()),
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url)
        }
    )

# Include routers
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(courses.router, prefix="/api")
app.include_router(organizations.router, prefix="/api")
app.include_router(drafts.router, prefix="/api")
app.include_router(admin_drafts.router, prefix="/api")
app.include_router(admin_users.router, prefix="/api")
app.include_router(advocates.router, prefix="/api")
app.include_router(avatar.router, prefix="/api")
app.include_router(auth.router, prefix="/api")

# Root endpoint


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "status": "running",
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.utcnow().isoformat(),
        "docs": "/docs",
        "health": "/api/health"
    }

# Application startup event


@app.on_event("startup")
async def startup_event():
    """Application startup tasks"""
    logger.info(f"Starting {APP_NAME} v{VERSION}")
    logger.info(f"Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"CORS Origins: {cors_origins}")
    if os.getenv("AUTO_CREATE_TABLES", "false").lower() in {"1", "true", "yes"}:
        logger.info("AUTO_CREATE_TABLES enabled: creating missing tables")
        await create_tables()

# Application shutdown event


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown tasks"""
    logger.info(f"Shutting down {APP_NAME}")
    await close_db()

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "jumpstudy.main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info"
    )
