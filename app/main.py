# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the App Catalog API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import routes as auth_routes
from app.config import settings
from app.exceptions import (
    CatalogException,
    catalog_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, apps, downloads, feedback, health, reports, user
from core.services.package_service import PackageService
from lib.database import Database

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: connect the database, create tables, create the package directory
    - Shutdown: release pooled connections
    """
    logger.info(f"Starting App Catalog API in {settings.ENVIRONMENT} mode")

    Database.configure(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        echo=settings.DB_ECHO,
    )
    Database.create_all()
    PackageService.ensure_upload_dir()

    yield

    logger.info("Shutting down App Catalog API")
    Database.dispose()


app = FastAPI(
    title="App Catalog API",
    description="""
## Linux Application Catalog

Browse, download and manage packaged Linux applications.

### Access Levels

| Level | Can |
|-------|-----|
| **Public** | Browse the catalog, view apps, download packages |
| **User** | Record downloads, send feedback, report issues, view own history |
| **Admin** | Upload packages, edit, hide and delete apps |

### Quick Start

```bash
# Browse the catalog
curl http://localhost:8000/api/apps

# Upload a package (admin)
curl -X POST http://localhost:8000/api/admin/apps \\
  -H "Authorization: Bearer $TOKEN" \\
  -F "file=@htop.zip" -F "name=htop" -F "category=system" \\
  -F "description=Interactive process viewer"
```
""",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current identity"},
        {"name": "Apps", "description": "Public catalog and package download"},
        {"name": "Downloads", "description": "Record downloads"},
        {"name": "Feedback", "description": "Submit feedback"},
        {"name": "Reports", "description": "Report problems"},
        {"name": "User", "description": "Own history and stats"},
        {"name": "Admin", "description": "Catalog administration"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(CatalogException)
async def handle_catalog_exception(request: Request, exc: CatalogException):
    """Handle custom catalog exceptions."""
    return await catalog_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed request bodies, forms and parameters."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions without leaking internals."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(apps.router, prefix="/api/apps", tags=["Apps"])
app.include_router(downloads.router, prefix="/api/downloads", tags=["Downloads"])
app.include_router(feedback.router, prefix="/api/feedback", tags=["Feedback"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
app.include_router(user.router, prefix="/api/user", tags=["User"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(health.router, prefix="/api", tags=["Health"])


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "App Catalog API",
        "version": health.API_VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }
