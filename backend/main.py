# main.py — Kanban Board API
# Features:
# - Request correlation IDs + timing
# - {"error": ...} bodies for every failure
# - Health check with DB verification
# - OpenAPI docs at /api-docs, schema at /api-docs.json

import os
import uuid
import time
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from database import KanbanDatabase, get_db_session
from errors import register_exception_handlers

API_VERSION = "1.0.0"

# Logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
)
logger = logging.getLogger("kanban-api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting Kanban API v{API_VERSION}...")
    db = KanbanDatabase()
    await db.init()
    app.state.db = db
    logger.info("✅ Database initialized")
    yield
    logger.info("🛑 Shutting down Kanban API...")
    await db.close()


app = FastAPI(
    title="Kanban Board API",
    description="Projects, columns, tasks and tags for kanban boards",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/api-docs",
    redoc_url=None,
    openapi_url="/api-docs.json",
)

# ============================================================
# CORS
# ============================================================

ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)


# ============================================================
# MIDDLEWARE: Request IDs + Timing
# ============================================================

@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id

    start = time.perf_counter()
    response = await call_next(request)
    duration = time.perf_counter() - start

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Response-Time"] = f"{duration:.4f}s"

    logger.info(
        f"{request.method} {request.url.path} → {response.status_code} "
        f"({duration:.3f}s) [rid={request_id[:8]}]"
    )
    return response


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

register_exception_handlers(app)


# ============================================================
# ROUTERS
# ============================================================

from routers import projects, columns, tasks

app.include_router(projects.router)
app.include_router(columns.router)
app.include_router(tasks.router)


# ============================================================
# HEALTH & ROOT
# ============================================================

@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db_session)):
    """Health check with database connectivity verification"""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.warning(f"Health check query failed: {e}")
        db_status = f"error: {str(e)[:100]}"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "version": API_VERSION,
        "environment": os.getenv("ENVIRONMENT", "development"),
        "database": db_status,
    }


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": "Kanban API is running",
        "version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "docs": app.docs_url,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 3000)),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
