from contextlib import asynccontextmanager
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from tradeon.config import settings
from tradeon.api.v1.router import api_router
from tradeon.database import init_db, async_session_factory
from tradeon.jobs.scheduler import start_scheduler, shutdown_scheduler
from tradeon.services.settings_service import get_settings_store
from tradeon.services.search_cache_service import get_background_translator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Create tables
    - Load site settings (also primes the CNY rate)
    - Start background scheduler
    """
    # Startup
    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    await init_db()

    site_settings = await get_settings_store().get()
    print(f"Loaded {len(site_settings)} site settings (CNY rate {site_settings.get('cny_to_bdt_rate')})")

    start_scheduler()

    yield

    # Shutdown
    shutdown_scheduler()
    await get_background_translator().wait_idle()
    print("Shutting down...")


OPENAPI_TAGS = [
    {"name": "Search", "description": "Cached 1688 keyword and image search"},
    {"name": "Products", "description": "1688 item detail"},
    {"name": "Currency", "description": "CNY to BDT price conversion"},
    {"name": "Settings", "description": "Site configuration key/values"},
    {"name": "Orders", "description": "Order placement, tracking timeline and stage changes"},
    {"name": "Shipments", "description": "Shipment stages and back-office shipment records"},
    {"name": "Invoices", "description": "Single and combined order invoices"},
    {"name": "Me", "description": "Signed-in buyer dashboard"},
    {"name": "Admin", "description": "Back-office dashboard, customers and table management"},
]

API_DESCRIPTION = """
## TradeOn.global API

Storefront and back-office API for buying 1688.com wholesale products with
shipping from China to Bangladesh.

### Authentication

Endpoints other than search, products, currency, settings (read) and health
require a bearer JWT issued by the auth provider. Admin routes also require
the `admin` role in `user_roles`.
"""

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=API_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return unhandled errors as a JSON envelope."""
    error_detail = {
        "error": str(exc),
        "type": type(exc).__name__,
        "path": str(request.url.path),
        "method": request.method,
    }
    if settings.DEBUG:
        error_detail["traceback"] = traceback.format_exc()

    response = JSONResponse(
        status_code=500,
        content=error_detail
    )

    # Error responses bypass the CORS middleware
    origin = request.headers.get("origin", "")
    if origin in settings.cors_origins_list or "*" in settings.cors_origins_list:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    from sqlalchemy import text
    from datetime import datetime, timezone

    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    # Check database connectivity
    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    # Return 503 if unhealthy
    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }
