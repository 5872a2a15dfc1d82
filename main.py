"""
FlexoHub backend - flexographic prepress calculators behind a trial/subscription gate
"""

from pathlib import Path
import logging
import traceback

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from auth import auth_router
from routers.billing_router import billing_router
from routers.barcode_router import barcode_router
from routers.calculator_router import calculator_router
from routers.color_router import color_router
from database import init_db
from config.settings import settings, IS_PRODUCTION

# Logging setup - write ALL events to logs/app.log
LOGS_DIR = Path("./logs")
LOGS_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / "app.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="FlexoHub")


# Uncaught exception middleware - logs all unhandled exceptions and returns 500
class UncaughtExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Uncaught exception: {e}\n{traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"ok": False, "error": "Internal Server Error"}
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add X-Frame-Options, X-Content-Type-Options and (in production) HSTS"""
    async def dispatch(self, request, call_next):
        response = await call_next(request)

        # Only set in production where HTTPS is guaranteed
        if IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response


app.add_middleware(UncaughtExceptionMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# CORS MUST be near the bottom
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Provider credentials checked at startup (non-fatal)
REQUIRED_KEY_MAP = {
    "USERS_SERVICE_API_URL": settings.users_service_api_url,
    "USERS_SERVICE_API_KEY": settings.users_service_api_key,
    "LEMONSQUEEZY_API_KEY": settings.lemonsqueezy_api_key,
    "LEMONSQUEEZY_STORE_ID": settings.lemonsqueezy_store_id,
    "LEMONSQUEEZY_PRODUCT_ID": settings.lemonsqueezy_product_id,
}


@app.on_event("startup")
async def validate_keys():
    """Warn about missing provider credentials"""
    missing = [key for key, value in REQUIRED_KEY_MAP.items() if not value]
    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")
    else:
        logger.info("All provider credentials loaded")


@app.on_event("startup")
async def initialize_database():
    """Create the users table if needed."""
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


# ============================================================================
# INCLUDE ROUTERS
# ============================================================================
app.include_router(auth_router)
app.include_router(billing_router)
app.include_router(color_router)
app.include_router(calculator_router)
app.include_router(barcode_router)

# ============================================================================
# FRONTEND SERVING (MUST BE LAST - AFTER ALL API ROUTES)
# ============================================================================
FRONTEND_DIST = Path(__file__).resolve().parent / "frontend" / "dist"

if FRONTEND_DIST.is_dir():
    app.mount("/", StaticFiles(directory=FRONTEND_DIST, html=True), name="spa-root")
else:
    logger.info(f"No frontend build at {FRONTEND_DIST}; serving API only")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
