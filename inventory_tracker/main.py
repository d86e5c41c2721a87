# Main application file

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from inventory_tracker.database import engine, Base
from inventory_tracker.core.config import settings
from inventory_tracker.core.errors import InventoryImportError
from inventory_tracker.core.rate_limiter import limiter
from inventory_tracker.models import inventory as inventory_models  # noqa: F401
from inventory_tracker.routers import inventory


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("inventory")


# DATABASE

if settings.CREATE_TABLES_ON_STARTUP:
    Base.metadata.create_all(bind=engine)


# APP INIT

app = FastAPI(
    title="Inventory Tracker API",
    description="Track stock on hand and reconcile it against spreadsheets",
    version="1.0.0",
)


# CORS

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# IMPORT ERRORS

@app.exception_handler(InventoryImportError)
async def import_error_handler(request: Request, exc: InventoryImportError):
    logger.error(f"Import failed: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": f"Failed to import data: {exc.message}",
            "count": exc.count,
        },
    )


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(inventory.router)


# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "Inventory Tracker API is running"}
