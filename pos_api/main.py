from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from pos_api.database.database import engine, Base

# Import middleware and error handling
from pos_api.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from pos_api.common.responses import register_exception_handlers

# Import routers
from pos_api.modules.auth.router import auth_router
from pos_api.modules.store_settings.router import settings_router
from pos_api.modules.reports.router import reports_router
from pos_api.modules.orders.router import orders_router

# Import models for table creation
import pos_api.modules.auth.models
import pos_api.modules.categories.models
import pos_api.modules.products.models
import pos_api.modules.customers.models
import pos_api.modules.store_settings.models
import pos_api.modules.orders.models

from pos_api.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="POS Back-Office API",
    description="Point-of-sale back office: checkout, order lifecycle, settings and reporting",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers (reports before orders so /orders/reports is not read as an order id)
app.include_router(auth_router, prefix="/api")
app.include_router(settings_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(orders_router, prefix="/api")

# Create database tables (use migrations in production)
if settings.ENVIRONMENT in ("development", "test"):
    Base.metadata.create_all(bind=engine)


@app.get("/")
def read_root():
    return {
        "message": "POS API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/api/health")
def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
