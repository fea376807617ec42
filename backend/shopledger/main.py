"""
ShopLedger – FastAPI application entry point.

Run with:
    uvicorn shopledger.main:app --reload --host 127.0.0.1 --port 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from shopledger.api.cash_routes import cash_router
from shopledger.api.inventory_routes import inventory_router
from shopledger.api.invoice_routes import invoice_router
from shopledger.api.party_routes import party_router
from shopledger.api.routes import router
from shopledger.core.config import settings
from shopledger.core.database import create_db_and_tables, get_bookkeeper
from shopledger.core.errors import StoreUnavailable
from shopledger.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown hooks."""
    setup_logging()
    logger.info("Starting ShopLedger backend …")
    create_db_and_tables()
    logger.info("Database tables ready")
    if settings.SEED_DEFAULTS:
        get_bookkeeper().catalog.seed_defaults()
    yield
    logger.info("ShopLedger backend shut down")


app = FastAPI(
    title="ShopLedger API",
    description="Local REST API for point-of-sale inventory, invoicing and cashbook",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS – allow frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(inventory_router)
app.include_router(party_router)
app.include_router(invoice_router)
app.include_router(cash_router)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"{request.method} {request.url.path} failed, store unavailable: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable, nothing was saved"})


@app.get("/")
def root():
    return {"message": "ShopLedger API", "docs": "/docs"}
