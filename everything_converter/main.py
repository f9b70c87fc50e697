"""
Everything Converter - FastAPI Main Application

LLM-backed "convert anything into anything" service with:
- Chat completions with live exchange-rate injection for currency conversions
- Validator pass and per-request stats (tokens, cost, water estimate)
- Exchange-rate lookups, suggestions, surprise pairs and model benchmarks
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

# Load environment variables first
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from everything_converter.config.settings import settings
from everything_converter.routers import chat_routes, convert_routes, exchange_routes, suggestion_routes

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager"""
    logger.info("🚀 Starting Everything Converter API...")
    logger.info(f"📊 Metrics enabled: {settings.ENABLE_METRICS}")
    logger.info(f"🤖 Default model: {settings.OPENROUTER_MODEL}")
    if not settings.OPEN_EXCHANGE_RATES_API_KEY:
        logger.warning("⚠️  OPEN_EXCHANGE_RATES_API_KEY not set, currency conversions will fail")

    yield

    logger.info("👋 Shutting down Everything Converter API...")


# Create FastAPI application
app = FastAPI(
    title="Everything Converter API",
    description="Convert anything into anything, with live exchange rates for money",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", tags=["system"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": VERSION,
        "exchange_rates_configured": bool(settings.OPEN_EXCHANGE_RATES_API_KEY),
        "llm_configured": bool(settings.OPENROUTER_API_KEY),
    }


@app.get("/", tags=["system"])
async def root():
    """Root endpoint with API info"""
    return {
        "name": "Everything Converter API",
        "version": VERSION,
        "endpoints": {
            "chat": "/api/chat",
            "convert": "/api/convert",
            "exchange_rates": "/api/exchange-rates",
            "suggestions": "/api/suggestions",
            "surprise": "/api/surprise",
            "benchmark": "/api/benchmark",
            "models": "/api/models",
            "metrics": "/metrics",
        },
        "docs": "/docs",
    }


# Mount Prometheus metrics endpoint
if settings.ENABLE_METRICS:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)


app.include_router(chat_routes.router, prefix="/api/chat", tags=["chat"])
app.include_router(exchange_routes.router, prefix="/api/exchange-rates", tags=["exchange-rates"])
app.include_router(suggestion_routes.router, prefix="/api", tags=["suggestions"])
app.include_router(convert_routes.router, prefix="/api", tags=["convert"])
logger.info("✅ API routers registered")


# Malformed request bodies are caller errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "detail": jsonable_encoder(exc.errors())},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.LOG_LEVEL == "DEBUG" else "An error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "everything_converter.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
