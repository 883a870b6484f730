import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import health, resolvers
from .config import settings
from .core.errors import ProviderChainExhausted
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Chain Metadata API",
    description="Contract ABIs, token balances and token metadata with provider fallback",
    version=settings.service_version,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(resolvers.router, tags=["Resolvers"])


@app.exception_handler(ProviderChainExhausted)
async def provider_chain_exhausted_handler(request: Request, exc: ProviderChainExhausted) -> JSONResponse:
    logger.error(
        "Resolution failed for %s: %s",
        request.url.path,
        exc,
        exc_info=exc.latest_error,
    )
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Chain Metadata API",
        "version": settings.service_version,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
