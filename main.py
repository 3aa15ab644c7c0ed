"""
FastAPI Application Entry Point

Integrates:
  - Messenger webhook, send and page directory routes
  - Real-time WebSocket channel
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import Config
from infra.bootstrap import RelayBootstrap, bootstrap_relay
from realtime.websocket import router as realtime_router
from webhook.messenger import router as messenger_router

# Setup logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    bootstrap = bootstrap_relay()
    logger.info("=" * 60)
    logger.info("Messenger relay starting up...")
    logger.info(f"Configured pages: {len(bootstrap.config.accounts)}")
    logger.info(f"Graph API: {bootstrap.config.graph_api_version}")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    if not Config.validate():
        logger.warning(f"Missing required environment variables: {', '.join(Config.missing())}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Messenger relay shutting down...")
    await bootstrap.aclose()
    RelayBootstrap.reset()


# Create FastAPI app
app = FastAPI(
    title="Messenger Relay",
    description="Relays Facebook Messenger events to browser clients and back",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(messenger_router)
app.include_router(realtime_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    missing = Config.missing()
    if missing:
        return {"status": "not_ready", "reason": f"missing {', '.join(missing)}"}
    return {"status": "ready"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Messenger Relay",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "webhook_verify": "GET /webhook",
            "webhook_events": "POST /webhook",
            "send_message": "POST /send-message",
            "pages_info": "GET /pages-info",
            "realtime": "WS /ws",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.PORT,
        reload=Config.ENVIRONMENT == "development",
    )
