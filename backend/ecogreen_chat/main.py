"""
FastAPI application entry point.
"""
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecogreen_chat.config import get_settings
from ecogreen_chat.routes import chat, widget, health
from ecogreen_chat.services.session_service import housekeeping
from ecogreen_chat.services.ticker import Ticker
from ecogreen_chat.utils.logger import setup_logging, get_logger

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Get settings
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run session and banner housekeeping for the app's lifetime."""
    async with Ticker(settings.sweep_interval_seconds, housekeeping, name="housekeeping"):
        logger.info(f"Relaying chat to {settings.chatbot_api_url}")
        yield


# Create FastAPI app
app = FastAPI(
    title="EcoGreen360 Chat Widget",
    description="Floating chat widget state service for the EcoGreen360 greenhouse assistant",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(widget.router, prefix="/api", tags=["Widget"])
app.include_router(chat.router, prefix="/api", tags=["Chat"])


@app.get("/")
async def root():
    """Root endpoint - points at the docs."""
    return {
        "message": "EcoGreen360 Chat Widget API",
        "docs": "/docs",
        "health": "/api/health",
    }


def serve():
    """Run the API with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    serve()
