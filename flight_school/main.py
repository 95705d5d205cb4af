"""FastAPI main application for the flight school scheduler."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .logger import configure_logging
from .routes import simulation_router, status_router
from .services.singleton import get_simulation_service

# Configure logging
config = Config()
configure_logging(config.LOG_LEVEL, config.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the background ticker when enabled and stop it on shutdown."""
    simulation_service = get_simulation_service()
    if simulation_service.config.AUTO_TICK:
        simulation_service.start_ticker()
    try:
        yield
    finally:
        simulation_service.stop_ticker()


# Initialize FastAPI app
app = FastAPI(title="Flight School Scheduler API", version="1.0.0", lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Flight School Scheduler API", "status": "running"}


app.include_router(simulation_router)
app.include_router(status_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
