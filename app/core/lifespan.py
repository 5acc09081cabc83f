"""
Application lifespan management.

Connects the dependency container on startup and releases the MongoDB
client and asset host connections on shutdown.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging

from .dependencies import container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Catalog API...")
    await container.initialize()
    if not container.auth_gate.enabled:
        logger.warning("Auth gate disabled: category writes are open to everyone")
    logger.info("Catalog API started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down Catalog API...")
        await container.shutdown()
        logger.info("Catalog API shutdown complete")
