"""
Motor client and Beanie initialisation for MongoDB.
"""

from __future__ import annotations

import logging
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from config.settings import Settings
from database.models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)


async def initialize_database(settings: Settings) -> AsyncIOMotorClient:
    """Connect to MongoDB and register every document model with Beanie."""
    client = AsyncIOMotorClient(
        settings.connection_uri,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )
    await init_beanie(
        database=client[settings.database_name],
        document_models=DOCUMENT_MODELS,
    )
    logger.info("Beanie initialised on database %r", settings.database_name)
    return client


def close_database(client: Optional[AsyncIOMotorClient]) -> None:
    if client is not None:
        client.close()
        logger.info("MongoDB client closed")
