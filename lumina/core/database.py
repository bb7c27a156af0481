import logging
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from lumina.core.config import settings
from lumina.schemas import User, VerificationCode

logger = logging.getLogger(__name__)

# Global client, set by init_db
client: Optional[AsyncIOMotorClient] = None


async def init_db():
    global client

    client = AsyncIOMotorClient(settings.MONGO_URI)

    if settings.MONGO_DB_NAME:
        db = client[settings.MONGO_DB_NAME]
    else:
        db = client.get_default_database(default="lumina")

    await init_beanie(database=db, document_models=[User, VerificationCode])
    logger.info("Database '%s' connected", db.name)


async def close_db():
    if client:
        client.close()
        logger.info("Database connection closed")


async def ping_db() -> bool:
    if client is None:
        return False
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        logger.warning("Database ping failed: %s", e)
        return False
    return True
