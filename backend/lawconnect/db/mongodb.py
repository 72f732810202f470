from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from lawconnect.core.config import settings
import logging

logger = logging.getLogger(__name__)

def create_mongo_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        minPoolSize=settings.MONGODB_MIN_POOL_SIZE,
        maxIdleTimeMS=settings.MONGODB_MAX_IDLE_TIME_MS,
    )

async def connect_to_mongo() -> AsyncIOMotorClient:
    try:
        client = create_mongo_client()
        # Verify connection
        await client.admin.command('ping')
        logger.info("Connected to MongoDB")
        return client
    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise e

async def close_mongo_connection(client: AsyncIOMotorClient):
    if client:
        client.close()
        logger.info("Closed MongoDB connection")

async def ensure_indexes(db: AsyncIOMotorDatabase):
    """
    Create the indexes the services rely on. Safe to call on every startup.
    """
    await db.users.create_index([("email", ASCENDING)], unique=True)
    await db.password_resets.create_index([("token", ASCENDING)], unique=True)
    await db.password_resets.create_index([("user_id", ASCENDING)])
    await db.password_resets.create_index([("expires_at", ASCENDING)])
    await db.ai_logs.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    await db.ai_logs.create_index([("case_id", ASCENDING)])
    await db.ai_logs.create_index([("query_type", ASCENDING)])
    await db.cases.create_index([("case_number", ASCENDING)], unique=True)
    logger.info("MongoDB indexes ensured")

async def get_database(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.mongo_client[settings.DATABASE_NAME]
