import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from billsplit.core.config import settings

logger = logging.getLogger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
        mongodb.client = None
        mongodb.db = None
    logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    # Bill indexes
    await db["bills"].create_index("paid_by")
    await db["bills"].create_index("created_by")
    await db["bills"].create_index([("group_id", 1), ("created_at", -1)])

    # Share indexes
    await db["bill_shares"].create_index([("bill_id", 1), ("user_id", 1)], unique=True)
    await db["bill_shares"].create_index([("user_id", 1), ("payment_status", 1)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
