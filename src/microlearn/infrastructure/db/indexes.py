import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel

logger = logging.getLogger(__name__)

INDEXES: dict[str, list[IndexModel]] = {
    "learners": [
        IndexModel([("phone", ASCENDING)], unique=True),
        IndexModel([("status", ASCENDING), ("created_at", DESCENDING)]),
    ],
    "courses": [
        IndexModel([("request_id", ASCENDING)]),
        IndexModel([("status", ASCENDING), ("visibility", ASCENDING)]),
    ],
    "course_progress": [
        IndexModel([("phone_number", ASCENDING), ("status", ASCENDING)]),
    ],
    "admin_users": [
        IndexModel([("email", ASCENDING)], unique=True),
    ],
    "registration_requests": [
        IndexModel([("approval_status", ASCENDING)]),
    ],
    "sessions": [
        IndexModel([("token", ASCENDING)], unique=True),
        IndexModel([("expires_at", ASCENDING)], expireAfterSeconds=0),
    ],
}


async def ensure_indexes(database: AsyncIOMotorDatabase[dict[str, Any]]) -> None:
    for collection_name, indexes in INDEXES.items():
        names = await database[collection_name].create_indexes(indexes)
        logger.debug("Indexes on %s: %s", collection_name, names)
    logger.info("MongoDB indexes ensured")
