"""
Bootstrap an admin account. Admins cannot self-register, so the first one
is created from the command line:

    python -m lawconnect.seed --email admin@lawconnect.test --password S3cretpass
"""
import argparse
import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from lawconnect.core.config import settings
from lawconnect.core.logging import setup_logging
from lawconnect.db.mongodb import create_mongo_client, ensure_indexes
from lawconnect.models.user import UserCreate, UserRole, build_user_document

logger = logging.getLogger(__name__)

async def seed_admin(db: AsyncIOMotorDatabase, email: str, password: str, name: str = "Administrator") -> str:
    # Validates name, email and password the same way registration does
    user_in = UserCreate(name=name, email=email, password=password)

    # 1. Delete existing
    deleted = await db.users.delete_many({"email": user_in.email})
    if deleted.deleted_count:
        logger.info(f"Replaced existing account for {user_in.email}")

    # 2. Create new
    user_doc = build_user_document(user_in)
    user_doc["role"] = UserRole.ADMIN.value
    user_doc["is_verified"] = True
    result = await db.users.insert_one(user_doc)
    logger.info(f"Admin {user_in.email} created")
    return str(result.inserted_id)

async def main(email: str, password: str, name: str) -> None:
    client = create_mongo_client()
    try:
        db = client[settings.DATABASE_NAME]
        await ensure_indexes(db)
        await seed_admin(db, email, password, name)
    finally:
        client.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or replace a LawConnect admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Administrator")
    args = parser.parse_args()

    setup_logging(level=settings.LOG_LEVEL)
    asyncio.run(main(args.email, args.password, args.name))
