from datetime import datetime
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from lawconnect.core.errors import AuthError, ConflictError, NotFoundError
from lawconnect.core.security import get_password_hash, verify_password
from lawconnect.models.common import to_object_id
from lawconnect.models.user import (
    UserCreate,
    UserInDB,
    UserRole,
    UserUpdate,
    build_user_document,
    normalize_email,
)
import logging

logger = logging.getLogger(__name__)

class UserService:
    """
    Credential store: user records and their bcrypt password hashes.
    Passwords are hashed here and only here.
    """
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def create_user(self, user_in: UserCreate) -> UserInDB:
        existing_user = await self.db.users.find_one({"email": user_in.email})
        if existing_user:
            raise ConflictError("Email already registered")

        user_doc = build_user_document(user_in)
        result = await self.db.users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        logger.info(f"Registered user {result.inserted_id} with role {user_in.role}")
        return UserInDB(**user_doc)

    async def get_by_email(self, email: str) -> Optional[UserInDB]:
        user = await self.db.users.find_one({"email": normalize_email(email)})
        return UserInDB(**user) if user else None

    async def get_user(self, user_id: str) -> UserInDB:
        oid = to_object_id(user_id)
        user = await self.db.users.find_one({"_id": oid}) if oid else None
        if not user:
            raise NotFoundError("User not found")
        return UserInDB(**user)

    async def authenticate(self, email: str, password: str) -> UserInDB:
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.info("Login failed", extra={"extra_data": {"email": normalize_email(email)}})
            raise AuthError("Invalid email or password")

        if not user.is_active:
            logger.info(f"Login rejected for deactivated user {user.id}")
            raise AuthError("Account has been deactivated. Please contact support.")

        now = datetime.utcnow()
        await self.db.users.update_one(
            {"_id": to_object_id(user.id)},
            {"$set": {"last_login": now}}
        )
        user.last_login = now
        return user

    async def update_profile(self, user_id: str, update: UserUpdate) -> UserInDB:
        user = await self.get_user(user_id)
        fields = {"name", "phone", "address"}
        if user.role == UserRole.LAWYER:
            fields |= {"specialization", "experience"}

        changes = update.model_dump(include=fields, exclude_unset=True)
        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.db.users.update_one({"_id": to_object_id(user_id)}, {"$set": changes})
            logger.info(f"Updated profile for user {user_id}: {sorted(changes)}")
        return await self.get_user(user_id)

    async def set_password(self, user_id: str, new_password: str) -> None:
        oid = to_object_id(user_id)
        result = await self.db.users.update_one(
            {"_id": oid},
            {"$set": {"hashed_password": get_password_hash(new_password), "updated_at": datetime.utcnow()}}
        ) if oid else None
        if result is None or result.matched_count == 0:
            raise NotFoundError("User not found")
        logger.info(f"Password updated for user {user_id}")

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = await self.get_user(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise AuthError("Current password is incorrect")
        await self.set_password(user_id, new_password)
