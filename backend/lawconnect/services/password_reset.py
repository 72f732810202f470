from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase
from lawconnect.core.config import settings
from lawconnect.core.errors import NotFoundError, ValidationError
from lawconnect.models.common import to_object_id
from lawconnect.models.password_reset import PasswordResetTokenInDB
from lawconnect.services.users import UserService
import logging
import secrets

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# 32 random bytes -> 64 hex characters
RESET_TOKEN_BYTES = 32


class ResetTokenNotFoundError(NotFoundError):
    default_message = "Invalid reset token"


class ResetTokenExpiredError(ValidationError):
    default_message = "Reset token has expired"


class ResetTokenAlreadyUsedError(ValidationError):
    default_message = "Reset token has already been used"


def build_reset_url(token: str) -> str:
    return f"{settings.CLIENT_URL.rstrip('/')}/reset-password?token={token}"


class PasswordResetService:
    """
    Ledger of single-use password reset tokens.

    A token is valid while it is unused and younger than
    PASSWORD_RESET_EXPIRE_MINUTES. Consuming a token that is expired or
    already used is always an error, so a retried reset surfaces instead of
    silently succeeding.
    """
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        user_service: Optional[UserService] = None,
        clock: Clock = datetime.utcnow,
    ):
        self.db = db
        self.users = user_service or UserService(db)
        self.clock = clock

    async def request_reset(
        self,
        email: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[str, str]:
        """
        Issue a reset token for the account registered under ``email``.
        Returns the raw token and the reset URL to deliver to the user.
        """
        user = await self.users.get_by_email(email)
        if not user:
            raise ResetTokenNotFoundError("No user found with this email")

        now = self.clock()
        token = secrets.token_hex(RESET_TOKEN_BYTES)
        record = PasswordResetTokenInDB(
            user_id=user.id,
            token=token,
            expires_at=now + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
            ip_address=ip_address[:45] if ip_address else None,
            user_agent=user_agent[:255] if user_agent else None,
            created_at=now,
        )
        doc = record.model_dump(exclude={"id"})
        doc["user_id"] = to_object_id(user.id)
        await self.db.password_resets.insert_one(doc)

        logger.info(
            f"Issued password reset token for user {user.id}",
            extra={"extra_data": {"expires_at": record.expires_at.isoformat()}}
        )
        return token, build_reset_url(token)

    async def validate(self, token: str) -> PasswordResetTokenInDB:
        doc = await self.db.password_resets.find_one({"token": token})
        if not doc:
            raise ResetTokenNotFoundError()

        record = PasswordResetTokenInDB(**doc)
        if record.is_used:
            raise ResetTokenAlreadyUsedError()
        if record.is_expired(self.clock()):
            raise ResetTokenExpiredError()
        return record

    async def consume(self, token: str, new_password: str) -> None:
        record = await self.validate(token)
        now = self.clock()
        token_oid = to_object_id(record.id)

        # Claim the token first; only one concurrent consumer can flip is_used.
        claimed = await self.db.password_resets.find_one_and_update(
            {"_id": token_oid, "is_used": False, "expires_at": {"$gt": now}},
            {"$set": {"is_used": True, "used_at": now}}
        )
        if claimed is None:
            await self.validate(token)
            raise ResetTokenAlreadyUsedError()

        try:
            await self.users.set_password(record.user_id, new_password)
        except NotFoundError:
            # Owner is gone; the token stays claimed so it cannot be replayed
            logger.warning(f"Reset token {record.id} belongs to deleted user {record.user_id}")
            raise ResetTokenNotFoundError()
        except Exception as e:
            logger.error(f"Password update failed for reset token {record.id}, releasing claim: {e}")
            await self.db.password_resets.update_one(
                {"_id": token_oid, "used_at": now},
                {"$set": {"is_used": False, "used_at": None}}
            )
            raise

        logger.info(f"Password reset completed for user {record.user_id}")

    async def sweep_expired(self) -> int:
        """
        Delete every token past its expiry, used or not.
        """
        result = await self.db.password_resets.delete_many({"expires_at": {"$lt": self.clock()}})
        if result.deleted_count > 0:
            logger.info(f"Swept {result.deleted_count} expired password reset tokens")
        return result.deleted_count
