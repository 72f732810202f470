from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from lawconnect.core.errors import AuthError
from lawconnect.core.logging import bind_user
from lawconnect.core.security import InvalidTokenError, TokenExpiredError, decode_access_token
from lawconnect.db.mongodb import get_database
from lawconnect.services.audit import AuditService
from lawconnect.services.cases import CaseService
from lawconnect.services.password_reset import PasswordResetService
from lawconnect.services.users import UserService
import logging

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

class CurrentUser(BaseModel):
    id: str
    role: str

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> CurrentUser:
    """
    Establish who is calling from the bearer token. The client always gets
    the same message; the actual reason only goes to the server log.
    """
    if credentials is None or not credentials.credentials:
        reason = "missing"
    else:
        try:
            payload = decode_access_token(credentials.credentials)
        except TokenExpiredError:
            reason = "expired"
        except InvalidTokenError:
            reason = "invalid"
        else:
            user = CurrentUser(id=payload.user_id, role=payload.role)
            request.state.user = user
            bind_user(user.id)
            return user

    logger.info(
        f"Rejected request to {request.url.path}: {reason} token",
        extra={"extra_data": {"auth_failure": reason}}
    )
    raise AuthError("Invalid or missing token")

def get_user_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> UserService:
    return UserService(db)

def get_password_reset_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> PasswordResetService:
    return PasswordResetService(db)

def get_audit_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> AuditService:
    return AuditService(db)

def get_case_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> CaseService:
    return CaseService(db)
