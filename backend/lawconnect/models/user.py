from enum import Enum
from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Any, Dict, Optional
from datetime import datetime
import re
from lawconnect.core.security import get_password_hash
from lawconnect.models.common import CamelModel, MongoBaseModel

PHONE_PATTERN = re.compile(r"^[0-9+\-\s()]*$")
MIN_PASSWORD_LENGTH = 6

class UserRole(str, Enum):
    CLIENT = "client"
    LAWYER = "lawyer"
    ADMIN = "admin"

def validate_password_strength(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[a-zA-Z]", value):
        raise ValueError("Password must contain at least one letter")
    return value

def normalize_email(value: str) -> str:
    return value.strip().lower()

class UserBase(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone number format")
        return v

class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.CLIENT
    # Lawyer-only profile fields
    specialization: Optional[str] = Field(default=None, max_length=255)
    license_number: Optional[str] = Field(default=None, max_length=100)
    experience: Optional[int] = Field(default=None, ge=0)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v: UserRole) -> UserRole:
        # Admin accounts are never self-registered
        if v == UserRole.ADMIN:
            raise ValueError("Role must be either client or lawyer")
        return v

class UserInDB(MongoBaseModel):
    name: str
    email: str
    hashed_password: Optional[str] = None
    role: UserRole = UserRole.CLIENT
    phone: Optional[str] = None
    address: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    experience: Optional[int] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class UserResponse(MongoBaseModel):
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    address: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    experience: Optional[int] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=500)
    specialization: Optional[str] = Field(default=None, max_length=255)
    experience: Optional[int] = Field(default=None, ge=0)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone number format")
        return v

class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)

class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)

class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

def build_user_document(user_in: UserCreate) -> Dict[str, Any]:
    """
    Turn a registration payload into the document stored in ``users``.
    The password is hashed here and never stored in plain text; lawyer
    profile fields are dropped for every other role.
    """
    data = user_in.model_dump(exclude={"password"})
    if user_in.role != UserRole.LAWYER:
        for field in ("specialization", "license_number", "experience"):
            data[field] = None
    user_db = UserInDB(**data, hashed_password=get_password_hash(user_in.password))
    return user_db.model_dump(exclude={"id"})
