from datetime import datetime
from typing import Optional
from pydantic import Field
from lawconnect.models.common import MongoBaseModel, PyObjectId

class PasswordResetTokenInDB(MongoBaseModel):
    """
    One-time credential recovery grant. Valid while unused and unexpired;
    marked used exactly once and never revalidated.
    """
    user_id: PyObjectId
    token: str
    expires_at: datetime
    is_used: bool = False
    used_at: Optional[datetime] = None
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) >= self.expires_at

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return not self.is_used and not self.is_expired(now)
