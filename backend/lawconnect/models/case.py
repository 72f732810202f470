from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import Field
from lawconnect.models.common import CamelModel, MongoBaseModel, PyObjectId

class CaseType(str, Enum):
    CIVIL = "civil"
    CRIMINAL = "criminal"
    CORPORATE = "corporate"
    FAMILY = "family"
    PROPERTY = "property"
    LABOR = "labor"
    OTHER = "other"

class CaseStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    ONGOING = "ongoing"
    REVIEW = "review"
    CLOSED = "closed"
    REJECTED = "rejected"

class CaseDetails(CamelModel):
    """The part of a case the AI analyst looks at."""
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    case_type: CaseType

class CaseInDB(MongoBaseModel):
    client_id: PyObjectId
    lawyer_id: Optional[PyObjectId] = None
    case_number: str
    title: str
    description: str
    case_type: CaseType = CaseType.CIVIL
    status: CaseStatus = CaseStatus.PENDING
    probability_score: Optional[float] = Field(default=None, ge=0, le=100)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def details(self) -> CaseDetails:
        return CaseDetails(title=self.title, description=self.description, case_type=self.case_type)
