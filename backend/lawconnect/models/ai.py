from enum import Enum
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import Field, field_validator, model_validator
from lawconnect.models.case import CaseType
from lawconnect.models.common import CamelModel, MongoBaseModel, PyObjectId

class QueryType(str, Enum):
    CHATBOT = "chatbot"
    CASE_PREDICTION = "case_prediction"
    DOCUMENT_ANALYSIS = "document_analysis"
    LEGAL_RESEARCH = "legal_research"

class AiLogStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"

# --- Results returned by the AI proxy ---

class AIReply(CamelModel):
    success: bool
    message: str
    status: AiLogStatus = AiLogStatus.SUCCESS
    chat_id: Optional[str] = None
    model: Optional[str] = None
    error: Optional[str] = None
    response_time_ms: Optional[int] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

class CaseProbabilityResult(AIReply):
    probability: Optional[int] = Field(default=None, ge=0, le=100)
    analysis: Optional[str] = None

# --- Audit log ---

class AiInteractionLogCreate(CamelModel):
    user_id: PyObjectId
    case_id: Optional[PyObjectId] = None
    query_type: QueryType = QueryType.CHATBOT
    prompt: str = Field(min_length=1)
    response: Dict[str, Any]
    model: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0, le=100)
    response_time_ms: Optional[int] = Field(default=None, ge=0)
    status: AiLogStatus = AiLogStatus.SUCCESS
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

class AiInteractionLogInDB(MongoBaseModel, AiInteractionLogCreate):
    created_at: datetime = Field(default_factory=datetime.utcnow)

class AiInteractionLogResponse(MongoBaseModel):
    case_id: Optional[PyObjectId] = None
    query_type: QueryType
    prompt: str
    response: Dict[str, Any]
    model: Optional[str] = None
    confidence: Optional[float] = None
    response_time_ms: Optional[int] = None
    status: AiLogStatus
    error_message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime

# --- Request bodies ---

def _require_text(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise ValueError(message)
    return value.strip()

def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value

class ChatRequest(CamelModel):
    message: Optional[str] = None
    chat_id: Optional[str] = None

    @model_validator(mode="after")
    def check_message(self):
        self.message = _require_text(self.message, "Message is required")
        return self

class LegalAdviceRequest(CamelModel):
    query: Optional[str] = None
    chat_id: Optional[str] = None
    case_id: Optional[str] = None

    @field_validator("case_id", mode="before")
    @classmethod
    def blank_case_id(cls, v: Any) -> Any:
        return _blank_to_none(v if not isinstance(v, int) else str(v))

    @model_validator(mode="after")
    def check_query(self):
        self.query = _require_text(self.query, "Legal query is required")
        return self

class PredictCaseRequest(CamelModel):
    case_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    case_type: Optional[CaseType] = None

    @field_validator("case_id", mode="before")
    @classmethod
    def blank_case_id(cls, v: Any) -> Any:
        return _blank_to_none(v if not isinstance(v, int) else str(v))

    @model_validator(mode="after")
    def check_details(self):
        if self.case_id is None:
            if not (self.title and self.title.strip()) or not (self.description and self.description.strip()) or not self.case_type:
                raise ValueError("Case title, description, and type required")
        return self

class DocumentAnalysisRequest(CamelModel):
    document_summary: Optional[str] = None
    case_id: Optional[str] = None
    chat_id: Optional[str] = None

    @field_validator("case_id", mode="before")
    @classmethod
    def blank_case_id(cls, v: Any) -> Any:
        return _blank_to_none(v if not isinstance(v, int) else str(v))

    @model_validator(mode="after")
    def check_summary(self):
        self.document_summary = _require_text(self.document_summary, "Document summary required")
        return self
