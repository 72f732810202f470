from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from lawconnect.core.config import settings
from lawconnect.models.ai import AiInteractionLogCreate, AiInteractionLogInDB, AiInteractionLogResponse
from lawconnect.models.common import to_object_id
import logging

logger = logging.getLogger(__name__)

def clamp_history_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.AI_HISTORY_DEFAULT_LIMIT
    return max(1, min(limit, settings.AI_HISTORY_MAX_LIMIT))

class AuditService:
    """
    Append-only log of AI interactions. Records are written once and never
    updated or deleted.
    """
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def record(self, entry: AiInteractionLogCreate) -> Optional[str]:
        """
        Persist one AI interaction. Runs after the response has been
        prepared, so a failed write is reported to the log and swallowed
        here rather than turning a delivered answer into an error.
        """
        try:
            log_db = AiInteractionLogInDB(**entry.model_dump())
            doc = log_db.model_dump(exclude={"id"})
            doc["user_id"] = to_object_id(entry.user_id) or entry.user_id
            if entry.case_id:
                doc["case_id"] = to_object_id(entry.case_id) or entry.case_id
            result = await self.db.ai_logs.insert_one(doc)
            return str(result.inserted_id)
        except Exception as e:
            logger.exception(
                f"Failed to record AI interaction for user {entry.user_id}: {e}",
                extra={"extra_data": {"query_type": entry.query_type, "status": entry.status}}
            )
            return None

    async def list_for_user(
        self,
        user_id: str,
        case_id: Optional[str] = None,
        query_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[AiInteractionLogResponse]:
        limit = clamp_history_limit(limit)
        query = {"user_id": to_object_id(user_id) or user_id}
        if case_id:
            query["case_id"] = to_object_id(case_id) or case_id
        if query_type:
            query["query_type"] = query_type

        cursor = self.db.ai_logs.find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [AiInteractionLogResponse(**doc) for doc in docs]
