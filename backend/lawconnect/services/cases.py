from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase
from lawconnect.core.errors import ForbiddenError, NotFoundError, ValidationError
from lawconnect.models.case import CaseInDB
from lawconnect.models.common import to_object_id
from lawconnect.models.user import UserRole
import logging

logger = logging.getLogger(__name__)

class CaseService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def get_case(self, case_id: str) -> CaseInDB:
        oid = to_object_id(case_id)
        if oid is None:
            raise ValidationError("Invalid case id")
        case = await self.db.cases.find_one({"_id": oid})
        if not case:
            raise NotFoundError("Case not found")
        return CaseInDB(**case)

    @staticmethod
    def ensure_access(case: CaseInDB, user_id: str, role: str) -> None:
        """
        Only the case's client and its assigned lawyer may act on it;
        admins are not restricted.
        """
        if role == UserRole.ADMIN:
            return
        if role == UserRole.CLIENT and case.client_id == user_id:
            return
        if role == UserRole.LAWYER and case.lawyer_id == user_id:
            return
        logger.info(f"User {user_id} ({role}) denied access to case {case.id}")
        raise ForbiddenError("Not authorized")

    async def get_accessible_case(self, case_id: str, user_id: str, role: str) -> CaseInDB:
        case = await self.get_case(case_id)
        self.ensure_access(case, user_id, role)
        return case

    async def update_probability(self, case_id: str, probability: float) -> None:
        await self.db.cases.update_one(
            {"_id": to_object_id(case_id)},
            {"$set": {"probability_score": probability, "updated_at": datetime.utcnow()}}
        )
