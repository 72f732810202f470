from typing import Any, Dict, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from lawconnect.api.deps import CurrentUser, get_audit_service, get_case_service, get_current_user
from lawconnect.core.errors import UpstreamError
from lawconnect.models.ai import (
    AIReply,
    AiInteractionLogCreate,
    ChatRequest,
    DocumentAnalysisRequest,
    LegalAdviceRequest,
    PredictCaseRequest,
    QueryType,
)
from lawconnect.models.case import CaseDetails
from lawconnect.services.ai import AIService, get_ai_service, get_legal_disclaimer
from lawconnect.services.audit import AuditService
from lawconnect.services.cases import CaseService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

def build_log_entry(
    user: CurrentUser,
    query_type: QueryType,
    prompt: str,
    reply: AIReply,
    case_id: Optional[str] = None,
    confidence: Optional[float] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AiInteractionLogCreate:
    return AiInteractionLogCreate(
        user_id=user.id,
        case_id=case_id,
        query_type=query_type,
        prompt=prompt,
        response=reply.model_dump(mode="json", by_alias=True),
        model=reply.model,
        confidence=confidence,
        response_time_ms=reply.response_time_ms,
        status=reply.status,
        error_message=None if reply.success else reply.error,
        metadata={"chatId": reply.chat_id, **(metadata or {})},
    )

async def finish_interaction(
    background_tasks: BackgroundTasks,
    audit: AuditService,
    entry: AiInteractionLogCreate,
    reply: AIReply,
    failure_message: str,
) -> None:
    """
    Record the exchange exactly once. Successful answers are logged after
    the response goes out; failed ones are logged before the error is raised
    because an error response carries no background tasks.
    """
    if reply.success:
        background_tasks.add_task(audit.record, entry)
        return
    await audit.record(entry)
    raise UpstreamError(failure_message, detail=reply.error)

@router.post("/chat")
async def chat(
    body: ChatRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
    audit: AuditService = Depends(get_audit_service),
) -> Any:
    reply = await ai.send(body.message, body.chat_id)
    entry = build_log_entry(current_user, QueryType.CHATBOT, body.message, reply)
    await finish_interaction(background_tasks, audit, entry, reply, "Failed to get AI response")

    return {
        "success": True,
        "data": {
            "message": reply.message,
            "chatId": reply.chat_id,
            "disclaimer": get_legal_disclaimer(),
            "timestamp": reply.timestamp,
        },
    }

@router.post("/legal-advice")
async def legal_advice(
    body: LegalAdviceRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
    audit: AuditService = Depends(get_audit_service),
    cases: CaseService = Depends(get_case_service),
) -> Any:
    if body.case_id:
        await cases.get_accessible_case(body.case_id, current_user.id, current_user.role)

    reply = await ai.legal_advice(body.query, body.chat_id)
    entry = build_log_entry(current_user, QueryType.LEGAL_RESEARCH, body.query, reply, case_id=body.case_id)
    await finish_interaction(background_tasks, audit, entry, reply, "Failed to get legal advice")

    return {
        "success": True,
        "data": {
            "advice": reply.message,
            "chatId": reply.chat_id,
            "disclaimer": get_legal_disclaimer(),
            "timestamp": reply.timestamp,
        },
    }

@router.post("/predict-case")
async def predict_case(
    body: PredictCaseRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
    audit: AuditService = Depends(get_audit_service),
    cases: CaseService = Depends(get_case_service),
) -> Any:
    """
    Estimate a case's chance of success. The probability is read out of the
    model's prose and is a heuristic, not a structured prediction.
    """
    if body.case_id:
        case = await cases.get_accessible_case(body.case_id, current_user.id, current_user.role)
        details = case.details()
    else:
        details = CaseDetails(title=body.title, description=body.description, case_type=body.case_type)

    result = await ai.case_probability_analysis(details)
    entry = build_log_entry(
        current_user,
        QueryType.CASE_PREDICTION,
        details.model_dump_json(by_alias=True),
        result,
        case_id=body.case_id,
        confidence=result.probability,
        metadata={"probability": result.probability},
    )

    if result.success and body.case_id:
        try:
            await cases.update_probability(body.case_id, result.probability)
        except Exception:
            # The exchange happened; it is audited even though the request fails
            await audit.record(entry)
            raise

    await finish_interaction(background_tasks, audit, entry, result, "Failed to analyze case")

    return {
        "success": True,
        "data": {
            "probability": result.probability,
            "analysis": result.analysis,
            "chatId": result.chat_id,
            "disclaimer": get_legal_disclaimer(),
            "timestamp": result.timestamp,
        },
    }

@router.post("/analyze-document")
async def analyze_document(
    body: DocumentAnalysisRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
    audit: AuditService = Depends(get_audit_service),
    cases: CaseService = Depends(get_case_service),
) -> Any:
    if body.case_id:
        await cases.get_accessible_case(body.case_id, current_user.id, current_user.role)

    reply = await ai.document_analysis(body.document_summary, body.chat_id)
    entry = build_log_entry(
        current_user, QueryType.DOCUMENT_ANALYSIS, body.document_summary, reply, case_id=body.case_id
    )
    await finish_interaction(background_tasks, audit, entry, reply, "Failed to analyze document")

    return {
        "success": True,
        "data": {
            "analysis": reply.message,
            "chatId": reply.chat_id,
            "disclaimer": get_legal_disclaimer(),
            "timestamp": reply.timestamp,
        },
    }

@router.get("/history")
async def history(
    case_id: Optional[str] = Query(default=None, alias="caseId"),
    query_type: Optional[QueryType] = Query(default=None, alias="queryType"),
    limit: Optional[int] = Query(default=None),
    current_user: CurrentUser = Depends(get_current_user),
    audit: AuditService = Depends(get_audit_service),
) -> Any:
    records = await audit.list_for_user(
        current_user.id,
        case_id=case_id,
        query_type=query_type.value if query_type else None,
        limit=limit,
    )
    return {"success": True, "data": {"history": records, "count": len(records)}}
