from fastapi import Request
from lawconnect.core.config import settings
from lawconnect.models.ai import AIReply, AiLogStatus, CaseProbabilityResult
from lawconnect.models.case import CaseDetails
import httpx
import json
import logging
import re
import time
import uuid
from typing import Any, Optional

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Sorry, I am unable to process your request at the moment. Please try again."

LEGAL_DISCLAIMER = (
    "⚠️ **Legal Disclaimer**: This AI-generated response is for informational purposes only "
    "and does not constitute legal advice. Please consult with a licensed attorney for specific "
    "legal matters concerning your case."
)

PROBABILITY_PATTERN = re.compile(r"(\d+)%")
DEFAULT_PROBABILITY = 50

LEGAL_ADVICE_PROMPT = (
    "As a legal AI assistant for LawConnect, provide professional legal guidance for the "
    "following query. Be informative, accurate, and helpful, but remind the user to consult "
    "with a licensed attorney for specific legal advice:\n\n{query}"
)

CASE_PROBABILITY_PROMPT = """As a legal AI analyst, analyze this case and provide:
1. A success probability percentage (0-100)
2. Key strengths of the case
3. Potential challenges
4. Recommended actions

Case Type: {case_type}
Title: {title}
Description: {description}

Provide the probability as a number between 0-100, followed by detailed analysis."""

DOCUMENT_ANALYSIS_PROMPT = """As a legal document analyst, review this document summary and provide:
1. Key legal points
2. Potential risks or issues
3. Recommendations

Document Summary: {summary}"""


def get_legal_disclaimer() -> str:
    return LEGAL_DISCLAIMER


def generate_chat_id() -> str:
    return f"chat_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def extract_probability(text: str) -> int:
    """
    Best-effort: the first "<n>%" in the model's prose, clamped to 0-100.
    The upstream reply is free text, so there is no guarantee the number
    found is the one the model meant.
    """
    match = PROBABILITY_PATTERN.search(text or "")
    probability = int(match.group(1)) if match else DEFAULT_PROBABILITY
    return min(max(probability, 0), 100)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, default=str)


class AIService:
    """
    Proxy to the external chat completion endpoint.

    Every call returns an AIReply; transport errors, timeouts, non-2xx
    statuses and unreadable bodies become a failed reply carrying the
    fixed fallback message.
    """
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS)
        self.model = settings.AI_MODEL_NAME

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    def _parse_message(self, response: httpx.Response) -> tuple[str, Optional[str]]:
        data = response.json()
        if isinstance(data, dict):
            raw = data.get("message")
            if raw is None:
                raw = data.get("response")
            upstream_chat_id = data.get("chatId")
        else:
            raw = data
            upstream_chat_id = None

        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValueError("AI response did not contain a message")
        return _as_text(raw), upstream_chat_id

    def _failure(self, error: Exception, status: AiLogStatus, started: float) -> AIReply:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.error(
            f"AI Service Error: {error}",
            extra={"extra_data": {"ai_status": status, "response_time_ms": elapsed_ms}}
        )
        return AIReply(
            success=False,
            message=FALLBACK_MESSAGE,
            status=status,
            model=self.model,
            error=str(error) or type(error).__name__,
            response_time_ms=elapsed_ms,
        )

    async def send(self, prompt: str, chat_id: Optional[str] = None) -> AIReply:
        params = {"message": prompt}
        if chat_id:
            params["chatid"] = chat_id

        started = time.perf_counter()
        try:
            response = await self.client.get(
                settings.AI_API_BASE_URL,
                params=params,
                timeout=settings.AI_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            message, upstream_chat_id = self._parse_message(response)
        except httpx.TimeoutException as e:
            return self._failure(e, AiLogStatus.TIMEOUT, started)
        except Exception as e:
            return self._failure(e, AiLogStatus.ERROR, started)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"AI response received in {elapsed_ms}ms",
            extra={"extra_data": {"response_time_ms": elapsed_ms, "model": self.model}}
        )
        return AIReply(
            success=True,
            message=message,
            chat_id=upstream_chat_id or chat_id or generate_chat_id(),
            model=self.model,
            response_time_ms=elapsed_ms,
        )

    async def legal_advice(self, query: str, chat_id: Optional[str] = None) -> AIReply:
        return await self.send(LEGAL_ADVICE_PROMPT.format(query=query), chat_id)

    async def case_probability_analysis(self, details: CaseDetails) -> CaseProbabilityResult:
        prompt = CASE_PROBABILITY_PROMPT.format(
            case_type=details.case_type,
            title=details.title,
            description=details.description,
        )
        reply = await self.send(prompt)
        result = CaseProbabilityResult(**reply.model_dump())
        if reply.success:
            result.analysis = reply.message
            result.probability = extract_probability(reply.message)
        return result

    async def document_analysis(self, summary: str, chat_id: Optional[str] = None) -> AIReply:
        return await self.send(DOCUMENT_ANALYSIS_PROMPT.format(summary=summary), chat_id)


async def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service
