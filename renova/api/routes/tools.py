"""Code assistant tools. Free for any signed-in user."""

import structlog
from fastapi import APIRouter

from renova.api.auth import CurrentSession
from renova.api.errors import error_response
from renova.models.contracts import (
    CodeAssistResponse,
    ErrorResponse,
    ExplainCodeRequest,
    GenerateCodeRequest,
)
from renova.services import code_assist
from renova.services.generation import PromptError
from renova.utils.gemini import Err

logger = structlog.get_logger()

router = APIRouter(prefix="/tools", tags=["tools"])

_RESPONSES = {422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}


@router.post("/explain-code", response_model=CodeAssistResponse, responses=_RESPONSES)
async def explain_code(body: ExplainCodeRequest, session: CurrentSession):
    try:
        result = await code_assist.explain_code(body.code)
    except PromptError as exc:
        return error_response(422, "validation_error", str(exc))
    if isinstance(result, Err):
        return error_response(502, "generation_failed", result.reason, retryable=True)
    return CodeAssistResponse(text=result.value)


@router.post("/generate-code", response_model=CodeAssistResponse, responses=_RESPONSES)
async def generate_code(body: GenerateCodeRequest, session: CurrentSession):
    try:
        result = await code_assist.generate_code(body.prompt)
    except PromptError as exc:
        return error_response(422, "validation_error", str(exc))
    if isinstance(result, Err):
        return error_response(502, "generation_failed", result.reason, retryable=True)
    return CodeAssistResponse(text=result.value)
