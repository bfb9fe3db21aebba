"""Workspace endpoints: upload, paid generation actions and creativity mode.

Each paid action runs inside the workspace's in-flight guard, so a second
submission while one is running gets 409 instead of a second debit.
"""

from collections.abc import Callable
from typing import Any

import structlog
from fastapi import APIRouter, UploadFile

from renova.api.auth import CurrentSession
from renova.api.errors import error_response, insufficient_credits_response
from renova.catalog import STYLE_OPTIONS
from renova.config import settings
from renova.models.contracts import (
    CostEstimateResponse,
    CreativityRequest,
    DesignPromptRequest,
    ErrorResponse,
    GenerateRequest,
    ImageResultResponse,
    InsufficientCreditsResponse,
    InternalViewsResponse,
    SetModeRequest,
    StyleOption,
    UploadResponse,
    WorkspaceState,
)
from renova.services import generation
from renova.services.credits import (
    Charged,
    Failed,
    InsufficientCredits,
    PaidAction,
    run_paid_action,
)
from renova.services.generation import PromptError, compose_prompt, style_text_for
from renova.services.upload import UploadError, normalize_upload
from renova.services.workspace import Workspace, WorkspaceBusyError, get_workspace
from renova.utils.image import from_data_url

logger = structlog.get_logger()

router = APIRouter(tags=["workspace"])

_PAID_RESPONSES: dict[int | str, dict[str, Any]] = {
    402: {"model": InsufficientCreditsResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}

_BUSY = ("request_in_progress", "A request is already in progress. Please wait.")


def _outcome_response(
    outcome: Charged[Any] | InsufficientCredits | Failed,
    build: Callable[[Charged[Any]], Any],
):
    if isinstance(outcome, InsufficientCredits):
        return insufficient_credits_response(outcome)
    if isinstance(outcome, Failed):
        if outcome.kind == "parse":
            return error_response(502, "parse_failed", outcome.reason)
        return error_response(
            502, "generation_failed", outcome.reason, retryable=outcome.kind != "no_image"
        )
    return build(outcome)


def _design_prompt(body: DesignPromptRequest, workspace: Workspace) -> str:
    """Prompt from the request, or the one that produced the current result."""
    if not body.prompt.strip() and not body.style_id:
        return compose_prompt(workspace.prompt)
    return compose_prompt(body.prompt, style_text_for(body.style_id))


# --- Styles ---


@router.get("/styles", response_model=list[StyleOption])
async def list_styles() -> list[StyleOption]:
    """Style presets accepted as `style_id` by the generation endpoints."""
    return STYLE_OPTIONS


# --- State ---


@router.get("/workspace", response_model=WorkspaceState)
async def get_workspace_state(session: CurrentSession) -> WorkspaceState:
    return get_workspace(session.user_id).to_state()


@router.put(
    "/workspace/mode",
    response_model=WorkspaceState,
    responses={409: {"model": ErrorResponse}},
)
async def set_mode(body: SetModeRequest, session: CurrentSession):
    """Switch between photo redesign and floor-plan mode. Clears the workspace."""
    workspace = get_workspace(session.user_id)
    if workspace.in_flight:
        return error_response(409, *_BUSY)
    workspace.set_mode(body.mode)
    logger.info("workspace_mode_set", mode=body.mode)
    return workspace.to_state()


# --- Upload ---


@router.post(
    "/workspace/upload",
    response_model=UploadResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def upload_source(file: UploadFile, session: CurrentSession):
    """Upload a photo (image mode) or a floor plan image/PDF (floorplan mode)."""
    workspace = get_workspace(session.user_id)
    if workspace.in_flight:
        return error_response(409, *_BUSY)

    # Nothing from the previous upload survives, even if this one fails
    workspace.clear()

    chunks: list[bytes] = []
    total = 0
    while chunk := await file.read(65_536):
        total += len(chunk)
        if total > settings.max_upload_bytes:
            mb = settings.max_upload_bytes // (1024 * 1024)
            return error_response(422, "upload_failed", f"File is too large. Maximum size is {mb} MB.")
        chunks.append(chunk)
    data = b"".join(chunks)

    filename = file.filename or "upload"
    try:
        upload = await normalize_upload(filename, file.content_type, data)
    except UploadError as exc:
        logger.info("upload_rejected", filename=filename, reason=str(exc))
        return error_response(422, "upload_failed", str(exc))

    workspace.hold(upload)
    logger.info(
        "upload_accepted",
        filename=upload.filename,
        is_pdf=upload.is_pdf,
        size_bytes=len(upload.image.data),
    )
    return UploadResponse(
        filename=upload.filename,
        mime_type=upload.image.mime_type,
        preview=upload.preview,
        is_pdf=upload.is_pdf,
    )


@router.delete(
    "/workspace/upload",
    status_code=204,
    responses={409: {"model": ErrorResponse}},
)
async def clear_upload(session: CurrentSession):
    workspace = get_workspace(session.user_id)
    if workspace.in_flight:
        return error_response(409, *_BUSY)
    workspace.clear()


# --- Paid actions ---


@router.post("/workspace/generate", response_model=ImageResultResponse, responses=_PAID_RESPONSES)
async def generate_design(body: GenerateRequest, session: CurrentSession):
    """Redesign the photo or render a 3D concept from the plan, or a variation of either."""
    workspace = get_workspace(session.user_id)
    upload = workspace.upload
    if upload is None:
        return error_response(422, "validation_error", "Upload an image first.")
    if body.variation and workspace.generated_image is None:
        return error_response(422, "validation_error", "Generate a design before asking for a variation.")
    try:
        prompt = compose_prompt(body.prompt, style_text_for(body.style_id))
    except PromptError as exc:
        return error_response(422, "validation_error", str(exc))

    if body.variation:
        action = PaidAction.VARIATION
    elif workspace.mode == "floorplan":
        action = PaidAction.FLOORPLAN_CONCEPT
    else:
        action = PaidAction.REDESIGN
    operation = generation.floorplan_concept if workspace.mode == "floorplan" else generation.redesign

    try:
        with workspace.busy():
            outcome = await run_paid_action(
                session, action, lambda: operation(upload.image, prompt)
            )
    except WorkspaceBusyError:
        return error_response(409, *_BUSY)

    if isinstance(outcome, Failed) and not body.variation:
        workspace.clear_results()
    elif isinstance(outcome, Charged):
        if not body.variation:
            workspace.clear_results()
        workspace.prompt = prompt
        workspace.generated_image = outcome.value.to_data_url()

    return _outcome_response(
        outcome,
        lambda charged: ImageResultResponse(
            image=workspace.generated_image,
            credits_charged=charged.credits_charged,
            balance=charged.balance,
            debit_warning=charged.debit_warning,
        ),
    )


@router.post(
    "/workspace/internal-views",
    response_model=InternalViewsResponse,
    responses=_PAID_RESPONSES,
)
async def generate_internal_views(body: DesignPromptRequest, session: CurrentSession):
    """Up to five eye-level interior views of the current 3D concept."""
    workspace = get_workspace(session.user_id)
    if workspace.mode != "floorplan" or workspace.generated_image is None:
        return error_response(422, "validation_error", "Generate a 3D concept first.")
    try:
        prompt = _design_prompt(body, workspace)
    except PromptError as exc:
        return error_response(422, "validation_error", str(exc))

    concept = from_data_url(workspace.generated_image)

    async def render():
        # Only reached once the credit check passed
        workspace.internal_views = []
        return await generation.internal_views(concept, prompt)

    try:
        with workspace.busy():
            outcome = await run_paid_action(session, PaidAction.INTERNAL_VIEWS, render)
    except WorkspaceBusyError:
        return error_response(409, *_BUSY)

    if isinstance(outcome, Charged):
        workspace.internal_views = [view.to_data_url() for view in outcome.value]

    return _outcome_response(
        outcome,
        lambda charged: InternalViewsResponse(
            images=list(workspace.internal_views),
            requested=len(generation.INTERNAL_VIEW_CATEGORIES),
            credits_charged=charged.credits_charged,
            balance=charged.balance,
            debit_warning=charged.debit_warning,
        ),
    )


@router.post(
    "/workspace/cost-estimate",
    response_model=CostEstimateResponse,
    responses=_PAID_RESPONSES,
)
async def estimate_cost(body: DesignPromptRequest, session: CurrentSession):
    """Itemized renovation cost estimate (BRL) for the current result."""
    workspace = get_workspace(session.user_id)
    if workspace.generated_image is None:
        return error_response(422, "validation_error", "Generate a design first.")
    try:
        prompt = _design_prompt(body, workspace)
    except PromptError as exc:
        return error_response(422, "validation_error", str(exc))

    async def estimate():
        workspace.cost_estimate = None
        return await generation.estimate_cost(prompt)

    try:
        with workspace.busy():
            outcome = await run_paid_action(session, PaidAction.COST_ESTIMATE, estimate)
    except WorkspaceBusyError:
        return error_response(409, *_BUSY)

    if isinstance(outcome, Charged):
        workspace.cost_estimate = outcome.value

    return _outcome_response(
        outcome,
        lambda charged: CostEstimateResponse(
            estimate=charged.value,
            credits_charged=charged.credits_charged,
            balance=charged.balance,
            debit_warning=charged.debit_warning,
        ),
    )


@router.post("/creativity/generate", response_model=ImageResultResponse, responses=_PAID_RESPONSES)
async def generate_creative_image(body: CreativityRequest, session: CurrentSession):
    """Text-to-image, no upload involved."""
    workspace = get_workspace(session.user_id)
    try:
        prompt = compose_prompt(body.prompt)
    except PromptError as exc:
        return error_response(422, "validation_error", str(exc))

    async def imagine():
        workspace.creativity_image = None
        return await generation.image_from_text(prompt)

    try:
        with workspace.busy():
            outcome = await run_paid_action(session, PaidAction.CREATIVITY, imagine)
    except WorkspaceBusyError:
        return error_response(409, *_BUSY)

    if isinstance(outcome, Charged):
        workspace.creativity_image = outcome.value.to_data_url()

    return _outcome_response(
        outcome,
        lambda charged: ImageResultResponse(
            image=workspace.creativity_image,
            credits_charged=charged.credits_charged,
            balance=charged.balance,
            debit_warning=charged.debit_warning,
        ),
    )
