"""Credit packages, checkout redirect and the payment provider webhook."""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from renova.api.auth import CurrentSession
from renova.api.errors import error_response
from renova.db import get_db
from renova.models.contracts import (
    CreditPackage,
    ErrorResponse,
    PurchaseRedirectRequest,
    PurchaseRedirectResponse,
    WebhookResponse,
)
from renova.services import purchases
from renova.services.profiles import ProfileNotFoundError

logger = structlog.get_logger()

router = APIRouter(tags=["purchases"])


@router.get("/credit-packages", response_model=list[CreditPackage])
async def list_credit_packages() -> list[CreditPackage]:
    return purchases.CREDIT_PACKAGES


@router.post(
    "/purchases/redirect",
    response_model=PurchaseRedirectResponse,
    responses={404: {"model": ErrorResponse}},
)
async def purchase_redirect(body: PurchaseRedirectRequest, session: CurrentSession):
    try:
        return purchases.checkout_redirect(body.package_id)
    except purchases.UnknownPackageError:
        return error_response(404, "not_found", f"Unknown credit package: {body.package_id}")


@router.post(
    "/webhooks/hotmart",
    response_model=WebhookResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def hotmart_webhook(
    payload: dict[str, Any],
    db: Annotated[AsyncSession, Depends(get_db)],
    x_hotmart_hottok: Annotated[str | None, Header()] = None,
):
    """Approved purchase notification: credit the buyer matched by email."""
    if not purchases.verify_hottok(x_hotmart_hottok):
        logger.warning("hotmart_token_rejected")
        return error_response(401, "not_authenticated", "Invalid webhook token")

    try:
        return await purchases.handle_purchase_event(db, payload)
    except purchases.WebhookPayloadError as exc:
        return error_response(400, "bad_request", str(exc))
    except ProfileNotFoundError:
        logger.error("hotmart_profile_not_found")
        return error_response(404, "not_found", "User profile not found for the buyer email")
