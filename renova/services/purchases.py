"""Credit packages, checkout redirects and the Hotmart purchase webhook."""

from __future__ import annotations

import hmac
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from renova.config import settings
from renova.models.contracts import CreditPackage, PurchaseRedirectResponse, WebhookResponse
from renova.models.db import ProcessedPurchase
from renova.services import profiles

logger = structlog.get_logger()

APPROVED_EVENT = "PURCHASE_APPROVED"
APPROVED_STATUS = "APPROVED"

CREDIT_PACKAGES: list[CreditPackage] = [
    CreditPackage(
        id="basic",
        name="Pacote Básico",
        credits=20,
        price="R$ 19,90",
        description="Ideal para experimentar.",
        product_code="K101885102O",
        checkout_url="https://pay.hotmart.com/K101885102O",
    ),
    CreditPackage(
        id="standard",
        name="Pacote Padrão",
        credits=50,
        price="R$ 39,90",
        description="O mais popular para projetos.",
        product_code="F101885804K",
        checkout_url="https://pay.hotmart.com/F101885804K",
        popular=True,
    ),
    CreditPackage(
        id="professional",
        name="Pacote Profissional",
        credits=150,
        price="R$ 99,90",
        description="Melhor custo-benefício.",
        product_code="D101885891B",
        checkout_url="https://pay.hotmart.com/D101885891B",
    ),
]

_BY_ID = {p.id: p for p in CREDIT_PACKAGES}
_BY_PRODUCT_CODE = {p.product_code: p for p in CREDIT_PACKAGES}


class UnknownPackageError(LookupError):
    pass


class WebhookPayloadError(ValueError):
    """The approved-purchase event lacks the buyer email or product id."""


def get_package(package_id: str) -> CreditPackage | None:
    return _BY_ID.get(package_id)


def credits_for_product(product_code: str) -> int | None:
    package = _BY_PRODUCT_CODE.get(product_code)
    return package.credits if package else None


def checkout_redirect(package_id: str) -> PurchaseRedirectResponse:
    """Where to send the buyer, and after how long (manual link uses the same URL)."""
    package = get_package(package_id)
    if package is None:
        raise UnknownPackageError(package_id)
    logger.info("purchase_redirect", package_id=package_id, credits=package.credits)
    return PurchaseRedirectResponse(
        redirect_url=package.checkout_url,
        redirect_after_seconds=settings.purchase_redirect_delay_seconds,
    )


def verify_hottok(received: str | None) -> bool:
    """Check the shared webhook token. Always passes when none is configured."""
    expected = settings.hotmart_webhook_token
    if not expected:
        return True
    return received is not None and hmac.compare_digest(received, expected)


def _dig(payload: dict[str, Any], *path: str) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _duplicate(transaction: str | None) -> WebhookResponse:
    logger.info("hotmart_duplicate_delivery", transaction=transaction)
    return WebhookResponse(status="duplicate", message="Purchase already credited")


async def handle_purchase_event(db: AsyncSession, payload: dict[str, Any]) -> WebhookResponse:
    """Credit the buyer's profile for an approved purchase.

    Each Hotmart transaction is credited at most once; a redelivery answers
    "duplicate". Raises WebhookPayloadError when essential data is missing and
    profiles.ProfileNotFoundError when no profile has the buyer's email.
    """
    event = payload.get("event")
    status = _dig(payload, "data", "purchase", "status")
    if event != APPROVED_EVENT or status != APPROVED_STATUS:
        logger.info("hotmart_event_ignored", hotmart_event=event, purchase_status=status)
        return WebhookResponse(status="ignored", message="Not an approved purchase event")

    email = _dig(payload, "data", "buyer", "email")
    product = _dig(payload, "data", "product", "id")
    if not email or product is None or product == "":
        logger.error("hotmart_payload_incomplete", has_email=bool(email), has_product=bool(product))
        raise WebhookPayloadError("Missing buyer email or product id")

    product_code = str(product)
    credits = credits_for_product(product_code)
    if credits is None:
        logger.warning("hotmart_product_not_mapped", product_code=product_code)
        return WebhookResponse(status="not_mapped", message="Product not mapped")

    transaction = _dig(payload, "data", "purchase", "transaction")
    if transaction:
        transaction = str(transaction)
        if await db.get(ProcessedPurchase, transaction) is not None:
            return _duplicate(transaction)
        # Committed together with the balance increment
        db.add(
            ProcessedPurchase(
                transaction=transaction, email=email, product_code=product_code, credits=credits
            )
        )
    else:
        logger.warning("hotmart_transaction_missing", product_code=product_code)

    try:
        old_balance, new_balance = await profiles.add_credits_by_email(db, email, credits)
    except IntegrityError:
        # A concurrent delivery of the same transaction committed first
        await db.rollback()
        return _duplicate(transaction)
    except profiles.ProfileNotFoundError:
        await db.rollback()
        raise
    logger.info(
        "hotmart_credits_added",
        transaction=transaction,
        product_code=product_code,
        old_balance=old_balance,
        new_balance=new_balance,
    )
    return WebhookResponse(status="credited", message="Credits updated successfully")
