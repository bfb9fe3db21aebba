"""Tests for the Pydantic contract models.

Validates that models accept valid data, reject invalid data, and that the
cost estimate speaks both the camelCase wire names and snake_case.
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from renova.models.contracts import (
    CostEstimate,
    CostEstimateItem,
    CreateProjectRequest,
    CreditPackage,
    ErrorResponse,
    Identity,
    InsufficientCreditsResponse,
    InternalViewsResponse,
    ProjectRecord,
    SetModeRequest,
    WorkspaceState,
)


class TestIdentity:
    def test_credits_never_negative(self):
        with pytest.raises(ValidationError):
            Identity(id="u1", email="a@example.com", credits=-1)

    def test_display_name_falls_back_to_email(self):
        identity = Identity(id="u1", email="a@example.com", credits=0)
        assert identity.display_name == "a@example.com"

    def test_display_name_full(self):
        identity = Identity(
            id="u1", first_name="Ana", last_name="Souza", email="a@example.com", credits=0
        )
        assert identity.display_name == "Ana Souza"


class TestCostEstimate:
    def test_accepts_camel_case(self):
        estimate = CostEstimate.model_validate(
            {
                "items": [{"item": "Piso", "materialCost": 100, "laborCost": 50}],
                "totalMaterialCost": 100,
                "totalLaborCost": 50,
                "totalCost": 150,
            }
        )
        assert estimate.items[0].material_cost == 100
        assert estimate.total_cost == 150

    def test_accepts_snake_case(self):
        item = CostEstimateItem(item="Piso", material_cost=1, labor_cost=2)
        assert item.labor_cost == 2

    def test_serializes_camel_case(self):
        estimate = CostEstimate(
            items=[], total_material_cost=0, total_labor_cost=0, total_cost=0
        )
        assert set(estimate.model_dump(by_alias=True)) == {
            "items",
            "totalMaterialCost",
            "totalLaborCost",
            "totalCost",
        }

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            CostEstimateItem(item="Piso", material_cost=-1, labor_cost=0)

    def test_missing_items_rejected(self):
        with pytest.raises(ValidationError):
            CostEstimate.model_validate({"totalCost": 1})


class TestInternalViewsResponse:
    def test_between_one_and_five_images(self):
        ok = InternalViewsResponse(images=["a"], credits_charged=5, balance=0)
        assert ok.requested == 5
        with pytest.raises(ValidationError):
            InternalViewsResponse(images=[], credits_charged=5, balance=0)
        with pytest.raises(ValidationError):
            InternalViewsResponse(images=["a"] * 6, credits_charged=5, balance=0)


class TestWorkspaceModels:
    def test_mode_is_restricted(self):
        assert SetModeRequest(mode="floorplan").mode == "floorplan"
        with pytest.raises(ValidationError):
            SetModeRequest(mode="blueprint")

    def test_state_defaults(self):
        state = WorkspaceState(mode="image")
        assert state.generated_image is None
        assert state.internal_views == []
        assert state.in_flight is False


class TestProjectModels:
    def test_create_requires_name(self):
        with pytest.raises(ValidationError):
            CreateProjectRequest(name="", original_image="data:image/png;base64,AA==")

    def test_record_generations_default_empty(self):
        record = ProjectRecord(
            id="p1",
            user_id="u1",
            name="Sala",
            original_image="data:image/png;base64,AA==",
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
        )
        assert record.generations == []


class TestErrorModels:
    def test_insufficient_credits_is_an_error_response(self):
        body = InsufficientCreditsResponse(
            error="insufficient_credits",
            message="Not enough credits",
            retryable=False,
            required=5,
            balance=2,
        )
        assert isinstance(body, ErrorResponse)
        assert body.purchase_url == "/api/v1/credit-packages"

    def test_credit_package_needs_positive_credits(self):
        with pytest.raises(ValidationError):
            CreditPackage(
                id="x",
                name="X",
                credits=0,
                price="R$ 0",
                description="",
                product_code="X",
                checkout_url="https://pay.hotmart.com/X",
            )
