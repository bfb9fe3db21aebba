"""Renova API and service contract models.

Field names on the wire follow the browser client (camelCase for the cost
estimate, snake_case elsewhere). Cost estimate models accept both spellings
so the schema-constrained AI response validates directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# === Identity ===


class Identity(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str
    credits: int = Field(ge=0)
    is_admin: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email


# === Static catalogs ===


class StyleOption(BaseModel):
    id: str
    name: str
    prompt: str


class CreditPackage(BaseModel):
    id: str
    name: str
    credits: int = Field(gt=0)
    price: str
    description: str
    product_code: str
    checkout_url: str
    popular: bool = False


# === Cost estimate ===


class CostEstimateItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item: str
    material_cost: float = Field(ge=0, alias="materialCost")
    labor_cost: float = Field(ge=0, alias="laborCost")


class CostEstimate(BaseModel):
    """Renovation cost breakdown in BRL. Ephemeral, never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[CostEstimateItem]
    total_material_cost: float = Field(ge=0, alias="totalMaterialCost")
    total_labor_cost: float = Field(ge=0, alias="totalLaborCost")
    total_cost: float = Field(ge=0, alias="totalCost")


# === Projects ===


class GenerationRecord(BaseModel):
    id: str
    project_id: str
    generated_image: str
    prompt: str
    created_at: datetime


class ProjectRecord(BaseModel):
    id: str
    user_id: str
    name: str
    original_image: str
    created_at: datetime
    generations: list[GenerationRecord] = []


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    original_image: str = Field(min_length=1)


class SaveToProjectRequest(BaseModel):
    """Save the workspace's current result. project_id=None creates a project."""

    project_id: str | None = None
    new_project_name: str = ""


class SaveToProjectResponse(BaseModel):
    project: ProjectRecord
    generation_id: str


# === Workspace ===

WorkspaceMode = Literal["image", "floorplan"]


class WorkspaceState(BaseModel):
    mode: WorkspaceMode
    source_filename: str | None = None
    original_preview: str | None = None
    is_pdf: bool = False
    prompt: str = ""
    generated_image: str | None = None
    internal_views: list[str] = []
    cost_estimate: CostEstimate | None = None
    creativity_image: str | None = None
    in_flight: bool = False


class SetModeRequest(BaseModel):
    mode: WorkspaceMode


class UploadResponse(BaseModel):
    filename: str
    mime_type: str
    preview: str
    is_pdf: bool


class GenerateRequest(BaseModel):
    prompt: str = ""
    style_id: str | None = None
    variation: bool = False


class DesignPromptRequest(BaseModel):
    prompt: str = ""
    style_id: str | None = None


class CreativityRequest(BaseModel):
    prompt: str = ""


class PaidActionResponse(BaseModel):
    credits_charged: int = Field(ge=0)
    balance: int = Field(ge=0)
    debit_warning: str | None = None


class ImageResultResponse(PaidActionResponse):
    image: str


class InternalViewsResponse(PaidActionResponse):
    images: list[str] = Field(min_length=1, max_length=5)
    requested: int = 5


class CostEstimateResponse(PaidActionResponse):
    estimate: CostEstimate


# === Purchases / admin ===


class PurchaseRedirectRequest(BaseModel):
    package_id: str


class PurchaseRedirectResponse(BaseModel):
    redirect_url: str
    redirect_after_seconds: float


class AdminSetCreditsRequest(BaseModel):
    credits: int = Field(ge=0)


class WebhookResponse(BaseModel):
    status: Literal["credited", "duplicate", "ignored", "not_mapped"]
    message: str


# === Code assistant ===


class ExplainCodeRequest(BaseModel):
    code: str


class GenerateCodeRequest(BaseModel):
    prompt: str


class CodeAssistResponse(BaseModel):
    text: str


# === Generic ===


class ActionResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool
    detail: str | None = None


class InsufficientCreditsResponse(ErrorResponse):
    required: int
    balance: int
    purchase_url: str = "/api/v1/credit-packages"
