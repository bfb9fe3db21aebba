"""AI generation operations: redesign, floor-plan concept, free-text image,
internal views and cost estimate.

These functions only talk to Gemini and shape its output. Credit checks and
debits live in `renova.services.credits`; callers wrap these operations in
`run_paid_action`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from google import genai
from pydantic import ValidationError

from renova.catalog import get_style
from renova.models.contracts import CostEstimate
from renova.utils.gemini import Err, Ok, generate_image, generate_json
from renova.utils.image import ImagePayload

logger = structlog.get_logger()

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

# Totals may differ from the item sums by rounding on the model side
_TOTALS_TOLERANCE = 0.01


class PromptError(ValueError):
    """The composed prompt is empty or references an unknown style."""


@dataclass(frozen=True)
class ViewCategory:
    id: str
    description: str


INTERNAL_VIEW_CATEGORIES: tuple[ViewCategory, ...] = (
    ViewCategory("living_room", "da sala de estar, mostrando o sofá e a área de TV"),
    ViewCategory("kitchen", "da cozinha, com foco na bancada e nos armários"),
    ViewCategory("main_bedroom", "do quarto principal, mostrando a cama e a janela"),
    ViewCategory("main_bathroom", "do banheiro principal, com foco no chuveiro e na pia"),
    ViewCategory(
        "dining_area",
        "de um ângulo amplo da área de jantar, mostrando a mesa e as cadeiras",
    ),
)

NO_INTERNAL_VIEWS_MESSAGE = (
    "AI could not generate any internal view. This may be a temporary problem or the "
    "3D concept was not clear enough. Try generating a variation of the concept or try "
    "again later."
)

COST_ESTIMATE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "item": {"type": "STRING", "description": "Renovation item or service."},
                    "materialCost": {"type": "NUMBER", "description": "Material cost in BRL."},
                    "laborCost": {"type": "NUMBER", "description": "Labor cost in BRL."},
                },
                "required": ["item", "materialCost", "laborCost"],
            },
        },
        "totalMaterialCost": {"type": "NUMBER", "description": "Sum of all material costs."},
        "totalLaborCost": {"type": "NUMBER", "description": "Sum of all labor costs."},
        "totalCost": {"type": "NUMBER", "description": "Material plus labor."},
    },
    "required": ["items", "totalMaterialCost", "totalLaborCost", "totalCost"],
}


def load_prompt(name: str) -> str:
    return (PROMPTS_DIR / name).read_text(encoding="utf-8").strip()


def compose_prompt(free_text: str, style_text: str = "") -> str:
    """Join free text and style text with one space, trimmed.

    Raises PromptError when nothing is left.
    """
    full = f"{free_text} {style_text}".strip() if style_text else free_text.strip()
    if not full:
        raise PromptError("Describe the change you want or choose a style.")
    return full


def style_text_for(style_id: str | None) -> str:
    if not style_id:
        return ""
    style = get_style(style_id)
    if style is None:
        raise PromptError(f"Unknown style: {style_id}")
    return style.prompt


async def redesign(
    image: ImagePayload, prompt: str, *, client: genai.Client | None = None
) -> Ok[ImagePayload] | Err:
    instruction = load_prompt("redesign.txt").format(prompt=prompt)
    return await generate_image(instruction, image, client=client)


async def floorplan_concept(
    plan: ImagePayload, prompt: str, *, client: genai.Client | None = None
) -> Ok[ImagePayload] | Err:
    instruction = load_prompt("floorplan_concept.txt").format(prompt=prompt)
    return await generate_image(instruction, plan, client=client)


async def image_from_text(
    prompt: str, *, client: genai.Client | None = None
) -> Ok[ImagePayload] | Err:
    instruction = load_prompt("text_to_image.txt").format(prompt=prompt)
    return await generate_image(instruction, client=client)


async def internal_views(
    concept: ImagePayload, design_prompt: str, *, client: genai.Client | None = None
) -> Ok[list[ImagePayload]] | Err:
    """Render one eye-level view per category, one call at a time.

    A category that errors or comes back without an image is skipped. The
    batch only fails when no category produced an image.
    """
    template = load_prompt("internal_view.txt")
    views: list[ImagePayload] = []

    for category in INTERNAL_VIEW_CATEGORIES:
        instruction = template.format(view=category.description, prompt=design_prompt)
        result = await generate_image(instruction, concept, client=client)
        if isinstance(result, Err):
            logger.warning(
                "internal_view_failed",
                category=category.id,
                kind=result.kind,
                reason=result.reason[:200],
            )
            continue
        views.append(result.value)

    logger.info(
        "internal_views_done",
        produced=len(views),
        requested=len(INTERNAL_VIEW_CATEGORIES),
    )
    if not views:
        return Err(NO_INTERNAL_VIEWS_MESSAGE, "no_image")
    return Ok(views)


def reconcile_totals(estimate: CostEstimate) -> CostEstimate:
    """Recompute the three totals from the line items when they disagree."""
    material = sum(i.material_cost for i in estimate.items)
    labor = sum(i.labor_cost for i in estimate.items)
    consistent = (
        abs(estimate.total_material_cost - material) <= _TOTALS_TOLERANCE
        and abs(estimate.total_labor_cost - labor) <= _TOTALS_TOLERANCE
        and abs(estimate.total_cost - (material + labor)) <= _TOTALS_TOLERANCE
    )
    if consistent:
        return estimate
    logger.warning(
        "cost_estimate_totals_recomputed",
        reported_total=estimate.total_cost,
        computed_total=material + labor,
    )
    return estimate.model_copy(
        update={
            "total_material_cost": material,
            "total_labor_cost": labor,
            "total_cost": material + labor,
        }
    )


def parse_cost_estimate(payload: Any) -> Ok[CostEstimate] | Err:
    """Validate a decoded JSON payload against the estimate shape."""
    try:
        estimate = CostEstimate.model_validate(payload)
    except ValidationError as exc:
        logger.warning("cost_estimate_shape_invalid", errors=exc.error_count())
        return Err("Could not process the cost estimate returned by the AI.", "parse")
    return Ok(reconcile_totals(estimate))


async def estimate_cost(
    description: str, *, client: genai.Client | None = None
) -> Ok[CostEstimate] | Err:
    prompt = load_prompt("cost_estimate.txt").format(prompt=description)
    result = await generate_json(prompt, COST_ESTIMATE_SCHEMA, client=client)
    if isinstance(result, Err):
        if result.kind == "parse":
            return Err("Could not process the cost estimate returned by the AI.", "parse")
        return result
    return parse_cost_estimate(result.value)
