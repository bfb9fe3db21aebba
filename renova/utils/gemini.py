"""Gemini client wrapper for image and text generation.

Every call returns a tagged result, `Ok(value)` or `Err(reason, kind)`,
instead of raising, so callers branch on the outcome and never poke at raw
response attributes. Calls are not retried.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

import structlog
from google import genai
from google.genai import types

from renova.config import settings
from renova.utils.image import ImagePayload

logger = structlog.get_logger()

T = TypeVar("T")

ErrKind = Literal["api", "no_image", "parse", "timeout"]

IMAGE_CONFIG = types.GenerateContentConfig(
    response_modalities=["IMAGE", "TEXT"],
)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    reason: str
    kind: ErrKind = "api"


def get_client() -> genai.Client:
    """Create a Gemini client using the configured API key."""
    return genai.Client(api_key=settings.google_ai_api_key)


def image_part(image: ImagePayload) -> types.Part:
    return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)


def extract_image(response: types.GenerateContentResponse) -> ImagePayload | None:
    """Return the first inline image of the first candidate, if any."""
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if content is None or content.parts is None:
        return None
    for part in content.parts:
        inline = part.inline_data
        if inline is not None and inline.data:
            return ImagePayload(data=inline.data, mime_type=inline.mime_type or "image/png")
    return None


def extract_text(response: types.GenerateContentResponse) -> str:
    """Join all text parts of the first candidate."""
    if not response.candidates:
        return ""
    content = response.candidates[0].content
    if content is None or content.parts is None:
        return ""
    return "\n".join(part.text for part in content.parts if part.text is not None)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```)."""
    text = text.strip()
    if not text.startswith("```"):
        return text
    text = text.removeprefix("```")
    for lang in ("json", "JSON"):
        text = text.removeprefix(lang)
    text = text.lstrip("\n")
    return text.rsplit("```", 1)[0].strip()


async def _generate(
    client: genai.Client,
    model: str,
    contents: list[Any],
    config: types.GenerateContentConfig | None,
) -> types.GenerateContentResponse:
    # The SDK call is blocking; keep the event loop free
    async with asyncio.timeout(settings.gemini_timeout_seconds):
        return await asyncio.to_thread(
            client.models.generate_content,
            model=model,
            contents=contents,
            config=config,
        )


def _api_error(exc: Exception, call: str) -> Err:
    error_type = type(exc).__name__
    error_msg = str(exc)
    logger.error("gemini_call_failed", call=call, error_type=error_type, error=error_msg[:300])
    return Err(f"{error_type}: {error_msg[:200]}", "api")


async def generate_image(
    instruction: str,
    reference: ImagePayload | None = None,
    *,
    client: genai.Client | None = None,
) -> Ok[ImagePayload] | Err:
    """Generate one image from an instruction and an optional reference image."""
    if client is None:
        client = get_client()
    contents: list[Any] = [image_part(reference), instruction] if reference else [instruction]

    try:
        response = await _generate(client, settings.gemini_image_model, contents, IMAGE_CONFIG)
    except TimeoutError:
        logger.error("gemini_call_timeout", call="generate_image")
        return Err(f"Gemini did not answer within {settings.gemini_timeout_seconds:.0f}s", "timeout")
    except Exception as exc:
        return _api_error(exc, "generate_image")

    image = extract_image(response)
    if image is None:
        text = extract_text(response)
        logger.warning("gemini_no_image_response", gemini_text=text[:300])
        return Err(text or "The AI did not return an image.", "no_image")
    return Ok(image)


async def generate_text(prompt: str, *, client: genai.Client | None = None) -> Ok[str] | Err:
    """Plain text completion."""
    if client is None:
        client = get_client()
    try:
        response = await _generate(client, settings.gemini_text_model, [prompt], None)
    except TimeoutError:
        logger.error("gemini_call_timeout", call="generate_text")
        return Err(f"Gemini did not answer within {settings.gemini_timeout_seconds:.0f}s", "timeout")
    except Exception as exc:
        return _api_error(exc, "generate_text")
    return Ok(extract_text(response))


async def generate_json(
    prompt: str,
    schema: dict[str, Any],
    *,
    client: genai.Client | None = None,
) -> Ok[Any] | Err:
    """Schema-constrained JSON completion, parsed but not shape-validated."""
    if client is None:
        client = get_client()
    config = types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=schema,
    )
    try:
        response = await _generate(client, settings.gemini_text_model, [prompt], config)
    except TimeoutError:
        logger.error("gemini_call_timeout", call="generate_json")
        return Err(f"Gemini did not answer within {settings.gemini_timeout_seconds:.0f}s", "timeout")
    except Exception as exc:
        return _api_error(exc, "generate_json")

    text = strip_code_fence(extract_text(response))
    try:
        return Ok(json.loads(text))
    except json.JSONDecodeError as exc:
        logger.warning("gemini_json_decode_failed", error=str(exc), text=text[:300])
        return Err("The AI response was not valid JSON.", "parse")
