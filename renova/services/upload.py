"""Upload normalization: raster images pass through, PDFs are rasterized.

Only the first page of a PDF is used (multi-page plans are not supported).
"""

from __future__ import annotations

import asyncio
import io
import re
from dataclasses import dataclass

import pypdfium2 as pdfium
import structlog
from PIL import Image

from renova.config import settings
from renova.utils.image import ImagePayload, guess_mime_type, open_image, to_data_url

logger = structlog.get_logger()

PDF_RENDER_SCALE = 2.0
PDF_MIME_TYPE = "application/pdf"
_PDF_MAGIC = b"%PDF-"


class UploadError(ValueError):
    """The upload could not be turned into an image."""


@dataclass(frozen=True)
class NormalizedUpload:
    image: ImagePayload
    filename: str
    preview: str
    is_pdf: bool


def is_pdf(filename: str, content_type: str | None, data: bytes) -> bool:
    return (
        content_type == PDF_MIME_TYPE
        or filename.lower().endswith(".pdf")
        or data.startswith(_PDF_MAGIC)
    )


def rasterize_first_page(data: bytes, scale: float = PDF_RENDER_SCALE) -> bytes:
    """Render page 1 of a PDF to PNG bytes."""
    try:
        pdf = pdfium.PdfDocument(data)
    except pdfium.PdfiumError as exc:
        raise UploadError(
            "Could not process the PDF file. It may be corrupted or in an unsupported format."
        ) from exc

    try:
        if len(pdf) == 0:
            raise UploadError("The PDF file has no pages.")
        page = pdf[0]
        try:
            bitmap = page.render(scale=scale)
            rendered = bitmap.to_pil()
        except pdfium.PdfiumError as exc:
            raise UploadError("Could not render the first page of the PDF.") from exc
        finally:
            page.close()
    finally:
        pdf.close()

    buf = io.BytesIO()
    try:
        rendered.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise UploadError("Could not convert the rendered PDF page to PNG.") from exc
    return buf.getvalue()


def _png_name(filename: str) -> str:
    if re.search(r"\.pdf$", filename, flags=re.IGNORECASE):
        return re.sub(r"\.pdf$", ".png", filename, flags=re.IGNORECASE)
    return f"{filename or 'plan'}.png"


async def normalize_upload(
    filename: str,
    content_type: str | None,
    data: bytes,
) -> NormalizedUpload:
    """Turn an uploaded file into a single image plus a preview reference."""
    if not data:
        raise UploadError("Could not read the file: it is empty.")
    if len(data) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise UploadError(f"File is too large. Maximum size is {limit_mb} MB.")

    if is_pdf(filename, content_type, data):
        png = await asyncio.to_thread(rasterize_first_page, data)
        payload = ImagePayload(data=png, mime_type="image/png")
        logger.info("pdf_rasterized", filename=filename, png_bytes=len(png))
        return NormalizedUpload(
            image=payload,
            filename=_png_name(filename),
            preview=payload.to_data_url(),
            is_pdf=True,
        )

    try:
        img = open_image(data)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("upload_image_open_failed", filename=filename, error=str(exc))
        raise UploadError("Could not open the image. Please upload a valid JPEG or PNG.") from exc

    # The decoded format wins over whatever the browser claimed
    declared = content_type if content_type and content_type.startswith("image/") else "image/png"
    mime_type = guess_mime_type(img, fallback=declared)
    return NormalizedUpload(
        image=ImagePayload(data=data, mime_type=mime_type),
        filename=filename,
        preview=to_data_url(data, mime_type),
        is_pdf=False,
    )
