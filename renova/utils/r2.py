"""Cloudflare R2 (S3-compatible) storage for saved project images.

Optional. When R2 is configured, data-URL images saved into a project are
uploaded and the row stores the object key:
    projects/{project_id}/original.png
    projects/{project_id}/generations/{generation_id}.png
Listings turn keys back into presigned GET URLs. Without R2 the data URL is
stored verbatim and passed through untouched.
"""

from __future__ import annotations

from typing import Any

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import ClientError

from renova.config import settings
from renova.utils.image import from_data_url, is_data_url

logger = structlog.get_logger()

_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp"}


def r2_configured() -> bool:
    return bool(
        settings.r2_account_id
        and settings.r2_access_key_id
        and settings.r2_secret_access_key
        and settings.r2_bucket_name
    )


def _build_client() -> Any:
    return boto3.client(
        "s3",
        endpoint_url=f"https://{settings.r2_account_id}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.r2_access_key_id,
        aws_secret_access_key=settings.r2_secret_access_key,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


_client: Any = None


def _get_client() -> Any:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = _build_client()
    return _client


def reset_client() -> None:
    """Reset the singleton client (for testing)."""
    global _client  # noqa: PLW0603
    _client = None


def upload_object(key: str, data: bytes, content_type: str = "image/png") -> str:
    client = _get_client()
    client.put_object(
        Bucket=settings.r2_bucket_name,
        Key=key,
        Body=data,
        ContentType=content_type,
    )
    logger.info("r2_upload", key=key, size=len(data), content_type=content_type)
    return key


def store_image(key_stem: str, image_ref: str) -> str:
    """Upload a data-URL image under `key_stem` and return the object key.

    Anything that is not a data URL (an existing key or http URL) is
    returned unchanged.
    """
    if not is_data_url(image_ref):
        return image_ref
    payload = from_data_url(image_ref)
    ext = _EXTENSIONS.get(payload.mime_type, "png")
    return upload_object(f"{key_stem}.{ext}", payload.data, payload.mime_type)


def generate_presigned_url(key: str) -> str:
    """Presigned GET URL, valid for `settings.presigned_url_expiry_seconds`."""
    client = _get_client()
    try:
        url: str = client.generate_presigned_url(
            "get_object",
            Params={"Bucket": settings.r2_bucket_name, "Key": key},
            ExpiresIn=settings.presigned_url_expiry_seconds,
        )
    except ClientError as e:
        logger.error("r2_presign_failed", key=key, error=str(e))
        raise
    return url


def resolve_url(key_or_url: str) -> str:
    """Turn a storage key into a presigned URL; data and http URLs pass through."""
    if key_or_url.startswith(("http://", "https://")) or is_data_url(key_or_url):
        return key_or_url
    return generate_presigned_url(key_or_url)


def delete_object(key: str) -> None:
    client = _get_client()
    client.delete_object(Bucket=settings.r2_bucket_name, Key=key)
    logger.info("r2_delete", key=key)


def delete_prefix(prefix: str) -> None:
    """Delete every object under a prefix, e.g. 'projects/{id}/'."""
    client = _get_client()
    paginator = client.get_paginator("list_objects_v2")
    deleted_count = 0
    for page in paginator.paginate(Bucket=settings.r2_bucket_name, Prefix=prefix):
        objects = page.get("Contents", [])
        if not objects:
            continue
        delete_keys = [{"Key": obj["Key"]} for obj in objects]
        response = client.delete_objects(
            Bucket=settings.r2_bucket_name,
            Delete={"Objects": delete_keys},
        )
        errors = response.get("Errors", [])
        if errors:
            logger.warning("r2_delete_partial_failure", prefix=prefix, errors=errors)
        deleted_count += len(delete_keys) - len(errors)
    logger.info("r2_delete_prefix", prefix=prefix, deleted_count=deleted_count)
