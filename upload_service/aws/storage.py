import logging
import os
import time
from typing import Any, Dict, Optional
from urllib.parse import quote
from botocore.exceptions import BotoCoreError, ClientError
from ..core.config import settings
from ..core.errors import StorageBackendError
from ..core.models import StoredFile
from .clients import s3 as s3_client_factory

"""Storage helpers for naming uploaded objects and putting them in the bucket.
"""

logger = logging.getLogger(__name__)


def build_key(original_filename: str) -> str:
    """Derive the object key from the uploaded filename.

    `avatar.png` becomes `avatar-1700000000000.png`. The millisecond
    timestamp keeps repeated uploads of the same name apart; two uploads of
    the same name inside one millisecond still share a key.
    """
    base = os.path.basename((original_filename or "").replace("\\", "/"))
    stem, ext = os.path.splitext(base)
    return f"{stem}-{int(time.time() * 1000)}{ext}"


def object_key_for(bucket_prefix: str, key: str) -> str:
    prefix = (bucket_prefix or "").strip("/")
    return f"{prefix}/{key}" if prefix else key


def public_location(object_key: str, bucket: Optional[str] = None) -> str:
    """URL the stored object resolves at once it is public-read."""
    bucket = bucket or settings.bucket_name
    path = quote(object_key)
    if settings.public_base_url:
        return f"{settings.public_base_url.rstrip('/')}/{path}"
    if settings.aws_endpoint_url:
        # LocalStack and other S3-compatible endpoints use path-style URLs
        return f"{settings.aws_endpoint_url.rstrip('/')}/{bucket}/{path}"
    if settings.aws_region == "us-east-1":
        return f"https://{bucket}.s3.amazonaws.com/{path}"
    return f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{path}"


def put_object(
    *,
    data_bytes: bytes,
    filename: str,
    content_type: str,
    field_name: str,
    bucket_prefix: str,
    key: Optional[str] = None,
    acl: Optional[str] = None,
) -> StoredFile:
    """Write one upload to `<bucket>/<bucket_prefix>/<key>`.

    Client and transport errors surface as `StorageBackendError` with the
    client's own message; nothing is retried.
    """
    key = key or build_key(filename)
    object_key = object_key_for(bucket_prefix, key)
    acl = settings.object_acl if acl is None else acl

    params: Dict[str, Any] = {
        "Bucket": settings.bucket_name,
        "Key": object_key,
        "Body": data_bytes,
        "ContentType": content_type,
    }
    if acl:
        params["ACL"] = acl

    try:
        resp = s3_client_factory().put_object(**params)
    except (BotoCoreError, ClientError) as e:
        logger.exception("put_object failed for %s", object_key)
        raise StorageBackendError(str(e)) from e

    location = public_location(object_key)
    logger.info("stored %s (%d bytes) at %s", object_key, len(data_bytes), location)
    return StoredFile(
        fieldname=field_name,
        originalname=filename,
        mimetype=content_type,
        size=len(data_bytes),
        bucket=settings.bucket_name,
        key=key,
        object_key=object_key,
        acl=acl or None,
        etag=resp.get("ETag"),
        location=location,
    )
