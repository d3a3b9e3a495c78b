import os
from pydantic import BaseModel
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """for reading environment-driven configuration.

    Values have sensible defaults for LocalStack-based development.
    """
    aws_access_key_id: str = os.getenv("AWS_ACCESS_KEY_ID", "test")
    aws_secret_access_key: str = os.getenv("AWS_SECRET_ACCESS_KEY", "test")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    aws_endpoint_url: Optional[str] = os.getenv("AWS_ENDPOINT_URL")
    bucket_name: str = os.getenv("BUCKET_NAME", "proudsmarts3bucket")
    # Canned ACL applied to every stored object; empty string sends none
    object_acl: str = os.getenv("OBJECT_ACL", "public-read")
    public_base_url: Optional[str] = os.getenv("PUBLIC_BASE_URL")
    # When false every response is 200 and callers inspect `error`
    error_status_codes: bool = _env_flag("ERROR_STATUS_CODES", "true")
    multipart_overhead_bytes: int = int(os.getenv("MULTIPART_OVERHEAD_BYTES", "65536"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
