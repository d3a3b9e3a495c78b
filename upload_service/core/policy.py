import os
import re
from typing import FrozenSet, Optional
from pydantic import BaseModel, ConfigDict
from .errors import InvalidFileType

"""Per-endpoint upload policies and the file type check they share.
"""


class UploadPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    # multipart field the files must be attached under
    field_name: str
    # JSON key holding the stored key in a single-file response
    response_field: str
    allowed_extensions: FrozenSet[str]
    allowed_mime_pattern: re.Pattern
    max_bytes: int
    max_count: int = 1
    bucket_prefix: str
    invalid_type_message: str
    media_label: str

    def too_large_message(self) -> str:
        return f"Max size: {format_size(self.max_bytes)}"

    def too_many_message(self) -> str:
        label = self.media_label if self.max_count == 1 else f"{self.media_label}s"
        return f"Max {self.max_count} {label} allowed"


IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif"})
IMAGE_MIME_PATTERN = re.compile(r"image/(png|jpe?g|gif)")

PROFILE_IMAGE = UploadPolicy(
    name="profile-image",
    field_name="profileImage",
    response_field="image",
    allowed_extensions=IMAGE_EXTENSIONS,
    allowed_mime_pattern=IMAGE_MIME_PATTERN,
    max_bytes=2_000_000,
    bucket_prefix="profile_pictures",
    invalid_type_message="Error: Images Only!",
    media_label="image",
)

GALLERY_IMAGES = UploadPolicy(
    name="gallery-images",
    field_name="galleryImage",
    response_field="image",
    allowed_extensions=IMAGE_EXTENSIONS,
    allowed_mime_pattern=IMAGE_MIME_PATTERN,
    max_bytes=2_000_000,
    max_count=4,
    bucket_prefix="documents",
    invalid_type_message="Error: Images Only!",
    media_label="image",
)

SINGLE_VIDEO = UploadPolicy(
    name="single-video",
    field_name="singleVideo",
    response_field="video",
    allowed_extensions=frozenset({"mp4"}),
    allowed_mime_pattern=re.compile(r"video/mp4"),
    max_bytes=200_000_000,
    bucket_prefix="videos",
    invalid_type_message="Error: A single mp4 video Only!",
    media_label="video",
)


def format_size(num_bytes: int) -> str:
    """Render a byte cap the way the web client shows it (2000000 -> "2MB")."""
    if num_bytes >= 1_000_000:
        return f"{num_bytes / 1_000_000:g}MB"
    if num_bytes >= 1_000:
        return f"{num_bytes / 1_000:g}KB"
    return f"{num_bytes} bytes"


def file_extension(filename: str) -> str:
    """Lower-cased extension of the basename, without the dot ("" if none)."""
    base = os.path.basename(filename.replace("\\", "/"))
    return os.path.splitext(base)[1].lstrip(".").lower()


def _normalize_mime(content_type: Optional[str]) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_allowed_type(filename: str, content_type: Optional[str], policy: UploadPolicy) -> bool:
    ext_ok = file_extension(filename or "") in policy.allowed_extensions
    mime_ok = policy.allowed_mime_pattern.fullmatch(_normalize_mime(content_type)) is not None
    return ext_ok and mime_ok


def check_file_type(filename: str, content_type: Optional[str], policy: UploadPolicy) -> None:
    """Raise `InvalidFileType` unless both extension and MIME type are allowed.

    There is no partial credit: a good extension with a wrong MIME type (or
    the reverse) is rejected with the same message.
    """
    if not is_allowed_type(filename, content_type, policy):
        raise InvalidFileType(policy.invalid_type_message)
