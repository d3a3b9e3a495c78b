import asyncio
import logging
from typing import Any, Dict, List, Tuple
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from ..aws import storage
from ..core.config import settings
from ..core.errors import (
    FileTooLarge,
    MalformedUpload,
    NoFileSelected,
    UnexpectedFileField,
    UploadError,
)
from ..core.models import (
    ErrorResponse,
    MultipleUploadResponse,
    SingleImageResponse,
    SingleVideoResponse,
    StoredFile,
)
from ..core.policy import GALLERY_IMAGES, PROFILE_IMAGE, SINGLE_VIDEO, UploadPolicy, check_file_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["uploads"])

# Paths the original web form posts to
legacy_router = APIRouter(prefix="/api/profile", tags=["uploads"], include_in_schema=False)

READ_CHUNK_SIZE = 64 * 1024
# File parts the parser accepts beyond max_count (empty file inputs, stray fields)
FORM_FILE_SLACK = 8

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "No file, wrong field/count, or unsupported type"},
    413: {"model": ErrorResponse, "description": "File exceeds the size cap"},
    502: {"model": ErrorResponse, "description": "Object storage rejected the write"},
}


def _multipart_body(field_name: str, multiple: bool) -> Dict[str, Any]:
    # Handlers parse the form themselves, so document the body by hand.
    file_schema: Dict[str, Any] = {"type": "string", "format": "binary"}
    if multiple:
        file_schema = {"type": "array", "items": file_schema}
    return {
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": {field_name: file_schema},
                        "required": [field_name],
                    }
                }
            },
        }
    }


def _check_content_length(request: Request, policy: UploadPolicy) -> None:
    """Reject bodies that cannot fit the policy before parsing them."""
    raw = request.headers.get("content-length")
    if not raw:
        return
    try:
        length = int(raw)
    except ValueError:
        return
    if length > policy.max_bytes * policy.max_count + settings.multipart_overhead_bytes:
        raise FileTooLarge(policy.too_large_message())


async def _parse_form(request: Request, policy: UploadPolicy) -> FormData:
    """Parse the multipart body, mapping parser failures onto upload errors.

    The parser stops counting file parts a little past `max_count` so a
    flood of parts is still reported as too many files.
    """
    try:
        return await request.form(max_files=policy.max_count + FORM_FILE_SLACK)
    except (HTTPException, MultiPartException) as e:
        message = getattr(e, "detail", None) or getattr(e, "message", None) or str(e)
        if str(message).startswith("Too many files"):
            raise UnexpectedFileField(policy.too_many_message()) from e
        raise MalformedUpload(str(message)) from e


def _collect_files(form: FormData, policy: UploadPolicy) -> List[UploadFile]:
    files: List[UploadFile] = []
    for field, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        # An untouched <input type="file"> still sends a part with no filename
        if not value.filename:
            continue
        if field != policy.field_name:
            raise UnexpectedFileField(f"Unexpected file field: {field}")
        files.append(value)
    if len(files) > policy.max_count:
        raise UnexpectedFileField(policy.too_many_message())
    if not files:
        raise NoFileSelected()
    return files


async def _read_capped(upload: UploadFile, policy: UploadPolicy) -> bytes:
    size = getattr(upload, "size", None)
    if size is not None and size > policy.max_bytes:
        raise FileTooLarge(policy.too_large_message())

    chunks: List[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > policy.max_bytes:
            raise FileTooLarge(policy.too_large_message())
        chunks.append(chunk)
    return b"".join(chunks)


async def _accept(request: Request, policy: UploadPolicy) -> List[StoredFile]:
    """Validate every file in the request, then store them in order.

    Nothing is written unless the whole request passes: count, then size
    and type for each file.
    """
    _check_content_length(request, policy)
    form = await _parse_form(request, policy)

    accepted: List[Tuple[UploadFile, bytes]] = []
    try:
        for upload in _collect_files(form, policy):
            data = await _read_capped(upload, policy)
            check_file_type(upload.filename, upload.content_type, policy)
            accepted.append((upload, data))
    finally:
        # Release spooled temp files before the storage round trips
        await form.close()

    stored: List[StoredFile] = []
    for upload, data in accepted:
        stored.append(
            await asyncio.to_thread(
                storage.put_object,
                data_bytes=data,
                filename=upload.filename,
                content_type=upload.content_type or "application/octet-stream",
                field_name=policy.field_name,
                bucket_prefix=policy.bucket_prefix,
            )
        )
    return stored


async def upload_single(request: Request, policy: UploadPolicy) -> StoredFile:
    return (await _accept(request, policy))[0]


async def upload_multiple(request: Request, policy: UploadPolicy) -> List[StoredFile]:
    return await _accept(request, policy)


def _error_response(exc: UploadError) -> JSONResponse:
    status_code = exc.status_code if settings.error_status_codes else 200
    body = ErrorResponse(error=exc.message, code=exc.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def _handle(request: Request, policy: UploadPolicy, multiple: bool = False):
    try:
        if multiple:
            files = await upload_multiple(request, policy)
            return MultipleUploadResponse(
                filesArray=files,
                locationArray=[f.location for f in files],
            )
        stored = await upload_single(request, policy)
        return {policy.response_field: stored.key, "location": stored.location}
    except UploadError as e:
        logger.warning("%s upload rejected: %s (%s)", policy.name, e.message, e.code)
        return _error_response(e)
    except Exception as e:
        logger.exception("%s upload failed", policy.name)
        return _error_response(UploadError(f"upload_failed {e}"))


@router.post(
    "/profile-image",
    response_model=SingleImageResponse,
    responses=_ERROR_RESPONSES,
    summary="Upload a profile image",
    description=(
        "Attach one PNG/JPG/JPEG/GIF file under the `profileImage` field.\n\n"
        "Max size 2MB. Returns the stored key and its public location."
    ),
    openapi_extra=_multipart_body(PROFILE_IMAGE.field_name, multiple=False),
)
async def upload_profile_image(request: Request):
    return await _handle(request, PROFILE_IMAGE)


@router.post(
    "/gallery-images",
    response_model=MultipleUploadResponse,
    responses=_ERROR_RESPONSES,
    summary="Upload gallery images",
    description=(
        "Attach up to four PNG/JPG/JPEG/GIF files under the `galleryImage` field.\n\n"
        "Max size 2MB each. Any invalid file fails the whole request and nothing is stored."
    ),
    openapi_extra=_multipart_body(GALLERY_IMAGES.field_name, multiple=True),
)
async def upload_gallery_images(request: Request):
    return await _handle(request, GALLERY_IMAGES, multiple=True)


@router.post(
    "/video",
    response_model=SingleVideoResponse,
    responses=_ERROR_RESPONSES,
    summary="Upload a video",
    description="Attach one mp4 file under the `singleVideo` field. Max size 200MB.",
    openapi_extra=_multipart_body(SINGLE_VIDEO.field_name, multiple=False),
)
async def upload_video(request: Request):
    return await _handle(request, SINGLE_VIDEO)


legacy_router.add_api_route(
    "/profile-img-upload", upload_profile_image, methods=["POST"], response_model=SingleImageResponse
)
legacy_router.add_api_route(
    "/multiple-file-upload", upload_gallery_images, methods=["POST"], response_model=MultipleUploadResponse
)
legacy_router.add_api_route(
    "/single-video-upload", upload_video, methods=["POST"], response_model=SingleVideoResponse
)
