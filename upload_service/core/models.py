from typing import Optional, List
from pydantic import BaseModel

class StoredFile(BaseModel):
    """An object written to the bucket, as reported back to the client."""
    fieldname: str
    originalname: str
    mimetype: str
    size: int
    bucket: str
    key: str
    object_key: str
    acl: Optional[str] = None
    etag: Optional[str] = None
    location: str

class SingleImageResponse(BaseModel):
    image: str
    location: str

class SingleVideoResponse(BaseModel):
    video: str
    location: str

class MultipleUploadResponse(BaseModel):
    filesArray: List[StoredFile]
    locationArray: List[str]

class ErrorResponse(BaseModel):
    error: str
    code: str
