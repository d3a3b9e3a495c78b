import logging
from fastapi import FastAPI
from .core.config import settings
from .routers.uploads import router as uploads_router, legacy_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

tags_metadata = [
    {
        "name": "uploads",
        "description": (
            "Endpoints that forward multipart uploads to object storage.\n\n"
            "- Profile image: one PNG/JPG/JPEG/GIF, max 2MB.\n"
            "- Gallery images: up to four images, max 2MB each.\n"
            "- Video: one mp4, max 200MB."
        ),
    }
]

app = FastAPI(
    title="Media Upload Service",
    description=(
        "How to Use:\n\n"
        "1) Profile image: POST /upload/profile-image with the file under `profileImage`.\n"
        "2) Gallery: POST /upload/gallery-images with up to four files under `galleryImage`.\n"
        "3) Video: POST /upload/video with an mp4 under `singleVideo`.\n\n"
        "Notes: Failures return `{error, code}`. Stored objects are public-read and the "
        "response carries their key and public location."
    ),
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.include_router(uploads_router)
app.include_router(legacy_router)


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}
