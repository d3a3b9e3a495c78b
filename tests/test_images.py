import os, sys, importlib, boto3
from moto import mock_aws
from fastapi.testclient import TestClient
from PIL import Image
from io import BytesIO

REGION = "us-east-1"


def _png_bytes():
    img = Image.new("RGB", (2, 2), color=(1, 2, 3))
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@mock_aws
def test_legacy_profile_routes_upload_success():
    boto3.client("s3", region_name=REGION).create_bucket(Bucket="legacy-bucket")

    # Ensure project root on path
    ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if ROOT not in sys.path:
        sys.path.insert(0, ROOT)

    # Ensure runtime settings align with moto resources
    from upload_service.core.config import settings as runtime_settings
    saved = runtime_settings.model_dump()
    runtime_settings.aws_endpoint_url = None
    runtime_settings.aws_region = REGION
    runtime_settings.bucket_name = "legacy-bucket"
    runtime_settings.public_base_url = None
    runtime_settings.error_status_codes = False

    try:
        app_module = importlib.import_module("upload_service.main")
        client = TestClient(app_module.app)

        # Paths and field names the original web form posts
        data = _png_bytes()
        r = client.post(
            "/api/profile/profile-img-upload",
            files={"profileImage": ("me.png", data, "image/png")},
        )
        assert r.status_code == 200
        body = r.json()
        assert body["image"].startswith("me-") and body["image"].endswith(".png")
        assert body["location"].endswith(f"/profile_pictures/{body['image']}")

        files = [("galleryImage", (f"g{i}.png", data, "image/png")) for i in range(2)]
        r = client.post("/api/profile/multiple-file-upload", files=files)
        assert r.status_code == 200
        assert len(r.json()["locationArray"]) == 2

        r = client.post(
            "/api/profile/single-video-upload",
            files={"singleVideo": ("clip.mp4", b"ftyp", "video/mp4")},
        )
        assert r.status_code == 200
        assert r.json()["location"].endswith(f"/videos/{r.json()['video']}")

        # Legacy clients check `error` on a 200 response
        r = client.post("/api/profile/profile-img-upload")
        assert r.status_code == 200
        assert r.json()["error"] == "Error: No File Selected"

        listed = boto3.client("s3", region_name=REGION).list_objects_v2(Bucket="legacy-bucket")
        assert listed["KeyCount"] == 4
    finally:
        for name, value in saved.items():
            setattr(runtime_settings, name, value)
