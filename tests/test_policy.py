import os, sys

import pytest

# Ensure project root on path for `import upload_service...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from upload_service.core.errors import InvalidFileType
from upload_service.core.policy import (
    GALLERY_IMAGES,
    PROFILE_IMAGE,
    SINGLE_VIDEO,
    check_file_type,
    file_extension,
    format_size,
    is_allowed_type,
)


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("avatar.png", "image/png"),
        ("avatar.jpg", "image/jpeg"),
        ("avatar.jpeg", "image/jpeg"),
        ("avatar.gif", "image/gif"),
        ("AVATAR.PNG", "image/png"),
        ("holiday.photo.Jpg", "image/jpeg"),
        ("avatar.png", "image/png; charset=binary"),
    ],
)
def test_image_policy_accepts_allowed_types_success(filename, content_type):
    assert is_allowed_type(filename, content_type, PROFILE_IMAGE)
    check_file_type(filename, content_type, PROFILE_IMAGE)


@pytest.mark.parametrize(
    "filename,content_type",
    [
        ("notes.txt", "text/plain"),
        ("avatar.png", "text/plain"),
        ("avatar.txt", "image/png"),
        ("IMG", "image/png"),
        ("avatar.png", None),
        ("avatar.pngx", "image/png"),
        ("avatar.bmp", "image/bmp"),
        ("avatar.png", "image/svg+xml"),
    ],
)
def test_image_policy_rejects_failure(filename, content_type):
    assert not is_allowed_type(filename, content_type, GALLERY_IMAGES)
    with pytest.raises(InvalidFileType) as exc:
        check_file_type(filename, content_type, GALLERY_IMAGES)
    assert exc.value.message == "Error: Images Only!"
    assert exc.value.code == "INVALID_TYPE"


def test_video_policy_only_mp4_success():
    check_file_type("clip.MP4", "video/mp4", SINGLE_VIDEO)
    with pytest.raises(InvalidFileType) as exc:
        check_file_type("movie.mov", "video/quicktime", SINGLE_VIDEO)
    assert exc.value.message == "Error: A single mp4 video Only!"
    # An image is not a video even with a matching extension
    assert not is_allowed_type("clip.mp4", "image/png", SINGLE_VIDEO)


def test_file_extension_uses_basename_success():
    assert file_extension("dir/sub/Photo.JPEG") == "jpeg"
    assert file_extension("C:\\Users\\me\\pic.Png") == "png"
    assert file_extension("IMG") == ""
    assert file_extension(".bashrc") == ""


def test_policy_messages_success():
    assert PROFILE_IMAGE.too_large_message() == "Max size: 2MB"
    assert SINGLE_VIDEO.too_large_message() == "Max size: 200MB"
    assert GALLERY_IMAGES.too_many_message() == "Max 4 images allowed"
    assert PROFILE_IMAGE.too_many_message() == "Max 1 image allowed"
    assert format_size(1500) == "1.5KB"
    assert format_size(10) == "10 bytes"


def test_policies_are_frozen_failure():
    with pytest.raises(Exception):
        PROFILE_IMAGE.max_bytes = 1
    smaller = PROFILE_IMAGE.model_copy(update={"max_bytes": 10})
    assert smaller.max_bytes == 10
    assert PROFILE_IMAGE.max_bytes == 2_000_000
