"""Shared fixtures for exifreader tests."""

import io

import pytest
from PIL import Image

MAKE = 0x010F
MODEL = 0x0110
SOFTWARE = 0x0131
DATE_TIME = 0x0132


def make_jpeg(size=(64, 48), tags=None) -> bytes:
    """Return JPEG bytes of a solid image with the given IFD0 tags."""
    img = Image.new("RGB", size, color=(120, 160, 200))
    buffer = io.BytesIO()
    if tags:
        exif = Image.Exif()
        for tag_id, value in tags.items():
            exif[tag_id] = value
        img.save(buffer, "JPEG", exif=exif)
    else:
        img.save(buffer, "JPEG")
    return buffer.getvalue()


@pytest.fixture
def camera_jpeg() -> bytes:
    """JPEG carrying camera and timestamp tags."""
    return make_jpeg(
        size=(80, 60),
        tags={
            MAKE: "Canon",
            MODEL: "Canon EOS R5",
            SOFTWARE: "Firmware 1.8.1",
            DATE_TIME: "2021:01:01 00:00:00",
        },
    )


@pytest.fixture
def plain_jpeg() -> bytes:
    """JPEG without any EXIF data."""
    return make_jpeg()


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point home and working directory at an empty temp dir."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def jpeg_factory():
    """Factory building JPEG bytes, see make_jpeg()."""
    return make_jpeg
