"""Unit tests for input image encoding."""

import io

import pytest
from PIL import Image

from filterstudio.generation.images import encode_png


def test_jpeg_reencoded_as_png(jpeg_bytes):
    encoded = encode_png(jpeg_bytes)

    with Image.open(io.BytesIO(encoded)) as img:
        assert img.format == "PNG"
        assert img.size == (32, 32)


def test_cmyk_converted():
    buffer = io.BytesIO()
    Image.new("CMYK", (8, 8)).save(buffer, format="JPEG")

    with Image.open(io.BytesIO(encode_png(buffer.getvalue()))) as img:
        assert img.mode == "RGBA"


def test_unreadable_bytes():
    with pytest.raises(ValueError, match="Unreadable input image"):
        encode_png(b"definitely not an image")
