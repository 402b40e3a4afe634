import io
import logging

import pytest
from PIL import Image

from modules.utils import get_logger, load_image_bytes, parse_data_url, to_data_url


def test_load_image_bytes_converts_to_png():
    buf = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 0, 0, 128)).save(buf, format="PNG")
    buf.seek(0)
    data, mime = load_image_bytes(buf)
    assert mime == "image/png"
    assert data.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(data)).mode == "RGB"


def test_load_image_bytes_keeps_alpha_for_cutouts():
    buf = io.BytesIO()
    Image.new("RGBA", (4, 4), (255, 0, 0, 0)).save(buf, format="PNG")
    buf.seek(0)
    data, _ = load_image_bytes(buf, keep_alpha=True)
    image = Image.open(io.BytesIO(data))
    assert image.mode == "RGBA"
    assert image.getpixel((0, 0))[3] == 0


def test_load_image_bytes_rejects_corrupt_upload():
    with pytest.raises(ValueError, match="not a readable image"):
        load_image_bytes(io.BytesIO(b"not an image"))


def test_data_url_helpers():
    url = to_data_url(b"hello", "video/mp4")
    assert url == "data:video/mp4;base64,aGVsbG8="
    assert parse_data_url(url) == (b"hello", "video/mp4")


def test_parse_data_url_rejects_plain_urls():
    with pytest.raises(ValueError):
        parse_data_url("https://example.com/cat.png")


def test_get_logger_does_not_stack_handlers():
    first = get_logger("one")
    get_logger("two")
    assert first.name == "character_studio.one"
    assert len(logging.getLogger("character_studio").handlers) == 1
