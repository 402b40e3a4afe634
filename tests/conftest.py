import io

import pytest
from PIL import Image

from modules.config import Character


class FakeService:
    """Records calls and returns canned URLs, or raises `error` when set."""

    def __init__(self, error=None, progress=()):
        self.error = error
        self.progress = list(progress)
        self.calls = []

    def _finish(self, name, url):
        if self.error is not None:
            raise self.error
        return url

    def compose_scene(self, characters, prompt):
        self.calls.append(("compose_scene", [c.id for c in characters], prompt))
        return self._finish("compose_scene", "data:image/png;base64,c2NlbmU=")

    def edit_image(self, image_bytes, mime_type, prompt):
        self.calls.append(("edit_image", image_bytes, prompt))
        return self._finish("edit_image", "data:image/png;base64,ZWRpdA==")

    def generate_video(self, image_bytes, mime_type, prompt, aspect_ratio, on_progress=None):
        self.calls.append(("generate_video", image_bytes, prompt, aspect_ratio))
        for msg in self.progress:
            on_progress(msg)
        return self._finish("generate_video", "data:video/mp4;base64,dmlkZW8=")


@pytest.fixture
def make_character():
    def _make(name, char_id=None):
        return Character(
            id=char_id or name.lower(),
            name=name,
            image_url="data:image/png;base64,aW1n",
            prompt=f"{name} in a cape",
        )
    return _make


@pytest.fixture
def make_upload():
    """Fresh in-memory PNG, shaped like a Streamlit upload."""
    def _make(size=(8, 8), mode="RGB"):
        buf = io.BytesIO()
        Image.new(mode, size).save(buf, format="PNG")
        buf.seek(0)
        return buf
    return _make

@pytest.fixture
def fake_service():
    return FakeService()


@pytest.fixture
def service_factory():
    return FakeService
