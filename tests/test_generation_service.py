from types import SimpleNamespace

import pytest

from modules import generation_service
from modules.config import AspectRatio
from modules.generation_service import GeminiGenerationService, GenerationError


def _image_response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def _image_part(data=b"png-bytes", mime="image/png"):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime), text=None)


def _text_part(text):
    return SimpleNamespace(inline_data=None, text=text)


def _operation(done=True, video=None, error=None):
    response = None
    if video is not None:
        response = SimpleNamespace(generated_videos=[SimpleNamespace(video=video)])
    return SimpleNamespace(done=done, error=error, response=response)


class FakeClient:
    def __init__(self, image_response=None, operations=()):
        self.image_response = image_response
        self.pending = list(operations)
        self.content_calls = []
        self.video_calls = []
        self.polls = 0
        self.models = SimpleNamespace(generate_content=self._generate_content, generate_videos=self._generate_videos)
        self.operations = SimpleNamespace(get=self._get)

    def _generate_content(self, **kwargs):
        self.content_calls.append(kwargs)
        return self.image_response

    def _generate_videos(self, **kwargs):
        self.video_calls.append(kwargs)
        return self.pending.pop(0)

    def _get(self, operation):
        self.polls += 1
        return self.pending.pop(0) if self.pending else operation


@pytest.fixture(autouse=True)
def _model_env(monkeypatch):
    for name in ("GEMINI_IMAGE_MODEL", "GEMINI_VIDEO_MODEL", "VIDEO_POLL_INTERVAL_SECONDS", "VIDEO_MAX_WAIT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


def test_compose_scene_sends_characters_back_to_front(make_character):
    client = FakeClient(image_response=_image_response(_text_part("here you go"), _image_part()))
    service = GeminiGenerationService(api_key="k", client=client)

    url = service.compose_scene([make_character("Back"), make_character("Front")], "a picnic")

    assert url == "data:image/png;base64,cG5nLWJ5dGVz"
    call = client.content_calls[0]
    assert call["model"] == "gemini-2.5-flash-image"
    contents = call["contents"]
    assert len(contents) == 3
    prompt = contents[-1]
    assert prompt.index("1. Back") < prompt.index("2. Front")
    assert "Scene: a picnic" in prompt


def test_compose_scene_requires_characters():
    service = GeminiGenerationService(api_key="k", client=FakeClient())
    with pytest.raises(GenerationError):
        service.compose_scene([], "empty")


def test_image_model_can_be_overridden(monkeypatch):
    monkeypatch.setenv("GEMINI_IMAGE_MODEL", "custom-image-model")
    client = FakeClient(image_response=_image_response(_image_part()))
    GeminiGenerationService(api_key="k", client=client).edit_image(b"img", "image/png", "make it blue")
    assert client.content_calls[0]["model"] == "custom-image-model"
    assert client.content_calls[0]["contents"][-1] == "make it blue"


def test_response_without_image_raises_with_model_text():
    client = FakeClient(image_response=_image_response(_text_part("I cannot draw that.")))
    service = GeminiGenerationService(api_key="k", client=client)
    with pytest.raises(GenerationError, match="I cannot draw that"):
        service.create_character("Nobody", "a refusal")


def test_missing_api_key_raises(monkeypatch, make_character):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_GENAI_API_KEY", raising=False)
    service = GeminiGenerationService()
    with pytest.raises(GenerationError, match="API key is not configured"):
        service.compose_scene([make_character("A")], "x")


def test_generate_video_polls_and_reports_progress():
    video = SimpleNamespace(video_bytes=b"mp4", uri=None, mime_type="video/mp4")
    client = FakeClient(operations=[_operation(done=False), _operation(done=False), _operation(video=video)])
    sleeps = []
    messages = []
    service = GeminiGenerationService(api_key="k", client=client, sleep=sleeps.append)

    url = service.generate_video(b"img", "image/png", "cat", AspectRatio.PORTRAIT, on_progress=messages.append)

    assert url == "data:video/mp4;base64,bXA0"
    assert client.polls == 2
    assert sleeps == [10, 10]
    assert messages[0] == "Starting video generation..."
    assert messages[-1] == "Downloading your video..."
    assert len(messages) == 4
    call = client.video_calls[0]
    assert call["model"] == "veo-2.0-generate-001"
    assert call["config"].aspect_ratio == "9:16"


def test_generate_video_downloads_from_uri(monkeypatch):
    video = SimpleNamespace(video_bytes=None, uri="https://example.com/v.mp4?alt=media", mime_type=None)
    client = FakeClient(operations=[_operation(video=video)])
    requested = {}

    def fake_get(url, params=None, timeout=None):
        requested.update(url=url, params=params)
        return SimpleNamespace(content=b"clip", raise_for_status=lambda: None)

    monkeypatch.setattr(generation_service.requests, "get", fake_get)
    url = GeminiGenerationService(api_key="secret", client=client).generate_video(
        b"img", "image/png", "cat", AspectRatio.LANDSCAPE
    )
    assert url == "data:video/mp4;base64,Y2xpcA=="
    assert requested["params"] == {"key": "secret"}


def test_generate_video_times_out(monkeypatch):
    monkeypatch.setenv("VIDEO_POLL_INTERVAL_SECONDS", "5")
    monkeypatch.setenv("VIDEO_MAX_WAIT_SECONDS", "10")
    client = FakeClient(operations=[_operation(done=False)])
    service = GeminiGenerationService(api_key="k", client=client, sleep=lambda s: None)
    with pytest.raises(GenerationError, match="timed out after 10s"):
        service.generate_video(b"img", "image/png", "cat", AspectRatio.LANDSCAPE)
    assert client.polls == 2


def test_generate_video_surfaces_operation_error():
    client = FakeClient(operations=[_operation(error={"message": "Requested entity was not found."})])
    service = GeminiGenerationService(api_key="k", client=client)
    with pytest.raises(GenerationError, match="Requested entity was not found"):
        service.generate_video(b"img", "image/png", "cat", AspectRatio.LANDSCAPE)


def test_generate_video_without_result_raises():
    client = FakeClient(operations=[_operation()])
    service = GeminiGenerationService(api_key="k", client=client)
    with pytest.raises(GenerationError, match="no video was returned"):
        service.generate_video(b"img", "image/png", "cat", AspectRatio.LANDSCAPE)
