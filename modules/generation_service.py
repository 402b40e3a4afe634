"""
Generation Service - Gemini image composition/editing and Veo video generation.

Every operation returns a displayable data URL or raises GenerationError.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

import requests
from google.genai import types as genai_types

from .config import (
    AspectRatio,
    Character,
    CHARACTER_PROMPT_TEMPLATE,
    SCENE_PROMPT_TEMPLATE,
    VIDEO_PROGRESS_MESSAGES,
)
from .gemini_client import (
    get_api_key,
    get_genai_client,
    get_image_model_name,
    get_video_max_wait,
    get_video_model_name,
    get_video_poll_interval,
)
from .utils import get_logger, parse_data_url, to_data_url

logger = get_logger("generation_service")

ProgressCallback = Callable[[str], None]


class GenerationError(Exception):
    """The generation service could not produce media."""


class GeminiGenerationService:
    """
    Thin wrapper over the google-genai client.

    Args:
        api_key: key chosen in the UI; falls back to the environment
        client: pre-built client (tests inject a fake here)
        sleep: used between video polls
    """

    def __init__(self, api_key: Optional[str] = None, client=None, sleep: Callable[[float], None] = time.sleep):
        self.api_key = get_api_key(api_key)
        self._client = client
        self._sleep = sleep

    @property
    def client(self):
        if self._client is None:
            self._client = get_genai_client(self.api_key)
        if self._client is None:
            raise GenerationError(
                "Gemini API key is not configured. Set GEMINI_API_KEY or select a key in the sidebar."
            )
        return self._client

    # ---------- Images ----------
    def create_character(self, name: str, prompt: str) -> str:
        """Render a character portrait for the library."""
        text = CHARACTER_PROMPT_TEMPLATE.format(name=name.strip(), prompt=prompt.strip())
        return self._generate_image([text])

    def compose_scene(self, characters: Sequence[Character], prompt: str) -> str:
        """
        Compose one scene image from reference characters.

        `characters` must be in layer order (back to front); the prompt lists
        them in the same order so the model can respect the stacking.
        """
        if not characters:
            raise GenerationError("At least one character is required to build a scene.")
        contents: List = []
        layers = []
        for position, character in enumerate(characters, start=1):
            data, mime = self._character_image(character)
            contents.append(genai_types.Part.from_bytes(data=data, mime_type=mime))
            description = f" ({character.prompt.strip()})" if character.prompt.strip() else ""
            layers.append(f"{position}. {character.name}{description}")
        contents.append(SCENE_PROMPT_TEMPLATE.format(layers="\n".join(layers), prompt=prompt.strip()))
        logger.info(f"Composing scene with {len(characters)} character(s)")
        return self._generate_image(contents)

    def edit_image(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        image_part = genai_types.Part.from_bytes(data=image_bytes, mime_type=mime_type)
        logger.info(f"Editing image ({len(image_bytes)} bytes)")
        return self._generate_image([image_part, prompt.strip()])

    def _character_image(self, character: Character):
        url = character.image_url
        if url.startswith("data:"):
            return parse_data_url(url)
        try:
            resp = requests.get(url, timeout=30)
            resp.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise GenerationError(f"Could not load the image for {character.name}: {exc}") from exc
        mime = resp.headers.get("content-type", "image/png").split(";")[0]
        return resp.content, mime

    def _generate_image(self, contents: List) -> str:
        response = self.client.models.generate_content(
            model=get_image_model_name(),
            contents=contents,
            config=genai_types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
            ),
        )
        return _extract_image_url(response)

    # ---------- Video ----------
    def generate_video(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Animate a starting image with Veo and return the clip as a data URL.

        `on_progress` receives status text while the long-running operation
        is polled.
        """
        def progress(msg: str) -> None:
            if on_progress:
                on_progress(msg)

        client = self.client
        progress("Starting video generation...")
        operation = client.models.generate_videos(
            model=get_video_model_name(),
            prompt=prompt.strip(),
            image=genai_types.Image(image_bytes=image_bytes, mime_type=mime_type),
            config=genai_types.GenerateVideosConfig(
                aspect_ratio=AspectRatio(aspect_ratio).value,
                number_of_videos=1,
            ),
        )

        interval = get_video_poll_interval()
        max_wait = get_video_max_wait()
        elapsed = 0.0
        tick = 0
        while not operation.done:
            if elapsed >= max_wait:
                raise GenerationError(f"Video generation timed out after {int(max_wait)}s.")
            progress(VIDEO_PROGRESS_MESSAGES[tick % len(VIDEO_PROGRESS_MESSAGES)])
            tick += 1
            self._sleep(interval)
            elapsed += interval
            operation = client.operations.get(operation)

        error = getattr(operation, "error", None)
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise GenerationError(message or "Video generation failed.")

        response = getattr(operation, "response", None)
        videos = getattr(response, "generated_videos", None) if response else None
        if not videos or videos[0].video is None:
            raise GenerationError("Video generation finished but no video was returned.")

        video = videos[0].video
        progress("Downloading your video...")
        data = video.video_bytes or self._download_video(video.uri)
        logger.info(f"Video ready ({len(data)} bytes) after {int(elapsed)}s")
        return to_data_url(data, video.mime_type or "video/mp4")

    def _download_video(self, uri: Optional[str]) -> bytes:
        if not uri:
            raise GenerationError("Video generation finished but no download link was returned.")
        try:
            resp = requests.get(uri, params={"key": self.api_key}, timeout=120)
            resp.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise GenerationError(f"Failed to download video: {exc}") from exc
        return resp.content


def _extract_image_url(response) -> str:
    """Return the first inline image of a generate_content response as a data URL."""
    notes = []
    candidates = getattr(response, "candidates", None) or []
    if candidates and candidates[0].content and candidates[0].content.parts:
        for part in candidates[0].content.parts:
            if part.inline_data is not None and part.inline_data.data:
                return to_data_url(part.inline_data.data, part.inline_data.mime_type or "image/png")
            if getattr(part, "text", None):
                notes.append(part.text.strip())
    detail = f" Model said: {' '.join(notes)}" if notes else ""
    raise GenerationError(f"No image was generated.{detail}")
