"""
Configuration, constants, and data models for Character Studio.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Union
import uuid


# ---------- Data Models ----------
@dataclass(frozen=True)
class Character:
    """A named visual asset in the character library."""
    id: str
    name: str
    image_url: str  # usually a base64 data URL
    prompt: str = ""

    @classmethod
    def create(cls, name: str, image_url: str, prompt: str = "") -> "Character":
        return cls(id=uuid.uuid4().hex, name=name, image_url=image_url, prompt=prompt)


class ToolType(str, Enum):
    SCENE_BUILDER = "SCENE_BUILDER"
    IMAGE_EDITOR = "IMAGE_EDITOR"
    VIDEO_GENERATOR = "VIDEO_GENERATOR"

    @property
    def label(self) -> str:
        return TOOL_LABELS[self]


class AspectRatio(str, Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"

    @property
    def label(self) -> str:
        return f"{self.value} ({'Landscape' if self is AspectRatio.LANDSCAPE else 'Portrait'})"


@dataclass(frozen=True)
class ImageResult:
    url: str
    kind: str = field(default="image", init=False)


@dataclass(frozen=True)
class VideoResult:
    url: str
    kind: str = field(default="video", init=False)


GeneratedContent = Union[ImageResult, VideoResult]


TOOL_LABELS = {
    ToolType.SCENE_BUILDER: "🧩 Scene Builder",
    ToolType.IMAGE_EDITOR: "🖌️ Image Editor",
    ToolType.VIDEO_GENERATOR: "🎞️ Video Generator",
}


# ---------- Gemini Models ----------
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_VIDEO_MODEL = "veo-2.0-generate-001"

VIDEO_POLL_INTERVAL_SECONDS = 10
VIDEO_MAX_WAIT_SECONDS = 600


# ---------- Tool Messages ----------
PRECONDITION_MESSAGES = {
    ToolType.SCENE_BUILDER: "Please select at least one character from the library.",
    ToolType.IMAGE_EDITOR: "Please upload an image to edit.",
    ToolType.VIDEO_GENERATOR: "Please upload a starting image for the video.",
}

LOADING_MESSAGES = {
    ToolType.SCENE_BUILDER: "Building your scene...",
    ToolType.IMAGE_EDITOR: "Applying your edits...",
    ToolType.VIDEO_GENERATOR: "Preparing video generation...",
}

FALLBACK_ERRORS = {
    ToolType.SCENE_BUILDER: "Failed to generate scene.",
    ToolType.IMAGE_EDITOR: "Failed to edit image.",
    ToolType.VIDEO_GENERATOR: "Failed to generate video.",
}

CREDENTIAL_NOT_FOUND = "Requested entity was not found"
CREDENTIAL_RESELECT_MESSAGE = "API Key error. Please re-select your key."
GENERATION_INTERRUPTED = "Generation was interrupted. Please try again."

VIDEO_PROGRESS_MESSAGES = [
    "Warming up the video model...",
    "Storyboarding your shot...",
    "Rendering frames...",
    "Adding motion and lighting...",
    "Polishing the final cut...",
]


# ---------- Default Prompts ----------
DEFAULT_SCENE_PROMPT = "Two characters having a picnic in a sunny park."
DEFAULT_EDIT_PROMPT = "Add a retro, vintage filter."
DEFAULT_VIDEO_PROMPT = "A neon hologram of a cat driving at top speed"

CHARACTER_PROMPT_TEMPLATE = """Create a full-body character portrait for a character library.

Character name: {name}
Description: {prompt}

Rules:
- Single character, centred, full body visible.
- Plain, neutral studio background so the character can be composited later.
- Consistent, clean illustration style. No text, no watermarks.
"""

SCENE_PROMPT_TEMPLATE = """You are composing a single illustrated scene from reference characters.

The reference images above are the characters, listed from the BACK layer to the FRONT layer:
{layers}

Rules:
- Keep each character's appearance (face, outfit, colours, proportions) faithful to its reference image.
- Respect the layer order: later characters stand in front of and may overlap earlier ones.
- Produce ONE cohesive image, not a collage.

Scene: {prompt}
"""
