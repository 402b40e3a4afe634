"""
Character Studio - Modular Components

This package contains the core modules for Character Studio:
- config: Data models, constants, and default prompts
- utils: Logging, upload and data URL helpers
- gemini_client: Gemini API client initialization and settings
- layers: Selection and back-to-front layer ordering
- generation_service: Scene composition, image editing and video generation
- dispatcher: Generation state machine for the studio tools
- studio_state: Per-session state container
"""

# Lazy imports to avoid circular dependencies and hot-reload issues
__all__ = [
    # Config
    "Character",
    "ToolType",
    "AspectRatio",
    "ImageResult",
    "VideoResult",
    "DEFAULT_SCENE_PROMPT",
    "DEFAULT_EDIT_PROMPT",
    "DEFAULT_VIDEO_PROMPT",
    # Utils
    "get_logger",
    "load_image_bytes",
    "to_data_url",
    "parse_data_url",
    # Gemini Client
    "get_api_key",
    "get_genai_client",
    # Core
    "LayerOrder",
    "GeminiGenerationService",
    "GenerationError",
    "ToolDispatcher",
    "GenerationState",
    "Status",
    "StudioState",
    "get_studio_state",
]

_CONFIG_NAMES = (
    "Character", "ToolType", "AspectRatio", "ImageResult", "VideoResult",
    "DEFAULT_SCENE_PROMPT", "DEFAULT_EDIT_PROMPT", "DEFAULT_VIDEO_PROMPT",
)


def __getattr__(name):
    """Lazy import to avoid circular dependencies and streamlit hot-reload issues."""
    if name in __all__:
        # Import on-demand to avoid module initialization issues
        if name in _CONFIG_NAMES:
            from . import config
            return getattr(config, name)
        elif name in ("get_logger", "load_image_bytes", "to_data_url", "parse_data_url"):
            from . import utils
            return getattr(utils, name)
        elif name in ("get_api_key", "get_genai_client"):
            from . import gemini_client
            return getattr(gemini_client, name)
        elif name == "LayerOrder":
            from .layers import LayerOrder
            return LayerOrder
        elif name in ("GeminiGenerationService", "GenerationError"):
            from . import generation_service
            return getattr(generation_service, name)
        elif name in ("ToolDispatcher", "GenerationState", "Status"):
            from . import dispatcher
            return getattr(dispatcher, name)
        elif name in ("StudioState", "get_studio_state"):
            from . import studio_state
            return getattr(studio_state, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
