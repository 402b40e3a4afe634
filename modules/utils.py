"""
Utility functions for Character Studio.
"""

from __future__ import annotations
import base64
import io
import logging
from typing import Tuple
from PIL import Image, UnidentifiedImageError

_LOG_NAMESPACE = "character_studio"


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger under the studio namespace.

    The namespace logger gets one stream handler the first time it is requested,
    so Streamlit reruns do not stack duplicate handlers.
    """
    root = logging.getLogger(_LOG_NAMESPACE)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root.getChild(name)


def load_image_bytes(file, keep_alpha: bool = False) -> Tuple[bytes, str]:
    """
    Load and convert uploaded file to PNG bytes.

    Args:
        file: Streamlit UploadedFile object (or any binary file-like)
        keep_alpha: keep transparency (character cut-outs) instead of flattening to RGB

    Returns:
        Tuple of (image_bytes, mime_type)

    Raises:
        ValueError: if the file is not a readable image
    """
    try:
        image = Image.open(file)
        image = image.convert("RGBA" if keep_alpha else "RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("The uploaded file is not a readable image.") from exc
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue(), "image/png"


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_url(url: str) -> Tuple[bytes, str]:
    """
    Split a base64 data URL into (bytes, mime_type).

    Raises:
        ValueError: if the string is not a base64 data URL
    """
    if not url.startswith("data:") or ";base64," not in url:
        raise ValueError("Not a base64 data URL")
    header, payload = url[len("data:"):].split(";base64,", 1)
    return base64.b64decode(payload), header or "application/octet-stream"
