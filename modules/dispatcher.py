"""
Tool Dispatcher - generation state machine shared by the three studio tools.

    Idle -> Loading -> Succeeded | Failed -> Loading -> ...

A failed precondition goes straight to Failed without contacting the service.
Only the latest request may complete; older completions are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, Optional, Sequence

from .config import (
    AspectRatio,
    Character,
    CREDENTIAL_NOT_FOUND,
    CREDENTIAL_RESELECT_MESSAGE,
    FALLBACK_ERRORS,
    GENERATION_INTERRUPTED,
    GeneratedContent,
    ImageResult,
    LOADING_MESSAGES,
    PRECONDITION_MESSAGES,
    ToolType,
    VideoResult,
)
from .utils import get_logger, load_image_bytes

logger = get_logger("dispatcher")


class Status(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class GenerationState:
    status: Status = Status.IDLE
    loading_message: str = ""
    result: Optional[GeneratedContent] = None
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is Status.LOADING

    def view(self) -> str:
        """What the canvas shows: loading > error > result > empty."""
        if self.is_loading:
            return "loading"
        if self.error:
            return "error"
        if self.result is not None:
            return "result"
        return "empty"


StateListener = Callable[[GenerationState], None]


class ToolDispatcher:
    """Routes generate actions to the generation service and tracks their outcome."""

    def __init__(self):
        self.state = GenerationState()
        self._latest_request = 0

    # ---------- Transitions ----------
    def begin(self, message: str) -> int:
        self._latest_request += 1
        self.state.status = Status.LOADING
        self.state.loading_message = message
        self.state.error = None
        return self._latest_request

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest_request

    def report_progress(self, request_id: int, message: str) -> None:
        if self.is_current(request_id) and self.state.is_loading:
            self.state.loading_message = message

    def complete(self, request_id: int, result: GeneratedContent) -> bool:
        if not self.is_current(request_id):
            logger.warning(f"Dropping stale result from request {request_id}")
            return False
        self.state.status = Status.SUCCEEDED
        self.state.loading_message = ""
        self.state.result = result
        self.state.error = None
        return True

    def fail(self, request_id: Optional[int], message: str) -> bool:
        if request_id is not None and not self.is_current(request_id):
            logger.warning(f"Dropping stale error from request {request_id}: {message}")
            return False
        self.state.status = Status.FAILED
        self.state.loading_message = ""
        self.state.error = message
        return True

    # ---------- Tools ----------
    def generate_scene(
        self,
        service,
        characters: Sequence[Character],
        prompt: str,
        listener: Optional[StateListener] = None,
    ) -> GenerationState:
        tool = ToolType.SCENE_BUILDER
        if not characters:
            return self._precondition_failed(tool, listener)

        def call(progress):
            return ImageResult(service.compose_scene(list(characters), prompt))

        return self._run(tool, call, listener)

    def edit_image(
        self,
        service,
        upload: Optional[BinaryIO],
        prompt: str,
        listener: Optional[StateListener] = None,
    ) -> GenerationState:
        tool = ToolType.IMAGE_EDITOR
        if upload is None:
            return self._precondition_failed(tool, listener)

        def call(progress):
            image_bytes, mime_type = load_image_bytes(upload)
            return ImageResult(service.edit_image(image_bytes, mime_type, prompt))

        return self._run(tool, call, listener)

    def generate_video(
        self,
        service,
        upload: Optional[BinaryIO],
        prompt: str,
        aspect_ratio: AspectRatio,
        on_credential_reset: Optional[Callable[[], None]] = None,
        listener: Optional[StateListener] = None,
    ) -> GenerationState:
        tool = ToolType.VIDEO_GENERATOR
        if upload is None:
            return self._precondition_failed(tool, listener)

        def call(progress):
            image_bytes, mime_type = load_image_bytes(upload)
            return VideoResult(
                service.generate_video(image_bytes, mime_type, prompt, aspect_ratio, on_progress=progress)
            )

        def rewrite(message: str) -> str:
            if CREDENTIAL_NOT_FOUND in message:
                logger.warning("Video credential rejected, asking for a new key")
                if on_credential_reset:
                    on_credential_reset()
                return CREDENTIAL_RESELECT_MESSAGE
            return message

        return self._run(tool, call, listener, rewrite_error=rewrite)

    # ---------- Internals ----------
    def _precondition_failed(self, tool: ToolType, listener: Optional[StateListener]) -> GenerationState:
        self.fail(None, PRECONDITION_MESSAGES[tool])
        _notify(listener, self.state)
        return self.state

    def _run(
        self,
        tool: ToolType,
        call: Callable,
        listener: Optional[StateListener],
        rewrite_error: Optional[Callable[[str], str]] = None,
    ) -> GenerationState:
        request_id = self.begin(LOADING_MESSAGES[tool])

        def progress(message: str) -> None:
            self.report_progress(request_id, message)
            _notify(listener, self.state)

        try:
            _notify(listener, self.state)
            result = call(progress)
        except Exception as exc:
            message = str(exc).strip() or FALLBACK_ERRORS[tool]
            logger.error(f"{tool.value} failed: {message}")
            if rewrite_error:
                message = rewrite_error(message)
            self.fail(request_id, message)
        except BaseException:
            # Streamlit stops or reruns the script by raising from widget calls;
            # the session must not stay in Loading once this request is gone.
            logger.warning(f"{tool.value} interrupted (request {request_id})")
            self.fail(request_id, GENERATION_INTERRUPTED)
            raise
        else:
            logger.info(f"{tool.value} succeeded ({result.kind})")
            self.complete(request_id, result)
        _notify(listener, self.state)
        return self.state


def _notify(listener: Optional[StateListener], state: GenerationState) -> None:
    if listener:
        listener(state)
