"""
Studio State - the single per-session state container.

Streamlit reruns the script on every interaction, so the container lives in
`st.session_state` and is handed explicitly to each render function.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, MutableMapping, Optional, Sequence

import streamlit as st

from .config import Character, ToolType
from .dispatcher import ToolDispatcher
from .generation_service import GeminiGenerationService
from .layers import LayerOrder
from .utils import get_logger

logger = get_logger("studio_state")

SESSION_KEY = "studio_state"


@dataclass
class StudioState:
    characters: List[Character] = field(default_factory=list)
    selection: LayerOrder = field(default_factory=LayerOrder)
    active_tool: ToolType = ToolType.SCENE_BUILDER
    dispatcher: ToolDispatcher = field(default_factory=ToolDispatcher)
    api_key: Optional[str] = None
    video_key_selected: bool = False

    # ---------- Library ----------
    def add_character(self, character: Character) -> None:
        if any(c.id == character.id for c in self.characters):
            raise ValueError(f"Duplicate character id: {character.id}")
        self.characters.append(character)
        logger.info(f"Added character '{character.name}' ({character.id})")

    def get_character(self, char_id: str) -> Optional[Character]:
        for character in self.characters:
            if character.id == char_id:
                return character
        return None

    # ---------- Selection ----------
    def toggle_character(self, char_id: str) -> bool:
        if self.get_character(char_id) is None:
            return False
        return self.selection.toggle(char_id)

    def is_selected(self, char_id: str) -> bool:
        return char_id in self.selection

    def selected_characters(self) -> List[Character]:
        return self.selection.resolve(self.characters)

    def reorder_layers(self, ordered: Sequence[Character]) -> None:
        self.selection.reorder([c.id for c in ordered])

    def layers_top_to_bottom(self) -> List[Character]:
        return list(reversed(self.selected_characters()))

    # ---------- Tools ----------
    def set_tool(self, tool: ToolType) -> None:
        # generation state is left alone; the canvas keeps the last result
        self.active_tool = ToolType(tool)

    # ---------- Credentials ----------
    def select_key(self, api_key: Optional[str] = None) -> None:
        """Select a typed key, or the configured environment key when none is given."""
        self.api_key = api_key.strip() if api_key and api_key.strip() else None
        self.video_key_selected = True

    def reset_key(self) -> None:
        # the rejected key must not shadow the environment key on re-selection
        self.api_key = None
        self.video_key_selected = False

    def service(self) -> GeminiGenerationService:
        return GeminiGenerationService(api_key=self.api_key)

    @property
    def generation(self):
        return self.dispatcher.state


def get_studio_state(session: Optional[MutableMapping] = None) -> StudioState:
    """Fetch (or create) the session's StudioState."""
    if session is None:
        session = st.session_state
    state = session.get(SESSION_KEY)
    if not isinstance(state, StudioState):
        state = StudioState()
        session[SESSION_KEY] = state
    state.selection.discard_missing(c.id for c in state.characters)
    return state
