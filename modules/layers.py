"""
Layer Order - selection and back-to-front stacking of library characters.

Storage order runs back to front (index 0 is the back-most layer). The layer
manager shows layers top to bottom, so every screen-facing operation goes
through `display_order()`.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .config import Character
from .utils import get_logger

logger = get_logger("layers")


class LayerOrder:
    """Ordered, duplicate-free list of selected character ids."""

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self._ids: List[str] = []
        if ids:
            for char_id in ids:
                if char_id not in self._ids:
                    self._ids.append(char_id)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, char_id: str) -> bool:
        return char_id in self._ids

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def shows_layer_manager(self) -> bool:
        return len(self._ids) > 1

    def toggle(self, char_id: str) -> bool:
        """Remove `char_id` if selected, else append it as the new top layer.

        Returns True when the id is selected after the call.
        """
        if char_id in self._ids:
            self._ids.remove(char_id)
            return False
        self._ids.append(char_id)
        return True

    def reorder(self, new_ids: Sequence[str]) -> None:
        """Replace the order wholesale with a permutation of the current members."""
        new_ids = list(new_ids)
        if len(set(new_ids)) != len(new_ids):
            raise ValueError("Layer order cannot contain duplicates")
        if set(new_ids) != set(self._ids):
            raise ValueError("Layer order must be a permutation of the selected characters")
        self._ids = new_ids

    def display_order(self) -> List[str]:
        """Top-to-bottom view, as shown in the layer manager."""
        return list(reversed(self._ids))

    def move_layer(self, dragged_id: str, target_id: str) -> bool:
        """
        Drop `dragged_id` onto the on-screen slot of `target_id`.

        Works on the top-to-bottom view: the dragged layer is spliced out and
        reinserted at the target's index, then the result is reversed back to
        storage order. Returns True when the order changed.
        """
        if dragged_id == target_id:
            return False
        view = self.display_order()
        if dragged_id not in view or target_id not in view:
            return False
        dragged_index = view.index(dragged_id)
        target_index = view.index(target_id)

        view.pop(dragged_index)
        view.insert(target_index, dragged_id)
        self.reorder(list(reversed(view)))
        logger.info(f"Moved layer {dragged_id} to slot of {target_id}")
        return True

    def raise_layer(self, char_id: str) -> bool:
        """Move one slot towards the top of the stack."""
        view = self.display_order()
        if char_id not in view:
            return False
        index = view.index(char_id)
        if index == 0:
            return False
        return self.move_layer(char_id, view[index - 1])

    def lower_layer(self, char_id: str) -> bool:
        """Move one slot towards the back of the stack."""
        view = self.display_order()
        if char_id not in view:
            return False
        index = view.index(char_id)
        if index == len(view) - 1:
            return False
        return self.move_layer(char_id, view[index + 1])

    def discard_missing(self, library_ids: Iterable[str]) -> None:
        known = set(library_ids)
        self._ids = [char_id for char_id in self._ids if char_id in known]

    def resolve(self, characters: Iterable[Character]) -> List[Character]:
        """Selected characters in layer order (back to front)."""
        by_id = {c.id: c for c in characters}
        return [by_id[char_id] for char_id in self._ids if char_id in by_id]
