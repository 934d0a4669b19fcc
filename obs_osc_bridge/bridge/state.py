"""
Studio State Cache

The little OBS state the bridge needs to resolve state-dependent commands.
One instance is owned by the controller and passed to the executor and the
feedback translator.
"""

import logging
import threading
import time
from typing import Any, Dict, Optional, Sequence, Tuple

from ..exceptions import StaleStateError

logger = logging.getLogger(__name__)


class StudioStateCache:
    """Last known transition, scene ordering and targeted scene item"""

    def __init__(self):
        self._lock = threading.Lock()
        self._last_transition: Optional[str] = None
        self._scene_names: Tuple[str, ...] = ()
        self._scenes_fetched_at: Optional[float] = None
        self._selected_item: Optional[Tuple[str, str]] = None

    @property
    def last_transition(self) -> Optional[str]:
        """Name of the most recently observed transition, None until known"""
        with self._lock:
            return self._last_transition

    def record_transition(self, name: str) -> None:
        """Overwrite the cached transition, whoever changed it"""
        with self._lock:
            self._last_transition = name
        logger.debug(f"Cached transition: {name}")

    @property
    def scene_names(self) -> Tuple[str, ...]:
        """Scene ordering from the last scene-list fetch.

        Advisory only: next/previous scene always fetch a fresh list.
        """
        with self._lock:
            return self._scene_names

    @property
    def scenes_fetched_at(self) -> Optional[float]:
        with self._lock:
            return self._scenes_fetched_at

    def record_scene_list(self, scene_names: Sequence[str]) -> Tuple[str, ...]:
        names = tuple(scene_names)
        with self._lock:
            self._scene_names = names
            self._scenes_fetched_at = time.time()
        return names

    @staticmethod
    def current_scene_index(scene_names: Sequence[str], current_name: str) -> int:
        """Position of ``current_name`` in a freshly fetched scene list

        Raises:
            StaleStateError: If the scene is not in the list
        """
        try:
            return list(scene_names).index(current_name)
        except ValueError:
            raise StaleStateError("Scene", current_name) from None

    def neighbour_scene(
        self, scene_names: Sequence[str], current_name: str, step: int
    ) -> str:
        """The scene ``step`` places away from the current one, wrapping around"""
        index = self.current_scene_index(scene_names, current_name)
        return scene_names[(index + step) % len(scene_names)]

    @property
    def selected_item(self) -> Optional[Tuple[str, str]]:
        """``(scene_name, item_name)`` of the last item targeted by path"""
        with self._lock:
            return self._selected_item

    def select_item(self, scene_name: str, item_name: str) -> None:
        with self._lock:
            self._selected_item = (scene_name, item_name)

    def snapshot(self) -> Dict[str, Any]:
        """Current cache contents for diagnostics"""
        with self._lock:
            return {
                "last_transition": self._last_transition,
                "scene_names": list(self._scene_names),
                "scenes_fetched_at": self._scenes_fetched_at,
                "selected_item": self._selected_item,
            }
