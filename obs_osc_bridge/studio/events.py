"""
OBS notifications consumed by the feedback path.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SceneSwitched:
    """The program scene changed."""

    scene_name: str


@dataclass(frozen=True)
class TransitionBegin:
    """A scene transition started. ``to_scene`` is None when OBS omits it."""

    transition_name: Optional[str] = None
    to_scene: Optional[str] = None


@dataclass(frozen=True)
class TransitionKindChanged:
    """The current scene transition was changed."""

    transition_name: str


StudioEvent = Union[SceneSwitched, TransitionBegin, TransitionKindChanged]
