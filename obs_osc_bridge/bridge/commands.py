"""
Resolved commands

One frozen dataclass per command kind. Each variant validates its fields
on construction, so an instance always carries executable values.
"""

from dataclasses import dataclass
from typing import Optional

from ..exceptions import ValidationError

# Transitions without a duration
INSTANT_TRANSITIONS = ("Cut", "Stinger")
# Transitions that accept a duration in milliseconds
TIMED_TRANSITIONS = ("Fade", "Move", "Luma_Wipe", "Fade_to_Color", "Slide", "Swipe")
# The transition kind whose scene changes fire only a "scene switched" event
CUT_TRANSITION = "Cut"

RECORDING_ACTIONS = ("start", "stop", "toggle", "pause", "resume")
OUTPUT_ACTIONS = ("start", "stop", "toggle")
STUDIO_MODE_ACTIONS = ("enable", "disable", "toggle")


def _require_name(parameter: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(parameter, value, "must be a non-empty name")


def _require_action(parameter: str, value: str, allowed: tuple) -> None:
    if value not in allowed:
        raise ValidationError(parameter, value, f"must be one of {', '.join(allowed)}")


class Command:
    """Base class of all resolved commands."""


@dataclass(frozen=True)
class SelectSceneByIndex(Command):
    index: int  # zero-based

    def __post_init__(self):
        if not isinstance(self.index, int) or isinstance(self.index, bool):
            raise ValidationError("index", self.index, "must be an integer")


@dataclass(frozen=True)
class SelectSceneByName(Command):
    scene_name: str

    def __post_init__(self):
        _require_name("scene_name", self.scene_name)


@dataclass(frozen=True)
class NextScene(Command):
    pass


@dataclass(frozen=True)
class PreviousScene(Command):
    pass


@dataclass(frozen=True)
class SetPreviewScene(Command):
    scene_name: str

    def __post_init__(self):
        _require_name("scene_name", self.scene_name)


@dataclass(frozen=True)
class RecordingControl(Command):
    action: str

    def __post_init__(self):
        _require_action("action", self.action, RECORDING_ACTIONS)


@dataclass(frozen=True)
class StreamingControl(Command):
    action: str

    def __post_init__(self):
        _require_action("action", self.action, OUTPUT_ACTIONS)


@dataclass(frozen=True)
class StudioModeControl(Command):
    action: str

    def __post_init__(self):
        _require_action("action", self.action, STUDIO_MODE_ACTIONS)


@dataclass(frozen=True)
class SetItemVisibility(Command):
    scene_name: str
    item_name: str
    visible: bool

    def __post_init__(self):
        _require_name("scene_name", self.scene_name)
        _require_name("item_name", self.item_name)
        if not isinstance(self.visible, bool):
            raise ValidationError("visible", self.visible, "must be a boolean")


@dataclass(frozen=True)
class SetFilterVisibility(Command):
    source_name: str
    filter_name: str
    enabled: bool

    def __post_init__(self):
        _require_name("source_name", self.source_name)
        _require_name("filter_name", self.filter_name)
        if not isinstance(self.enabled, bool):
            raise ValidationError("enabled", self.enabled, "must be a boolean")


@dataclass(frozen=True)
class SetFilterOpacity(Command):
    source_name: str
    filter_name: str
    opacity: float  # percentage, 0-100

    def __post_init__(self):
        _require_name("source_name", self.source_name)
        _require_name("filter_name", self.filter_name)


@dataclass(frozen=True)
class SetTransition(Command):
    """Switch the current transition, optionally setting its duration.

    ``transition_name`` is the name as typed on the controller (``Luma_Wipe``);
    ``obs_name`` is the name OBS knows it by (``Luma Wipe``).
    """

    transition_name: str
    duration_ms: Optional[int] = None

    def __post_init__(self):
        if self.transition_name not in INSTANT_TRANSITIONS + TIMED_TRANSITIONS:
            raise ValidationError(
                "transition",
                self.transition_name,
                "unknown transition name",
                hint="If the name contains spaces use '_' instead",
            )
        if self.duration_ms is not None and self.is_instant:
            raise ValidationError(
                "duration", self.duration_ms, f"{self.transition_name} has no duration"
            )

    @property
    def is_instant(self) -> bool:
        return self.transition_name in INSTANT_TRANSITIONS

    @property
    def obs_name(self) -> str:
        return self.transition_name.replace("_", " ")


@dataclass(frozen=True)
class SetItemPosition(Command):
    scene_name: str
    item_name: str
    x: float
    y: float

    def __post_init__(self):
        _require_name("scene_name", self.scene_name)
        _require_name("item_name", self.item_name)


@dataclass(frozen=True)
class SetItemScale(Command):
    scene_name: str
    item_name: str
    scale: float

    def __post_init__(self):
        _require_name("scene_name", self.scene_name)
        _require_name("item_name", self.item_name)


@dataclass(frozen=True)
class SetItemRotation(Command):
    scene_name: str
    item_name: str
    rotation: float

    def __post_init__(self):
        _require_name("scene_name", self.scene_name)
        _require_name("item_name", self.item_name)


@dataclass(frozen=True)
class MoveSelectedItem(Command):
    """Move the remembered item of the current scene; None leaves an axis alone."""

    x: Optional[int] = None
    y: Optional[int] = None

    def __post_init__(self):
        if self.x is None and self.y is None:
            raise ValidationError("position", None, "needs an x or a y value")


@dataclass(frozen=True)
class AlignSelectedItem(Command):
    alignment: int


@dataclass(frozen=True)
class SetSelectedItemSize(Command):
    scale: float


@dataclass(frozen=True)
class SetTransitionOverride(Command):
    transition_name: str

    def __post_init__(self):
        _require_name("transition_name", self.transition_name)


@dataclass(frozen=True)
class SetTransitionOverrideDuration(Command):
    duration_ms: int

    def __post_init__(self):
        if self.duration_ms < 0:
            raise ValidationError("duration", self.duration_ms, "must not be negative")
