"""
Command Resolver

Turns one decoded OSC message into a resolved command. Two address
grammars coexist:

* verb-prefixed, e.g. ``/scene 3`` or ``/transition Fade 500``;
* verb-suffixed with the targets in the path, e.g. ``/Wide/VOX/visible 1``.

Matchers are tried in a fixed order and the first match wins. Suffixed
keywords are found by substring containment, so a scene, source or filter
name containing ``visible``, ``opacity``, ``position``, ``scale`` or
``rotate`` is mistaken for that command.
"""

import logging
import math
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..exceptions import UnrecognizedMessageError, ValidationError
from ..osc.address import ParsedAddress, parse_address
from ..settings import Calibration
from .commands import (
    INSTANT_TRANSITIONS,
    AlignSelectedItem,
    Command,
    MoveSelectedItem,
    NextScene,
    PreviousScene,
    RecordingControl,
    SelectSceneByIndex,
    SelectSceneByName,
    SetFilterOpacity,
    SetFilterVisibility,
    SetItemPosition,
    SetItemRotation,
    SetItemScale,
    SetItemVisibility,
    SetPreviewScene,
    SetSelectedItemSize,
    SetTransition,
    SetTransitionOverride,
    SetTransitionOverrideDuration,
    StreamingControl,
    StudioModeControl,
)

logger = logging.getLogger(__name__)

Args = Tuple[Any, ...]
Matcher = Tuple[str, Callable[[ParsedAddress, Args], bool], Callable[..., Command]]

# Verb-prefixed commands that take no arguments
SIMPLE_COMMANDS = {
    "startRecording": lambda: RecordingControl("start"),
    "stopRecording": lambda: RecordingControl("stop"),
    "toggleRecording": lambda: RecordingControl("toggle"),
    "pauseRecording": lambda: RecordingControl("pause"),
    "resumeRecording": lambda: RecordingControl("resume"),
    "startStreaming": lambda: StreamingControl("start"),
    "stopStreaming": lambda: StreamingControl("stop"),
    "toggleStreaming": lambda: StreamingControl("toggle"),
    "enableStudioMode": lambda: StudioModeControl("enable"),
    "disableStudioMode": lambda: StudioModeControl("disable"),
    "toggleStudioMode": lambda: StudioModeControl("toggle"),
}

BOOLEAN_VALUES = {"on": True, "off": False}


def is_number(value: Any) -> bool:
    """True for finite OSC int and float arguments (OSC booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_toggle(parameter: str, value: Any, hint: str) -> bool:
    """Accept 0/1 or "off"/"on" as a boolean.

    Raises:
        ValidationError: For any other value
    """
    if is_number(value) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value in BOOLEAN_VALUES:
        return BOOLEAN_VALUES[value]
    raise ValidationError(parameter, value, "must be 0, 1, 'off' or 'on'", hint=hint)


def scene_index(value: float) -> int:
    """1-based controller index to 0-based list index, flooring fractions.

    Fractions between 0 and 1 still address the first scene; zero and
    negative values give a negative index, which is never in range.
    """
    if 0 < value < 1:
        return 0
    return math.floor(value) - 1


def _join_words(args: Sequence[Any]) -> str:
    """Join split OSC arguments back into one name."""
    words = []
    for arg in args:
        if isinstance(arg, float) and arg.is_integer():
            arg = int(arg)
        words.append(str(arg))
    return " ".join(words)


class CommandResolver:
    """Resolves OSC messages into commands using an ordered list of matchers"""

    def __init__(self, calibration: Optional[Calibration] = None):
        """Initialize the resolver

        Args:
            calibration: Canvas constants for position and pad moves
        """
        self.calibration = calibration or Calibration()
        self.matchers: List[Matcher] = self._build_matchers()

    def _build_matchers(self) -> List[Matcher]:
        return [
            ("scene_index", self._is_scene_with_number, self._scene_by_index),
            ("scene_words", self._is_scene_with_words, self._scene_by_words),
            ("scene_name", self._is_scene_with_string, self._scene_by_name),
            ("scene_path", self._is_scene_path, self._scene_by_path),
            ("preview_scene", self._is_preview_scene, self._preview_scene),
            ("go", lambda p, a: p.is_exactly("go"), lambda p, a: NextScene()),
            ("back", lambda p, a: p.is_exactly("back"), lambda p, a: PreviousScene()),
            ("simple", self._is_simple_command, self._simple_command),
            ("visible", lambda p, a: p.contains("visible"), self._item_visibility),
            (
                "filter_visibility",
                lambda p, a: p.contains("filterVisibility"),
                self._filter_visibility,
            ),
            ("opacity", lambda p, a: p.contains("opacity"), self._filter_opacity),
            ("transition", lambda p, a: p.is_exactly("transition"), self._transition),
            ("position", lambda p, a: p.contains("position"), self._item_position),
            ("scale", lambda p, a: p.contains("scale"), self._item_scale),
            ("rotate", lambda p, a: p.contains("rotate"), self._item_rotation),
            ("move", lambda p, a: p.is_exactly("move"), self._move),
            ("movex", lambda p, a: p.is_exactly("movex"), self._move_x),
            ("movey", lambda p, a: p.is_exactly("movey"), self._move_y),
            ("align", lambda p, a: p.is_exactly("align"), self._align),
            (
                "transition_override",
                lambda p, a: p.contains("/transOverrideType"),
                self._transition_override,
            ),
            (
                "transition_override_duration",
                lambda p, a: p.is_exactly("transOverrideDuration"),
                self._transition_override_duration,
            ),
            ("size", lambda p, a: p.is_exactly("size"), self._size),
        ]

    def resolve(self, address: str, args: Sequence[Any] = ()) -> Command:
        """Resolve one OSC message

        Args:
            address: The OSC address
            args: The decoded OSC arguments

        Returns:
            The resolved command

        Raises:
            UnrecognizedMessageError: If no grammar matches the address and arguments
            ValidationError: If a recognized command carries an invalid value
        """
        parsed = parse_address(address)
        args = tuple(args)
        for name, matches, build in self.matchers:
            if matches(parsed, args):
                logger.debug(f"{address} matched '{name}'")
                command = build(parsed, args)
                if command is None:
                    raise UnrecognizedMessageError(address, args)
                return command
        raise UnrecognizedMessageError(address, args)

    # Scenes
    @staticmethod
    def _is_scene_with_number(parsed: ParsedAddress, args: Args) -> bool:
        return parsed.is_exactly("scene") and bool(args) and is_number(args[0])

    @staticmethod
    def _is_scene_with_words(parsed: ParsedAddress, args: Args) -> bool:
        return parsed.is_exactly("scene") and len(args) > 1

    @staticmethod
    def _is_scene_with_string(parsed: ParsedAddress, args: Args) -> bool:
        return parsed.is_exactly("scene") and len(args) == 1 and isinstance(args[0], str)

    @staticmethod
    def _is_scene_path(parsed: ParsedAddress, args: Args) -> bool:
        return parsed.verb == "scene" and len(parsed.segments) > 1 and not args

    @staticmethod
    def _scene_by_index(parsed: ParsedAddress, args: Args) -> Command:
        return SelectSceneByIndex(scene_index(args[0]))

    @staticmethod
    def _scene_by_words(parsed: ParsedAddress, args: Args) -> Command:
        return SelectSceneByName(_join_words(args))

    @staticmethod
    def _scene_by_name(parsed: ParsedAddress, args: Args) -> Command:
        return SelectSceneByName(args[0])

    @staticmethod
    def _scene_by_path(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        name = parsed.segment_after("scene")
        return SelectSceneByName(name) if name else None

    @staticmethod
    def _is_preview_scene(parsed: ParsedAddress, args: Args) -> bool:
        return parsed.is_exactly("previewScene") and bool(args) and isinstance(args[0], str)

    @staticmethod
    def _preview_scene(parsed: ParsedAddress, args: Args) -> Command:
        return SetPreviewScene(args[0])

    @staticmethod
    def _is_simple_command(parsed: ParsedAddress, args: Args) -> bool:
        return len(parsed.segments) == 1 and parsed.verb in SIMPLE_COMMANDS

    @staticmethod
    def _simple_command(parsed: ParsedAddress, args: Args) -> Command:
        return SIMPLE_COMMANDS[parsed.verb]()

    # Items and filters addressed by path
    @staticmethod
    def _item_visibility(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        targets = parsed.targets()
        if not targets or not args:
            return None
        visible = parse_toggle(
            "visible",
            args[0],
            hint="Use /[sceneName]/[sourceName]/visible 0 or 1, e.g.: /Wide/VOX/visible 1",
        )
        return SetItemVisibility(targets[0], targets[1], visible)

    @staticmethod
    def _filter_visibility(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        targets = parsed.targets()
        if not targets or not args:
            return None
        enabled = parse_toggle(
            "filterVisibility",
            args[0],
            hint=(
                "Use /[sourceName]/[filterName]/filterVisibility 0 or 1, "
                "e.g.: /VOX/chroma/filterVisibility 1"
            ),
        )
        return SetFilterVisibility(targets[0], targets[1], enabled)

    @staticmethod
    def _filter_opacity(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        targets = parsed.targets()
        if not targets or not args or not is_number(args[0]):
            return None
        # Faders send 0-1, the color correction filter expects a percentage
        return SetFilterOpacity(targets[0], targets[1], args[0] * 100)

    @staticmethod
    def _transition(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        if not args or not isinstance(args[0], str):
            return None
        name = args[0]
        if name in INSTANT_TRANSITIONS:
            return SetTransition(name)
        duration = None
        if len(args) > 1:
            if not is_number(args[1]):
                raise ValidationError("duration", args[1], "must be a number of milliseconds")
            duration = int(args[1])
        return SetTransition(name, duration)

    def _item_position(self, parsed: ParsedAddress, args: Args) -> Optional[Command]:
        targets = parsed.targets()
        if not targets or len(args) < 2 or not all(is_number(a) for a in args[:2]):
            return None
        x = args[0] + self.calibration.canvas_center_x
        y = self.calibration.canvas_center_y - args[1]
        return SetItemPosition(targets[0], targets[1], x, y)

    @staticmethod
    def _item_scale(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        targets = parsed.targets()
        if not targets or not args or not is_number(args[0]):
            return None
        return SetItemScale(targets[0], targets[1], args[0])

    @staticmethod
    def _item_rotation(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        targets = parsed.targets()
        if not targets or not args or not is_number(args[0]):
            return None
        return SetItemRotation(targets[0], targets[1], args[0])

    # Commands acting on the remembered item of the current scene
    def _pad_x(self, value: float) -> int:
        return math.floor(value * self.calibration.pad_scale) + int(self.calibration.pad_offset_x)

    def _pad_y(self, value: float) -> int:
        return math.floor(value * self.calibration.pad_scale + self.calibration.pad_offset_y)

    def _move(self, parsed: ParsedAddress, args: Args) -> Optional[Command]:
        if len(args) < 2 or not all(is_number(a) for a in args[:2]):
            return None
        # The XY pad sends (vertical, horizontal)
        return MoveSelectedItem(x=self._pad_x(args[1]), y=self._pad_y(args[0]))

    def _move_x(self, parsed: ParsedAddress, args: Args) -> Optional[Command]:
        if not args or not is_number(args[0]):
            return None
        return MoveSelectedItem(x=self._pad_x(args[0]))

    def _move_y(self, parsed: ParsedAddress, args: Args) -> Optional[Command]:
        if not args or not is_number(args[0]):
            return None
        return MoveSelectedItem(y=self._pad_y(args[0]))

    @staticmethod
    def _align(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        if not args or not is_number(args[0]):
            return None
        return AlignSelectedItem(int(args[0]))

    @staticmethod
    def _size(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        if not args or not is_number(args[0]):
            return None
        return SetSelectedItemSize(args[0])

    # Per-scene transition overrides
    @staticmethod
    def _transition_override(parsed: ParsedAddress, args: Args) -> Optional[Command]:
        name = parsed.segment_after("transOverrideType")
        return SetTransitionOverride(name) if name else None

    @staticmethod
    def _transition_override_duration(
        parsed: ParsedAddress, args: Args
    ) -> Optional[Command]:
        if not args or not is_number(args[0]):
            return None
        return SetTransitionOverrideDuration(math.floor(args[0]))
