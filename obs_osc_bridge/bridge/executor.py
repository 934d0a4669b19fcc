"""
Command Executor

Maps resolved commands onto OBS requests.

Reads whose result later requests depend on (scene list, current scene,
item list, transition override) abort the command when they fail. Writes
are applied in order without rollback: when OBS rejects one, the failure is
recorded and the next write is still attempted, while a connection failure
stops the remaining writes and propagates.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type

from ..error_handler import ErrorHandler
from ..exceptions import (
    StaleStateError,
    StudioConnectionError,
    StudioRequestError,
    ValidationError,
)
from ..studio.client import StudioClient
from .commands import (
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
from .state import StudioStateCache

logger = logging.getLogger(__name__)

SELECT_ITEM_HINT = "Target an item first, e.g.: /Wide/VOX/position 0 0"


class CommandExecutor:
    """Executes resolved commands against OBS"""

    def __init__(
        self,
        studio: StudioClient,
        state: StudioStateCache,
        error_handler: Optional[ErrorHandler] = None,
        canvas_center: Tuple[float, float] = (960.0, 540.0),
    ):
        """Initialize the executor

        Args:
            studio: Client issuing OBS requests
            state: Shared studio state cache
            error_handler: Records rejected requests
            canvas_center: Where ``/align`` places the item
        """
        self.studio = studio
        self.state = state
        self.error_handler = error_handler or ErrorHandler()
        self.canvas_center = canvas_center
        self.handlers: Dict[Type[Command], Callable[[Any], None]] = {
            SelectSceneByIndex: self._select_scene_by_index,
            SelectSceneByName: self._select_scene_by_name,
            NextScene: lambda command: self._step_scene(1),
            PreviousScene: lambda command: self._step_scene(-1),
            SetPreviewScene: self._set_preview_scene,
            RecordingControl: self._recording,
            StreamingControl: self._streaming,
            StudioModeControl: self._studio_mode,
            SetItemVisibility: self._item_visibility,
            SetFilterVisibility: self._filter_visibility,
            SetFilterOpacity: self._filter_opacity,
            SetTransition: self._transition,
            SetItemPosition: self._item_position,
            SetItemScale: self._item_scale,
            SetItemRotation: self._item_rotation,
            MoveSelectedItem: self._move_selected,
            AlignSelectedItem: self._align_selected,
            SetSelectedItemSize: self._size_selected,
            SetTransitionOverride: self._transition_override,
            SetTransitionOverrideDuration: self._transition_override_duration,
        }

    def execute(self, command: Command) -> None:
        """Issue the OBS requests for one command

        Raises:
            StudioRequestError: If a read the command depends on is rejected
            StudioConnectionError: If the connection fails mid-command
            StaleStateError: If fresh OBS state does not contain an expected name
            ValidationError: If the command cannot apply to the current OBS state
        """
        handler = self.handlers.get(type(command))
        if handler is None:
            raise TypeError(f"No handler for {type(command).__name__}")
        handler(command)

    def _query(self, func: Callable, *args: Any) -> Any:
        """Issue a read the rest of the command depends on"""
        result = func(*args)
        self.error_handler.record_success()
        return result

    def _apply(self, hint: str, func: Callable, *args: Any, **kwargs: Any) -> bool:
        """Issue one write; a rejection is recorded and reported, not raised

        Returns:
            True if OBS accepted the request
        """
        try:
            func(*args, **kwargs)
        except StudioConnectionError:
            raise
        except StudioRequestError as e:
            self.error_handler.record_error("rejected", e)
            logger.error(f"[!] {hint}")
            return False
        self.error_handler.record_success()
        return True

    # Scenes
    def _select_scene_by_index(self, command: SelectSceneByIndex) -> None:
        scene_names = self.state.record_scene_list(self._query(self.studio.list_scenes))
        if not 0 <= command.index < len(scene_names):
            raise ValidationError(
                "scene",
                command.index + 1,
                f"out of '/scene' range (1-{len(scene_names)})",
            )
        scene_name = scene_names[command.index]
        logger.info(f"Scene {command.index + 1}: {scene_name}")
        self._apply(
            f"There is no scene '{scene_name}' in OBS",
            self.studio.set_current_scene,
            scene_name,
        )

    def _select_scene_by_name(self, command: SelectSceneByName) -> None:
        self._apply(
            f"There is no scene '{command.scene_name}' in OBS. Double check case sensitivity.",
            self.studio.set_current_scene,
            command.scene_name,
        )

    def _step_scene(self, step: int) -> None:
        # Always fetch: the scene order may have been changed in OBS
        scene_names = self.state.record_scene_list(self._query(self.studio.list_scenes))
        current = self._query(self.studio.get_current_scene)
        target = self.state.neighbour_scene(scene_names, current, step)
        logger.info(f"{'Next' if step > 0 else 'Previous'} scene: {current} -> {target}")
        self._apply(
            f"Failed to switch to scene '{target}'",
            self.studio.set_current_scene,
            target,
        )

    def _set_preview_scene(self, command: SetPreviewScene) -> None:
        self._apply(
            f"Failed to set preview scene {command.scene_name}. Is studio mode enabled?",
            self.studio.set_preview_scene,
            command.scene_name,
        )

    # Outputs
    def _recording(self, command: RecordingControl) -> None:
        self._apply(
            f"Failed to {command.action} recording",
            self.studio.control_recording,
            command.action,
        )

    def _streaming(self, command: StreamingControl) -> None:
        self._apply(
            f"Failed to {command.action} streaming",
            self.studio.control_streaming,
            command.action,
        )

    def _studio_mode(self, command: StudioModeControl) -> None:
        if command.action == "toggle":
            enabled = not self._query(self.studio.get_studio_mode)
        else:
            enabled = command.action == "enable"
        self._apply(
            f"Failed to {'enable' if enabled else 'disable'} studio mode",
            self.studio.set_studio_mode,
            enabled,
        )

    # Items and filters
    def _item_visibility(self, command: SetItemVisibility) -> None:
        if self._apply(
            "Invalid syntax. Use /[sceneName]/[sourceName]/visible 0 or 1, "
            "e.g.: /Wide/VOX/visible 1",
            self.studio.set_item_properties,
            command.scene_name,
            command.item_name,
            visible=command.visible,
        ):
            self.state.select_item(command.scene_name, command.item_name)

    def _filter_visibility(self, command: SetFilterVisibility) -> None:
        self._apply(
            "Invalid syntax. Use /[sourceName]/[filterName]/filterVisibility 0 or 1, "
            "e.g.: /VOX/chroma/filterVisibility 1",
            self.studio.set_filter_visibility,
            command.source_name,
            command.filter_name,
            command.enabled,
        )

    def _filter_opacity(self, command: SetFilterOpacity) -> None:
        self._apply(
            "Opacity command incorrect syntax. Use /[sourceName]/[filterName]/opacity 0.5",
            self.studio.set_filter_settings,
            command.source_name,
            command.filter_name,
            {"opacity": command.opacity},
        )

    def _item_position(self, command: SetItemPosition) -> None:
        if self._apply(
            "Invalid position syntax. Use /[sceneName]/[sourceName]/position x y",
            self.studio.set_item_properties,
            command.scene_name,
            command.item_name,
            position={"x": command.x, "y": command.y},
        ):
            self.state.select_item(command.scene_name, command.item_name)

    def _item_scale(self, command: SetItemScale) -> None:
        if self._apply(
            "Invalid scale syntax. Use /[sceneName]/[sourceName]/scale 1",
            self.studio.set_item_properties,
            command.scene_name,
            command.item_name,
            scale=command.scale,
        ):
            self.state.select_item(command.scene_name, command.item_name)

    def _item_rotation(self, command: SetItemRotation) -> None:
        if self._apply(
            "Invalid rotation syntax. Use /[sceneName]/[sourceName]/rotate 90",
            self.studio.set_item_properties,
            command.scene_name,
            command.item_name,
            rotation=command.rotation,
        ):
            self.state.select_item(command.scene_name, command.item_name)

    def _selected_item_in_current_scene(self) -> Tuple[str, str]:
        """Current program scene and the remembered item, verified to be in it"""
        selected = self.state.selected_item
        if selected is None:
            raise ValidationError("item", None, "no scene item selected", hint=SELECT_ITEM_HINT)
        item_name = selected[1]
        scene_name = self._query(self.studio.get_current_scene)
        if item_name not in self._query(self.studio.list_scene_items, scene_name):
            raise StaleStateError(f"Scene item in '{scene_name}'", item_name)
        return scene_name, item_name

    def _move_selected(self, command: MoveSelectedItem) -> None:
        scene_name, item_name = self._selected_item_in_current_scene()
        position = {}
        if command.x is not None:
            position["x"] = command.x
        if command.y is not None:
            position["y"] = command.y
        self._apply(
            "Invalid position syntax",
            self.studio.set_item_properties,
            scene_name,
            item_name,
            position=position,
            alignment=0,
        )

    def _align_selected(self, command: AlignSelectedItem) -> None:
        scene_name, item_name = self._selected_item_in_current_scene()
        x, y = self.canvas_center
        self._apply(
            "Select a scene item for alignment",
            self.studio.set_item_properties,
            scene_name,
            item_name,
            position={"x": x, "y": y},
            alignment=command.alignment,
        )

    def _size_selected(self, command: SetSelectedItemSize) -> None:
        scene_name, item_name = self._selected_item_in_current_scene()
        self._apply(
            "Select a scene item for size",
            self.studio.set_item_properties,
            scene_name,
            item_name,
            scale=command.scale,
        )

    # Transitions
    def _transition(self, command: SetTransition) -> None:
        if not command.is_instant and command.duration_ms is None:
            self._log_current_duration()

        if self._apply(
            f"Failed to set transition '{command.obs_name}'",
            self.studio.set_transition,
            command.obs_name,
        ):
            self.state.record_transition(command.obs_name)

        # Attempted even when the transition switch was rejected
        if command.duration_ms is not None:
            self._apply(
                f"Failed to set transition duration to {command.duration_ms}ms",
                self.studio.set_transition_duration,
                command.duration_ms,
            )

    def _log_current_duration(self) -> None:
        try:
            duration = self.studio.get_transition_duration()
        except StudioConnectionError:
            raise
        except StudioRequestError as e:
            self.error_handler.record_error("rejected", e)
            return
        logger.info(f"Current Duration: {duration}")

    def _transition_override(self, command: SetTransitionOverride) -> None:
        scene_name = self._query(self.studio.get_current_scene)
        self._apply(
            f"Failed to set transition override '{command.transition_name}' on '{scene_name}'",
            self.studio.set_scene_transition_override,
            scene_name,
            command.transition_name,
        )

    def _transition_override_duration(
        self, command: SetTransitionOverrideDuration
    ) -> None:
        scene_name = self._query(self.studio.get_current_scene)
        override = self._query(self.studio.get_scene_transition_override, scene_name)
        self._apply(
            f"Failed to set transition override duration on '{scene_name}'",
            self.studio.set_scene_transition_override,
            scene_name,
            override.get("transitionName"),
            command.duration_ms,
        )
