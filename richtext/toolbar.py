"""Toolbar controller: button state and button presses, without any UI.

The toolbar follows the editor's selection (the renderer reports which
formats are active) and turns button presses into editor calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from richtext.errors import ToolbarConfigurationError
from richtext.vocabulary import FORMATTING_ACTIONS, Action

if TYPE_CHECKING:
    from richtext.bridge.listeners import Subscription
    from richtext.editor import RichTextEditor

logger = logging.getLogger(__name__)

DEFAULT_ACTIONS = [
    Action.INSERT_IMAGE,
    Action.SET_BOLD,
    Action.SET_ITALIC,
    Action.INSERT_BULLETS_LIST,
    Action.INSERT_ORDERED_LIST,
    Action.INSERT_LINK,
]

# Prefix the renderer puts on an image's close button id.
CLOSE_BUTTON_PREFIX = "closeButton"


class Toolbar:
    def __init__(
        self,
        get_editor: Callable[[], RichTextEditor | None],
        actions: Iterable[Action] | None = None,
        on_press_add_link: Callable[[], Any] | None = None,
        on_add_image_pressed: Callable[[], Any] | None = None,
        on_camera_pressed: Callable[[], Any] | None = None,
        on_video_pressed: Callable[[], Any] | None = None,
        on_hash_tag_pressed: Callable[[], Any] | None = None,
    ) -> None:
        self.get_editor = get_editor
        self.actions = list(actions) if actions else list(DEFAULT_ACTIONS)
        self.on_press_add_link = on_press_add_link
        self.on_add_image_pressed = on_add_image_pressed
        self.on_camera_pressed = on_camera_pressed
        self.on_video_pressed = on_video_pressed
        self.on_hash_tag_pressed = on_hash_tag_pressed

        self.editor: RichTextEditor | None = None
        self.selected_items: list[str] = []
        self._subscription: Subscription | None = None

    def attach(self) -> RichTextEditor:
        """Bind to the editor. A toolbar without an editor is a setup error."""
        editor = self.get_editor()
        if editor is None:
            raise ToolbarConfigurationError("Toolbar has no editor!")
        self.editor = editor
        self._subscription = editor.register_toolbar(self.set_selected_items)
        return editor

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.editor = None

    def set_selected_items(self, items: Any) -> None:
        self.selected_items = [i for i in items if isinstance(i, str)] if isinstance(items, list) else []

    def rows(self) -> list[dict[str, Any]]:
        return [
            {"action": action, "selected": action.value in self.selected_items}
            for action in self.actions
        ]

    def _require_editor(self) -> RichTextEditor:
        if self.editor is None:
            raise ToolbarConfigurationError("Toolbar is not attached to an editor")
        return self.editor

    async def press(self, action: Action) -> None:
        editor = self._require_editor()

        if action in FORMATTING_ACTIONS:
            editor.send_action(action)
            return

        match action:
            case Action.INSERT_LINK:
                editor.prepare_insert()
                if self.on_press_add_link:
                    self.on_press_add_link()
                else:
                    selected_text = await editor.get_selected_text()
                    editor.show_link_dialog(selected_text if isinstance(selected_text, str) else "")
            case Action.INSERT_IMAGE:
                editor.prepare_insert()
                if self.on_add_image_pressed:
                    self.on_add_image_pressed()
            case Action.TAKE_VIDEO:
                editor.prepare_insert()
                if self.on_video_pressed:
                    self.on_video_pressed()
            case Action.TAKE_PHOTO:
                editor.prepare_insert()
                if self.on_camera_pressed:
                    self.on_camera_pressed()
            case Action.HASH_TAG:
                if self.on_hash_tag_pressed:
                    self.on_hash_tag_pressed()
            case _:
                logger.debug(f"No toolbar behaviour for '{action.value}'")

    def remove_failed_uploads(self, failed_ids: Iterable[str]) -> int:
        """Remove the images whose upload failed. Returns how many."""
        editor = self._require_editor()
        count = 0
        for image_id in failed_ids:
            editor.remove_image_with_id(f"{CLOSE_BUTTON_PREFIX}{image_id}")
            count += 1
        if count:
            logger.warning(f"Removed {count} image(s) whose upload failed")
        return count
