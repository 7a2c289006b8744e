"""Inbound message router: parses renderer events and dispatches by kind.

The renderer is untrusted. Anything that does not parse as
``{"type": ..., "data": ...}`` is dropped, unknown kinds are ignored, and
handlers read ``data`` defensively. ``on_message`` never raises.

Handlers are registered per ``MessageKind`` with ``@handles``; importing this
module fails if any kind is left without one.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from richtext.schemas import InboundMessage
from richtext.vocabulary import RESPONSE_KINDS, MessageKind

if TYPE_CHECKING:
    from richtext.editor import RichTextEditor

logger = logging.getLogger(__name__)

Handler = Callable[["RichTextEditor", InboundMessage], None]

_handlers: dict[MessageKind, Handler] = {}


def handles(*kinds: MessageKind) -> Callable[[Handler], Handler]:
    """Register the decorated function as the handler for ``kinds``."""

    def decorator(fn: Handler) -> Handler:
        for kind in kinds:
            if kind in _handlers:
                raise RuntimeError(f"Duplicate handler for {kind.value}")
            _handlers[kind] = fn
        return fn

    return decorator


def parse_message(raw: str | bytes) -> InboundMessage | None:
    """Parse one raw event payload, or return None if it is malformed."""
    # ValueError also covers bad encodings and integers past the digit limit.
    try:
        payload = json.loads(raw)
        return InboundMessage.model_validate(payload)
    except (json.JSONDecodeError, ValidationError, ValueError, TypeError, RecursionError) as e:
        logger.debug(f"Dropping malformed renderer message: {e}")
        return None


def _field(data: Any, key: str, default: Any = None) -> Any:
    if isinstance(data, dict):
        return data.get(key, default)
    return default


class MessageRouter:
    """Routes renderer events into one ``RichTextEditor``."""

    def __init__(self, editor: RichTextEditor) -> None:
        self.editor = editor

    def on_message(self, raw: str | bytes) -> None:
        message = parse_message(raw)
        if message is None:
            return
        try:
            kind = MessageKind(message.type)
        except ValueError:
            logger.debug(f"Ignoring unknown message type '{message.type}'")
            return
        try:
            _handlers[kind](self.editor, message)
        except Exception:
            logger.exception(f"Handler for {kind.value} failed")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


@handles(*RESPONSE_KINDS)
def _query_response(editor: RichTextEditor, message: InboundMessage) -> None:
    kind = RESPONSE_KINDS[MessageKind(message.type)]
    editor.pending.resolve(kind, message.data, message.request_id)


@handles(MessageKind.ZSS_INITIALIZED)
def _initialized(editor: RichTextEditor, message: InboundMessage) -> None:
    editor.run_setup_sequence()


@handles(MessageKind.LINK_TOUCHED)
def _link_touched(editor: RichTextEditor, message: InboundMessage) -> None:
    title = _field(message.data, "title", "")
    url = _field(message.data, "url", "")
    editor.prepare_insert()
    editor.show_link_dialog(
        title if isinstance(title, str) else "",
        url if isinstance(url, str) else "",
    )


@handles(MessageKind.LOG)
def _log(editor: RichTextEditor, message: InboundMessage) -> None:
    logger.info(f"FROM RENDERER {message.data!r}")


@handles(MessageKind.SCROLL)
def _scroll(editor: RichTextEditor, message: InboundMessage) -> None:
    offset = message.data
    if isinstance(offset, bool) or not isinstance(offset, (int, float)):
        logger.debug(f"Ignoring non-numeric scroll offset {offset!r}")
        return
    editor.scroll_to(offset)


@handles(MessageKind.TITLE_FOCUSED)
def _title_focused(editor: RichTextEditor, message: InboundMessage) -> None:
    if editor.title_focus_handler:
        editor.title_focus_handler()


@handles(MessageKind.CONTENT_FOCUSED)
def _content_focused(editor: RichTextEditor, message: InboundMessage) -> None:
    if editor.content_focus_handler:
        editor.content_focus_handler()


@handles(MessageKind.SELECTION_CHANGE)
def _selection_change(editor: RichTextEditor, message: InboundMessage) -> None:
    editor.selection_listeners.notify(_field(message.data, "items"))


@handles(MessageKind.CONTENT_CHANGE)
def _content_change(editor: RichTextEditor, message: InboundMessage) -> None:
    editor.content_change_listeners.notify(_field(message.data, "content"))


@handles(MessageKind.SELECTED_TEXT_CHANGED)
def _selected_text_changed(editor: RichTextEditor, message: InboundMessage) -> None:
    editor.selected_text_listeners.notify(message.data)


@handles(MessageKind.INSERTED_IMAGE)
def _inserted_image(editor: RichTextEditor, message: InboundMessage) -> None:
    editor.update_grid_view()


@handles(MessageKind.ADD_IMAGE_BUTTON_ONPRESS)
def _add_image_button(editor: RichTextEditor, message: InboundMessage) -> None:
    if editor.on_add_image_button_press:
        editor.on_add_image_button_press()


_missing = [k.value for k in MessageKind if k not in _handlers]
if _missing:
    raise RuntimeError(f"No handler registered for message kind(s): {_missing}")
