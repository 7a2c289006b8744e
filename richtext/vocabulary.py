"""Closed vocabularies for both directions of the bridge.

``Action`` is what the host can ask the renderer to do, ``MessageKind`` is
what the renderer can report back. Both are ``str`` enums so their values go
over the wire unchanged.
"""

from __future__ import annotations

from enum import Enum

from richtext.errors import UnknownActionError


class Action(str, Enum):
    # lifecycle and configuration
    INIT = "init"
    SET_PLATFORM = "setPlatform"
    SET_FOOTER_HEIGHT = "setFooterHeight"
    SET_EDITOR_HEIGHT = "setEditorHeight"
    SET_CUSTOM_CSS = "setCustomCSS"
    SET_TITLE_PLACEHOLDER = "setTitlePlaceholder"
    SET_CONTENT_PLACEHOLDER = "setContentPlaceholder"
    ENABLE_ON_CHANGE = "enableOnChange"
    SET_TITLE_FOCUS_HANDLER = "setTitleFocusHandler"
    SET_CONTENT_FOCUS_HANDLER = "setContentFocusHandler"

    # content
    SET_TITLE_HTML = "setTitleHtml"
    SET_CONTENT_HTML = "setContentHtml"
    GET_TITLE_HTML = "getTitleHtml"
    GET_TITLE_TEXT = "getTitleText"
    GET_CONTENT_HTML = "getContentHtml"
    GET_SELECTED_TEXT = "getSelectedText"

    # title visibility and focus
    TOGGLE_TITLE = "toggleTitle"
    HIDE_TITLE = "hideTitle"
    SHOW_TITLE = "showTitle"
    FOCUS_TITLE = "focusTitle"
    FOCUS_CONTENT = "focusContent"
    BLUR_TITLE_EDITOR = "blurTitleEditor"
    BLUR_CONTENT_EDITOR = "blurContentEditor"

    # inline formatting
    SET_BOLD = "setBold"
    SET_ITALIC = "setItalic"
    SET_UNDERLINE = "setUnderline"
    SET_STRIKETHROUGH = "setStrikethrough"
    SET_SUBSCRIPT = "setSubscript"
    SET_SUPERSCRIPT = "setSuperscript"
    REMOVE_FORMAT = "removeFormat"
    SET_TEXT_COLOR = "setTextColor"
    SET_BACKGROUND_COLOR = "setBackgroundColor"

    # block formatting
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HEADING4 = "heading4"
    HEADING5 = "heading5"
    HEADING6 = "heading6"
    SET_PARAGRAPH = "setParagraph"
    ALIGN_LEFT = "alignLeft"
    ALIGN_CENTER = "alignCenter"
    ALIGN_RIGHT = "alignRight"
    ALIGN_FULL = "alignFull"
    INSERT_BULLETS_LIST = "insertBulletsList"
    INSERT_ORDERED_LIST = "insertOrderedList"
    SET_INDENT = "setIndent"
    SET_OUTDENT = "setOutdent"
    SET_HR = "setHR"

    # links
    INSERT_LINK = "insertLink"
    UPDATE_LINK = "updateLink"

    # images
    INSERT_IMAGE = "insertImage"
    INSERT_IMAGE_INTO_GRID = "insertImageIntoGrid"
    CREATE_GRID_IMAGE_GROUP = "createGridImageGroup"
    UPDATE_GRID_VIEW = "updateGridView"
    UPDATE_IMAGE_WITH_URL = "updateImageWithUrl"
    REMOVE_IMAGE_WITH_ID = "removeImageWithId"
    REMOVE_DIM_FILTER = "removeDimFilter"

    # selection
    PREPARE_INSERT = "prepareInsert"
    RESTORE_SELECTION = "restoreSelection"

    # toolbar-only buttons, never sent to the renderer
    HASH_TAG = "hashTag"
    TAKE_PHOTO = "takePhoto"
    TAKE_VIDEO = "takeVideo"


class MessageKind(str, Enum):
    ZSS_INITIALIZED = "ZSS_INITIALIZED"
    TITLE_HTML_RESPONSE = "TITLE_HTML_RESPONSE"
    TITLE_TEXT_RESPONSE = "TITLE_TEXT_RESPONSE"
    CONTENT_HTML_RESPONSE = "CONTENT_HTML_RESPONSE"
    SELECTED_TEXT_RESPONSE = "SELECTED_TEXT_RESPONSE"
    LINK_TOUCHED = "LINK_TOUCHED"
    LOG = "LOG"
    SCROLL = "SCROLL"
    TITLE_FOCUSED = "TITLE_FOCUSED"
    CONTENT_FOCUSED = "CONTENT_FOCUSED"
    SELECTION_CHANGE = "SELECTION_CHANGE"
    CONTENT_CHANGE = "CONTENT_CHANGE"
    SELECTED_TEXT_CHANGED = "SELECTED_TEXT_CHANGED"
    INSERTED_IMAGE = "INSERTED_IMAGE"
    ADD_IMAGE_BUTTON_ONPRESS = "ADD_IMAGE_BUTTON_ONPRESS"


class QueryKind(str, Enum):
    """The four "fetch current state" requests and their wire pairings."""

    TITLE_HTML = "titleHtml"
    TITLE_TEXT = "titleText"
    CONTENT_HTML = "contentHtml"
    SELECTED_TEXT = "selectedText"

    @property
    def action(self) -> Action:
        return _QUERY_ACTIONS[self]

    @property
    def response(self) -> MessageKind:
        return _QUERY_RESPONSES[self]


_QUERY_ACTIONS: dict[QueryKind, Action] = {
    QueryKind.TITLE_HTML: Action.GET_TITLE_HTML,
    QueryKind.TITLE_TEXT: Action.GET_TITLE_TEXT,
    QueryKind.CONTENT_HTML: Action.GET_CONTENT_HTML,
    QueryKind.SELECTED_TEXT: Action.GET_SELECTED_TEXT,
}

_QUERY_RESPONSES: dict[QueryKind, MessageKind] = {
    QueryKind.TITLE_HTML: MessageKind.TITLE_HTML_RESPONSE,
    QueryKind.TITLE_TEXT: MessageKind.TITLE_TEXT_RESPONSE,
    QueryKind.CONTENT_HTML: MessageKind.CONTENT_HTML_RESPONSE,
    QueryKind.SELECTED_TEXT: MessageKind.SELECTED_TEXT_RESPONSE,
}

RESPONSE_KINDS: dict[MessageKind, QueryKind] = {v: k for k, v in _QUERY_RESPONSES.items()}

# Buttons that exist only on the toolbar; the renderer has no handler for them.
TOOLBAR_ONLY_ACTIONS = frozenset({Action.HASH_TAG, Action.TAKE_PHOTO, Action.TAKE_VIDEO})

# Formatting commands that take no payload and can be forwarded verbatim.
FORMATTING_ACTIONS = frozenset({
    Action.SET_BOLD,
    Action.SET_ITALIC,
    Action.SET_UNDERLINE,
    Action.SET_STRIKETHROUGH,
    Action.SET_SUBSCRIPT,
    Action.SET_SUPERSCRIPT,
    Action.REMOVE_FORMAT,
    Action.HEADING1,
    Action.HEADING2,
    Action.HEADING3,
    Action.HEADING4,
    Action.HEADING5,
    Action.HEADING6,
    Action.SET_PARAGRAPH,
    Action.ALIGN_LEFT,
    Action.ALIGN_CENTER,
    Action.ALIGN_RIGHT,
    Action.ALIGN_FULL,
    Action.INSERT_BULLETS_LIST,
    Action.INSERT_ORDERED_LIST,
    Action.SET_INDENT,
    Action.SET_OUTDENT,
    Action.SET_HR,
})


def resolve_action(command: Action | str) -> Action:
    """Return the ``Action`` for ``command``.

    Raises ``UnknownActionError`` for anything outside the vocabulary,
    including toolbar-only buttons.
    """
    try:
        action = Action(command)
    except ValueError:
        raise UnknownActionError(
            f"Unknown action '{command}'. Available: {sorted(a.value for a in Action)}"
        ) from None
    if action in TOOLBAR_ONLY_ACTIONS:
        raise UnknownActionError(f"'{action.value}' is a toolbar button, not a renderer command")
    return action
