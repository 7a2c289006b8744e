"""Host-side API of the rich-text editor.

``RichTextEditor`` owns one bridge to one renderer: the outbound channel,
the pending request table, the listener registries and the message router.
Collaborators (toolbar, screens, the upload pipeline) only ever talk to this
class.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from richtext.bridge.channel import OutboundChannel, RendererTransport
from richtext.bridge.encoder import encode
from richtext.bridge.listeners import Listener, ListenerRegistry, Subscription
from richtext.bridge.pending import PendingRequestTable
from richtext.bridge.router import MessageRouter
from richtext.config import EditorConfig
from richtext.decoder import decode, parse_html
from richtext.errors import RendererDetachedError
from richtext.schemas import ContentBlock, LinkDialogState
from richtext.vocabulary import Action, QueryKind

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class RichTextEditor:
    def __init__(
        self,
        config: EditorConfig | None = None,
        transport: RendererTransport | None = None,
        editor_initialized_callback: Callback | None = None,
        on_add_image_button_press: Callback | None = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.channel = OutboundChannel(transport)
        self.pending = PendingRequestTable(timeout=self.config.query_timeout)
        self.router = MessageRouter(self)

        self.selection_listeners = ListenerRegistry("selection")
        self.content_change_listeners = ListenerRegistry("content change")
        self.selected_text_listeners = ListenerRegistry("selected text")

        self.editor_initialized_callback = editor_initialized_callback
        self.on_add_image_button_press = on_add_image_button_press
        self.title_focus_handler: Callback | None = None
        self.content_focus_handler: Callback | None = None
        self.scroll_handler: Callable[[float], Any] | None = None
        self.link_dialog_handler: Callable[[LinkDialogState], Any] | None = None

        self.link_dialog = LinkDialogState()
        self.content_offset: float = 0
        self._initialized = False

    # ------------------------------------------------------------------
    # Bridge plumbing
    # ------------------------------------------------------------------

    def send_action(self, action: Action | str, data: Any = None) -> bool:
        """Encode and send one instruction. No-op when no renderer is attached."""
        if not self.channel.attached:
            return False
        return self.channel.send(encode(action, data))

    def on_message(self, raw: str | bytes) -> None:
        self.router.on_message(raw)

    def attach_renderer(self, transport: RendererTransport) -> None:
        """Point the editor at a (new) renderer page and run its load sequence."""
        if self.channel.attached:
            self.detach_renderer()
        self.channel.attach(transport)
        self.on_renderer_loaded()

    def detach_renderer(self) -> None:
        """Drop the renderer; pending queries fail with ``RendererDetachedError``."""
        self.channel.detach()
        self.pending.reject_all(RendererDetachedError("Renderer detached"))

    def apply_config(self, config: EditorConfig) -> None:
        """Swap in a reloaded config. Takes effect on the next renderer load."""
        self.config = config
        self.pending.timeout = config.query_timeout

    def on_renderer_loaded(self) -> None:
        self._initialized = False
        if self.config.editor_height is not None:
            self.set_editor_height(self.config.editor_height)
        self.send_action(Action.INIT)
        self.set_platform()
        if self.config.footer_height:
            self.set_footer_height()

    def run_setup_sequence(self) -> None:
        """Seed a freshly initialized renderer. Runs once per renderer load."""
        if self._initialized:
            logger.debug("Renderer already initialized, skipping setup")
            return
        self._initialized = True

        cfg = self.config
        if cfg.custom_css:
            self.set_custom_css(cfg.custom_css)
        self.set_title_placeholder(cfg.title_placeholder)
        self.set_content_placeholder(cfg.content_placeholder)
        self.set_title_html(cfg.initial_title_html or "")
        self.set_content_html(cfg.initial_content_html or "")
        if cfg.hidden_title:
            self.hide_title()
        if cfg.enable_on_change:
            self.enable_on_change()
        if self.editor_initialized_callback:
            self.editor_initialized_callback()

    # ------------------------------------------------------------------
    # Registration hooks
    # ------------------------------------------------------------------

    def register_toolbar(self, listener: Listener) -> Subscription:
        return self.selection_listeners.add(listener)

    def register_content_change_listener(self, listener: Listener) -> Subscription:
        return self.content_change_listeners.add(listener)

    def add_selected_text_change_listener(self, listener: Listener) -> Subscription:
        return self.selected_text_listeners.add(listener)

    def set_title_focus_handler(self, handler: Callback) -> None:
        self.title_focus_handler = handler
        self.send_action(Action.SET_TITLE_FOCUS_HANDLER)

    def set_content_focus_handler(self, handler: Callback) -> None:
        self.content_focus_handler = handler
        self.send_action(Action.SET_CONTENT_FOCUS_HANDLER)

    def set_scroll_handler(self, handler: Callable[[float], Any]) -> None:
        self.scroll_handler = handler

    def set_link_dialog_handler(self, handler: Callable[[LinkDialogState], Any]) -> None:
        self.link_dialog_handler = handler

    def scroll_to(self, offset: float) -> None:
        self.content_offset = offset
        if self.scroll_handler:
            self.scroll_handler(offset)

    # ------------------------------------------------------------------
    # Link dialog
    # ------------------------------------------------------------------

    def show_link_dialog(self, title: str = "", url: str = "") -> None:
        self.link_dialog = LinkDialogState(visible=True, initial_url=url, title=title, url=url)
        if self.link_dialog_handler:
            self.link_dialog_handler(self.link_dialog)

    def submit_link_dialog(self, title: str, url: str) -> None:
        """Insert or update the link the dialog was opened for, then close it."""
        if not title.strip() or not url.strip():
            raise ValueError("Link title and URL must both be non-empty")
        if self.link_dialog.is_new_link:
            self.insert_link(url, title)
        else:
            self.update_link(url, title)
        self.cancel_link_dialog()

    def cancel_link_dialog(self) -> None:
        self.link_dialog = LinkDialogState()

    # ------------------------------------------------------------------
    # Configuration commands
    # ------------------------------------------------------------------

    def set_platform(self) -> None:
        self.send_action(Action.SET_PLATFORM, self.config.platform)

    def set_footer_height(self) -> None:
        self.send_action(Action.SET_FOOTER_HEIGHT, self.config.footer_height)

    def set_editor_height(self, height: int) -> None:
        self.send_action(Action.SET_EDITOR_HEIGHT, height)

    def set_custom_css(self, css: str) -> None:
        self.send_action(Action.SET_CUSTOM_CSS, css)

    def set_title_placeholder(self, placeholder: str | None) -> None:
        self.send_action(Action.SET_TITLE_PLACEHOLDER, placeholder)

    def set_content_placeholder(self, placeholder: str | None) -> None:
        self.send_action(Action.SET_CONTENT_PLACEHOLDER, placeholder)

    def enable_on_change(self) -> None:
        self.send_action(Action.ENABLE_ON_CHANGE)

    # ------------------------------------------------------------------
    # Content, title and focus
    # ------------------------------------------------------------------

    def set_title_html(self, html: str) -> None:
        self.send_action(Action.SET_TITLE_HTML, html)

    def set_content_html(self, html: str) -> None:
        self.send_action(Action.SET_CONTENT_HTML, html)

    def hide_title(self) -> None:
        self.send_action(Action.HIDE_TITLE)

    def show_title(self) -> None:
        self.send_action(Action.SHOW_TITLE)

    def toggle_title(self) -> None:
        self.send_action(Action.TOGGLE_TITLE)

    def focus_title(self) -> None:
        self.send_action(Action.FOCUS_TITLE)

    def focus_content(self) -> None:
        self.send_action(Action.FOCUS_CONTENT)

    def blur_title_editor(self) -> None:
        self.send_action(Action.BLUR_TITLE_EDITOR)

    def blur_content_editor(self) -> None:
        self.send_action(Action.BLUR_CONTENT_EDITOR)

    def prepare_insert(self) -> None:
        self.send_action(Action.PREPARE_INSERT)

    def restore_selection(self) -> None:
        self.send_action(Action.RESTORE_SELECTION)

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def set_bold(self) -> None:
        self.send_action(Action.SET_BOLD)

    def set_italic(self) -> None:
        self.send_action(Action.SET_ITALIC)

    def set_underline(self) -> None:
        self.send_action(Action.SET_UNDERLINE)

    def set_strikethrough(self) -> None:
        self.send_action(Action.SET_STRIKETHROUGH)

    def set_subscript(self) -> None:
        self.send_action(Action.SET_SUBSCRIPT)

    def set_superscript(self) -> None:
        self.send_action(Action.SET_SUPERSCRIPT)

    def remove_format(self) -> None:
        self.send_action(Action.REMOVE_FORMAT)

    def heading1(self) -> None:
        self.send_action(Action.HEADING1)

    def heading2(self) -> None:
        self.send_action(Action.HEADING2)

    def heading3(self) -> None:
        self.send_action(Action.HEADING3)

    def heading4(self) -> None:
        self.send_action(Action.HEADING4)

    def heading5(self) -> None:
        self.send_action(Action.HEADING5)

    def heading6(self) -> None:
        self.send_action(Action.HEADING6)

    def set_paragraph(self) -> None:
        self.send_action(Action.SET_PARAGRAPH)

    def align_left(self) -> None:
        self.send_action(Action.ALIGN_LEFT)

    def align_center(self) -> None:
        self.send_action(Action.ALIGN_CENTER)

    def align_right(self) -> None:
        self.send_action(Action.ALIGN_RIGHT)

    def align_full(self) -> None:
        self.send_action(Action.ALIGN_FULL)

    def insert_bullets_list(self) -> None:
        self.send_action(Action.INSERT_BULLETS_LIST)

    def insert_ordered_list(self) -> None:
        self.send_action(Action.INSERT_ORDERED_LIST)

    def set_indent(self) -> None:
        self.send_action(Action.SET_INDENT)

    def set_outdent(self) -> None:
        self.send_action(Action.SET_OUTDENT)

    def set_hr(self) -> None:
        self.send_action(Action.SET_HR)

    def set_text_color(self, color: str) -> None:
        self.send_action(Action.SET_TEXT_COLOR, color)

    def set_background_color(self, color: str) -> None:
        self.send_action(Action.SET_BACKGROUND_COLOR, color)

    def insert_link(self, url: str, title: str) -> None:
        self.send_action(Action.INSERT_LINK, {"url": url, "title": title})

    def update_link(self, url: str, title: str) -> None:
        self.send_action(Action.UPDATE_LINK, {"url": url, "title": title})

    # ------------------------------------------------------------------
    # Images and the image grid
    # ------------------------------------------------------------------

    def get_calibrated_size(self) -> dict[str, int]:
        """Square cell size the grid expects, from the configured grid width."""
        width = self.config.grid_width
        return {"calibratedWidth": width, "calibratedHeight": width}

    # The renderer applies prepareInsert to the *next* insert, so it is sent
    # after each insert command rather than before.

    def insert_image(
        self,
        attributes: dict[str, Any],
        close_image_data: str | None = None,
        show_video_thumbnail: bool = False,
    ) -> None:
        self.send_action(
            Action.INSERT_IMAGE,
            {
                "attributes": attributes,
                "closeImageData": close_image_data,
                "showVideoThumbnail": show_video_thumbnail,
            },
        )
        self.prepare_insert()

    def insert_image_into_grid(self, attributes: dict[str, Any], close_image_data: str | None = None) -> None:
        attributes = {**attributes, **self.get_calibrated_size()}
        self.send_action(
            Action.INSERT_IMAGE_INTO_GRID,
            {"attributes": attributes, "closeImageData": close_image_data},
        )
        self.prepare_insert()

    def create_grid_image_group(self) -> None:
        size = self.get_calibrated_size()
        attributes = {
            "width": size["calibratedWidth"],
            "height": size["calibratedHeight"],
            "groupId": "0",
        }
        self.send_action(Action.CREATE_GRID_IMAGE_GROUP, {"attributes": attributes})
        self.prepare_insert()

    def update_grid_view(self) -> None:
        self.send_action(Action.UPDATE_GRID_VIEW, self.get_calibrated_size())

    def update_image_with_url(self, url: str, media_id: str, local_id: str) -> None:
        self.send_action(
            Action.UPDATE_IMAGE_WITH_URL, {"url": url, "mediaId": media_id, "localId": local_id}
        )

    def remove_dim_filter(self, index: str | int) -> None:
        self.send_action(Action.REMOVE_DIM_FILTER, index)

    def remove_image_with_id(self, image_id: str) -> None:
        self.send_action(Action.REMOVE_IMAGE_WITH_ID, image_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def query(self, kind: QueryKind) -> Any:
        if not self.channel.attached:
            raise RendererDetachedError(f"Cannot query {kind.value}: no renderer attached")
        request = self.pending.open(kind)
        self.send_action(kind.action, {"requestId": request.request_id})
        try:
            return await request.future
        finally:
            # Still listed only if the caller was cancelled before the response.
            if request.request_id in self.pending:
                self.pending.cancel(request.request_id)

    async def get_title_html(self) -> str:
        return await self.query(QueryKind.TITLE_HTML)

    async def get_title_text(self) -> str:
        return await self.query(QueryKind.TITLE_TEXT)

    async def get_content_html(self) -> str:
        return await self.query(QueryKind.CONTENT_HTML)

    async def get_selected_text(self) -> str:
        return await self.query(QueryKind.SELECTED_TEXT)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def parse_html(self, html: str) -> str:
        return parse_html(html, self.config.image_cdn_prefix)

    async def get_blocks(self) -> list[ContentBlock]:
        content = await self.get_content_html()
        return decode(content if isinstance(content, str) else "", self.config.image_cdn_prefix)

    async def get_html(self) -> str:
        """Fetch the content HTML and return it as ``{"blocks": [...]}`` JSON."""
        content = await self.get_content_html()
        html = content if isinstance(content, str) else ""
        logger.debug(f"Exporting content ({len(html)} chars)")
        return self.parse_html(html)
