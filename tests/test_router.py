"""Inbound message router."""

from __future__ import annotations

import asyncio

import pytest

from richtext.bridge import router
from richtext.bridge.router import parse_message
from richtext.vocabulary import MessageKind
from tests.helpers import message


def test_every_message_kind_has_a_handler():
    assert set(router._handlers) == set(MessageKind)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not json",
        b"\xff\xfe",
        "[1, 2]",
        '"string"',
        '{"data": 1}',
        '{"type": 5}',
        "null",
        '{"type":"LOG","data":' + "1" * 5000 + "}",
        "[" * 200_000 + "]" * 200_000,
    ],
    ids=[
        "empty",
        "not-json",
        "bad-utf8",
        "array",
        "string",
        "no-type",
        "numeric-type",
        "null",
        "oversized-integer",
        "deep-nesting",
    ],
)
def test_malformed_messages_are_dropped(editor, transport, raw):
    assert parse_message(raw) is None
    editor.on_message(raw)
    assert transport.scripts == []


def test_unknown_kind_is_ignored(editor, transport):
    editor.on_message(message("SOMETHING_NEW", {"x": 1}))
    assert transport.scripts == []


def test_request_id_alias_is_parsed():
    parsed = parse_message(message("CONTENT_HTML_RESPONSE", "<p/>", requestId="1"))
    assert parsed.request_id == "1"
    assert parsed.data == "<p/>"


def test_numeric_request_id_is_coerced_to_string():
    parsed = parse_message(message("TITLE_TEXT_RESPONSE", "x", requestId=7))
    assert parsed is not None
    assert parsed.request_id == "7"


@pytest.mark.asyncio
async def test_response_with_numeric_request_id_settles_its_query(editor):
    task = asyncio.create_task(editor.get_title_text())
    await asyncio.sleep(0)
    (request_id,) = editor.pending.outstanding()

    editor.on_message(message("TITLE_TEXT_RESPONSE", "Hello", requestId=int(request_id)))

    assert await task == "Hello"
    assert len(editor.pending) == 0


@pytest.mark.asyncio
async def test_response_resolves_pending_request(editor):
    task = asyncio.create_task(editor.get_title_text())
    await asyncio.sleep(0)

    editor.on_message(message("TITLE_TEXT_RESPONSE", "Hello"))

    assert await task == "Hello"
    assert len(editor.pending) == 0


def test_orphaned_response_does_not_raise(editor, transport):
    editor.on_message(message("CONTENT_HTML_RESPONSE", "<p>late</p>"))
    assert len(editor.pending) == 0
    assert transport.scripts == []


def test_selection_change_fans_out_in_order(editor):
    calls = []
    editor.register_toolbar(lambda items: calls.append(("L1", items)))
    editor.register_toolbar(lambda items: calls.append(("L2", items)))

    editor.on_message(message("SELECTION_CHANGE", {"items": ["bold", "italic"]}))

    assert calls == [("L1", ["bold", "italic"]), ("L2", ["bold", "italic"])]
    assert calls[0][1] is calls[1][1]


def test_content_change_fans_out_content(editor):
    seen = []
    editor.register_content_change_listener(seen.append)
    editor.on_message(message("CONTENT_CHANGE", {"content": "<p>new</p>"}))
    assert seen == ["<p>new</p>"]


def test_selection_change_with_bad_data_passes_none(editor):
    seen = []
    editor.register_toolbar(seen.append)
    editor.on_message(message("SELECTION_CHANGE", "not a dict"))
    assert seen == [None]


def test_selected_text_change_fans_out_raw_data(editor):
    seen = []
    editor.add_selected_text_change_listener(seen.append)
    editor.on_message(message("SELECTED_TEXT_CHANGED", "some words"))
    assert seen == ["some words"]


def test_focus_handlers(editor):
    calls = []
    editor.on_message(message("TITLE_FOCUSED"))  # no handler registered yet
    editor.set_title_focus_handler(lambda: calls.append("title"))
    editor.set_content_focus_handler(lambda: calls.append("content"))

    editor.on_message(message("TITLE_FOCUSED"))
    editor.on_message(message("CONTENT_FOCUSED"))

    assert calls == ["title", "content"]


def test_failing_focus_handler_is_contained(editor, caplog):
    def broken():
        raise RuntimeError("handler blew up")

    editor.set_title_focus_handler(broken)
    editor.on_message(message("TITLE_FOCUSED"))
    assert "handler blew up" in caplog.text


def test_scroll_forwards_offset(editor):
    offsets = []
    editor.set_scroll_handler(offsets.append)

    editor.on_message(message("SCROLL", 240))
    editor.on_message(message("SCROLL", "nope"))
    editor.on_message(message("SCROLL", True))

    assert offsets == [240]
    assert editor.content_offset == 240


def test_link_touched_prepares_insert_and_opens_dialog(editor, transport):
    dialogs = []
    editor.set_link_dialog_handler(dialogs.append)

    editor.on_message(message("LINK_TOUCHED", {"title": "Docs", "url": "https://example.com"}))

    assert transport.types == ["prepareInsert"]
    assert editor.link_dialog.visible
    assert editor.link_dialog.title == "Docs"
    assert editor.link_dialog.url == "https://example.com"
    assert not editor.link_dialog.is_new_link
    assert dialogs == [editor.link_dialog]


def test_link_touched_with_garbage_data_opens_empty_dialog(editor):
    editor.on_message(message("LINK_TOUCHED", {"title": 3}))
    assert editor.link_dialog.visible
    assert editor.link_dialog.title == ""
    assert editor.link_dialog.is_new_link


def test_inserted_image_pushes_grid_size(editor, transport):
    editor.on_message(message("INSERTED_IMAGE"))
    assert transport.instructions == [
        {"type": "updateGridView", "data": {"calibratedHeight": 120, "calibratedWidth": 120}}
    ]


def test_add_image_button_callback(editor):
    calls = []
    editor.on_add_image_button_press = lambda: calls.append(True)
    editor.on_message(message("ADD_IMAGE_BUTTON_ONPRESS"))
    assert calls == [True]


def test_log_message_is_logged_without_side_effects(editor, transport, caplog):
    caplog.set_level("INFO", logger="richtext.bridge.router")
    editor.on_message(message("LOG", "hello from page"))
    assert "hello from page" in caplog.text
    assert transport.scripts == []
