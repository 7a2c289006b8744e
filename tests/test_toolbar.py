"""Toolbar controller."""

from __future__ import annotations

import asyncio

import pytest

from richtext.errors import ToolbarConfigurationError
from richtext.toolbar import DEFAULT_ACTIONS, Toolbar
from richtext.vocabulary import Action
from tests.helpers import message


def test_attach_without_editor_is_fatal():
    toolbar = Toolbar(get_editor=lambda: None)
    with pytest.raises(ToolbarConfigurationError, match="Toolbar has no editor!"):
        toolbar.attach()


def test_selection_updates_rows(editor):
    toolbar = Toolbar(get_editor=lambda: editor)
    toolbar.attach()

    editor.on_message(message("SELECTION_CHANGE", {"items": ["setBold", "insertLink"]}))

    rows = {row["action"]: row["selected"] for row in toolbar.rows()}
    assert list(rows) == DEFAULT_ACTIONS
    assert rows[Action.SET_BOLD] is True
    assert rows[Action.INSERT_LINK] is True
    assert rows[Action.SET_ITALIC] is False


def test_detach_stops_following_selection(editor):
    toolbar = Toolbar(get_editor=lambda: editor)
    toolbar.attach()
    toolbar.detach()

    editor.on_message(message("SELECTION_CHANGE", {"items": ["setBold"]}))

    assert toolbar.selected_items == []
    assert len(editor.selection_listeners) == 0


@pytest.mark.asyncio
async def test_formatting_press_forwards_action(editor, transport):
    toolbar = Toolbar(get_editor=lambda: editor)
    toolbar.attach()

    await toolbar.press(Action.HEADING2)

    assert transport.instructions == [{"type": "heading2", "data": None}]


@pytest.mark.asyncio
async def test_insert_link_uses_callback_when_given(editor, transport):
    pressed = []
    toolbar = Toolbar(get_editor=lambda: editor, on_press_add_link=lambda: pressed.append(True))
    toolbar.attach()

    await toolbar.press(Action.INSERT_LINK)

    assert transport.types == ["prepareInsert"]
    assert pressed == [True]


@pytest.mark.asyncio
async def test_insert_link_opens_dialog_with_selected_text(editor, transport):
    toolbar = Toolbar(get_editor=lambda: editor)
    toolbar.attach()

    task = asyncio.create_task(toolbar.press(Action.INSERT_LINK))
    await asyncio.sleep(0)
    assert transport.types == ["prepareInsert", "getSelectedText"]

    editor.on_message(message("SELECTED_TEXT_RESPONSE", "click here"))
    await task

    assert editor.link_dialog.visible
    assert editor.link_dialog.title == "click here"
    assert editor.link_dialog.is_new_link


@pytest.mark.asyncio
async def test_media_buttons(editor, transport):
    calls = []
    toolbar = Toolbar(
        get_editor=lambda: editor,
        on_add_image_pressed=lambda: calls.append("image"),
        on_camera_pressed=lambda: calls.append("camera"),
        on_video_pressed=lambda: calls.append("video"),
        on_hash_tag_pressed=lambda: calls.append("tag"),
    )
    toolbar.attach()

    for action in (Action.INSERT_IMAGE, Action.TAKE_PHOTO, Action.TAKE_VIDEO, Action.HASH_TAG):
        await toolbar.press(action)

    assert calls == ["image", "camera", "video", "tag"]
    assert transport.types == ["prepareInsert"] * 3


@pytest.mark.asyncio
async def test_press_before_attach_is_an_error(editor):
    toolbar = Toolbar(get_editor=lambda: editor)
    with pytest.raises(ToolbarConfigurationError):
        await toolbar.press(Action.SET_BOLD)


def test_remove_failed_uploads(editor, transport):
    toolbar = Toolbar(get_editor=lambda: editor)
    toolbar.attach()

    assert toolbar.remove_failed_uploads(["a1", "b2"]) == 2
    assert transport.instructions == [
        {"type": "removeImageWithId", "data": "closeButtona1"},
        {"type": "removeImageWithId", "data": "closeButtonb2"},
    ]
    assert toolbar.remove_failed_uploads([]) == 0
