"""Shared fixtures: an editor wired to an in-memory renderer transport."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

# richtext.main loads its config at import time.
os.environ.setdefault("RICHTEXT_CONFIG", str(Path(__file__).parent / "config.test.yaml"))

from richtext.config import EditorConfig  # noqa: E402
from richtext.editor import RichTextEditor  # noqa: E402
from tests.helpers import RecordingTransport  # noqa: E402


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def config() -> EditorConfig:
    return EditorConfig(grid_width=120, query_timeout=None)


@pytest.fixture
def editor(config: EditorConfig, transport: RecordingTransport) -> RichTextEditor:
    return RichTextEditor(config, transport=transport)
