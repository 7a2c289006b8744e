"""Test doubles for the renderer side of the bridge."""

from __future__ import annotations

import json

from richtext.bridge.channel import COMPLETION_SUFFIX
from richtext.bridge.encoder import BRIDGE_ENTRY_POINT


def decode_instruction(script: str) -> dict:
    """Turn a delivered script back into its {"type", "data"} object."""
    assert script.startswith(BRIDGE_ENTRY_POINT + "(")
    assert script.endswith(")" + COMPLETION_SUFFIX)
    literal = script[len(BRIDGE_ENTRY_POINT) + 1 : -len(")" + COMPLETION_SUFFIX)]
    return json.loads(literal)


class RecordingTransport:
    """Renderer stand-in that keeps every injected script."""

    def __init__(self) -> None:
        self.scripts: list[str] = []

    def inject(self, script: str) -> None:
        self.scripts.append(script)

    @property
    def instructions(self) -> list[dict]:
        return [decode_instruction(s) for s in self.scripts]

    @property
    def types(self) -> list[str]:
        return [i["type"] for i in self.instructions]

    def last(self) -> dict:
        return self.instructions[-1]

    def clear(self) -> None:
        self.scripts.clear()


def message(type_: str, data=None, **extra) -> str:
    """Serialize a renderer event the way the editor page does."""
    return json.dumps({"type": type_, "data": data, **extra})
