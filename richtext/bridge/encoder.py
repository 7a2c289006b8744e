"""Action encoder: turns (action, payload) into a script the renderer evaluates.

Wire format::

    window.RichTextBridge.dispatch({"type": "setTitleHtml", "data": "<escaped>"})

String payloads are escaped and quoted so the result is both a valid
JavaScript string literal and a valid JSON string. Records go through
canonical JSON instead.
"""

from __future__ import annotations

import json
import re
from typing import Any

from richtext.vocabulary import Action, resolve_action

BRIDGE_ENTRY_POINT = "window.RichTextBridge.dispatch"

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "/": "\\/",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

# Everything in _ESCAPES, the remaining C0 controls and the JS line separators.
_ESCAPE_RE = re.compile(r"[\\\"/\x00-\x1f\u2028\u2029]")


def _escape_char(match: re.Match[str]) -> str:
    ch = match.group(0)
    return _ESCAPES.get(ch) or f"\\u{ord(ch):04x}"


def escape_js_string(value: str) -> str:
    """Escape ``value`` for interpolation between double quotes.

    ``json.loads('"' + escape_js_string(s) + '"') == s`` for every ``s``.
    """
    return _ESCAPE_RE.sub(_escape_char, value)


def data_to_string(data: Any) -> str:
    """Render a payload as a JavaScript expression.

    Strings are escaped and quoted, records (dicts, lists) become canonical
    JSON, scalars their JSON literal and ``None`` becomes ``null``.
    """
    if isinstance(data, str):
        return f'"{escape_js_string(data)}"'
    if isinstance(data, (dict, list, tuple)):
        return json.dumps(data, sort_keys=True, separators=(",", ":"))
    return json.dumps(data)


def encode(command: Action | str, data: Any = None) -> str:
    """Build the dispatch statement for one instruction.

    Raises ``UnknownActionError`` if ``command`` is not a renderer action.
    """
    action = resolve_action(command)
    return f'{BRIDGE_ENTRY_POINT}({{"type":"{action.value}","data":{data_to_string(data)}}})'
