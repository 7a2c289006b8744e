"""Rich-text editor host: FastAPI app bridging a browser renderer.

Loads config.yaml on startup. The editor page connects to /renderer over a
WebSocket; the HTTP endpoints drive the editor (commands, queries, content
export) plus health, config viewing and hot-reload.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware

from richtext.bridge.channel import QueueTransport
from richtext.config import get_config, load_config, reload_config
from richtext.editor import RichTextEditor
from richtext.errors import BridgeTimeoutError, RendererDetachedError, UnknownActionError
from richtext.schemas import CommandRequest
from richtext.vocabulary import QueryKind, resolve_action

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the editor session on startup."""
    config = get_config()
    app.state.editor = RichTextEditor(config)
    logger.info(
        f"Editor host started (origins={config.allowed_origins}, "
        f"auth={'enabled' if config.api_key else 'disabled'}, "
        f"platform={config.platform}, query_timeout={config.query_timeout})"
    )
    yield
    app.state.editor.detach_renderer()
    logger.info("Editor host shutting down")


# Load config early so we can read allowed_origins for CORS middleware.
_boot_config = load_config()

app = FastAPI(title="Rich Text Editor Bridge", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_boot_config.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------


async def verify_api_key(request: Request) -> None:
    """Validate X-API-Key header against the configured key.
    If no api_key is set in config, auth is disabled (dev mode).
    """
    config = get_config()
    if not config.api_key:
        return

    key = request.headers.get("X-API-Key")
    if key != config.api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


def get_editor(request: Request) -> RichTextEditor:
    return request.app.state.editor


# ---------------------------------------------------------------------------
# Renderer socket
# ---------------------------------------------------------------------------


@app.websocket("/renderer")
async def renderer_socket(websocket: WebSocket):
    """The editor page's side of the bridge.

    Outbound instructions go out as text frames, in order, through one pump
    task. Every inbound text or binary frame is handed to the message router.
    """
    config = get_config()
    key = websocket.headers.get("X-API-Key") or websocket.query_params.get("api_key")
    if config.api_key and key != config.api_key:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    editor: RichTextEditor = websocket.app.state.editor
    transport = QueueTransport()
    pump = asyncio.create_task(transport.pump(websocket.send_text))
    editor.attach_renderer(transport)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes")
            if raw is not None:
                editor.on_message(raw)
        logger.info("Renderer disconnected")
    finally:
        # A newer page may already have replaced this one.
        if editor.channel.transport is transport:
            editor.detach_renderer()
        pump.cancel()
        (result,) = await asyncio.gather(pump, return_exceptions=True)
        if isinstance(result, Exception):
            logger.warning(f"Renderer pump stopped with error: {result}")


# ---------------------------------------------------------------------------
# Editor endpoints
# ---------------------------------------------------------------------------


@app.post("/commands/{action}", dependencies=[Depends(verify_api_key)])
async def run_command(action: str, body: CommandRequest, editor: RichTextEditor = Depends(get_editor)):
    """Send one command to the renderer. Dropped if no renderer is attached."""
    try:
        resolved = resolve_action(action)
    except UnknownActionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if resolved in {k.action for k in QueryKind}:
        raise HTTPException(
            status_code=422,
            detail=f"'{resolved.value}' is a query, use the matching GET endpoint",
        )

    delivered = editor.send_action(resolved, body.data)
    return {"action": resolved.value, "delivered": delivered}


async def _run_query(editor: RichTextEditor, kind: QueryKind):
    try:
        value = await editor.query(kind)
    except RendererDetachedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except BridgeTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    return {"kind": kind.value, "value": value}


@app.get("/title/html", dependencies=[Depends(verify_api_key)])
async def title_html(editor: RichTextEditor = Depends(get_editor)):
    return await _run_query(editor, QueryKind.TITLE_HTML)


@app.get("/title/text", dependencies=[Depends(verify_api_key)])
async def title_text(editor: RichTextEditor = Depends(get_editor)):
    return await _run_query(editor, QueryKind.TITLE_TEXT)


@app.get("/content/html", dependencies=[Depends(verify_api_key)])
async def content_html(editor: RichTextEditor = Depends(get_editor)):
    return await _run_query(editor, QueryKind.CONTENT_HTML)


@app.get("/selection/text", dependencies=[Depends(verify_api_key)])
async def selected_text(editor: RichTextEditor = Depends(get_editor)):
    return await _run_query(editor, QueryKind.SELECTED_TEXT)


@app.get("/content/blocks", dependencies=[Depends(verify_api_key)])
async def content_blocks(editor: RichTextEditor = Depends(get_editor)):
    """Export the content as ``{"blocks": [...]}``."""
    try:
        blocks = await editor.get_blocks()
    except RendererDetachedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except BridgeTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    return {"blocks": [b.model_dump(exclude_none=True) for b in blocks]}


# ---------------------------------------------------------------------------
# Operational endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health(editor: RichTextEditor = Depends(get_editor)):
    """Liveness check."""
    return {
        "status": "healthy",
        "renderer_attached": editor.channel.attached,
        "pending_requests": len(editor.pending),
    }


@app.get("/config")
async def get_current_config():
    """Return current config as JSON."""
    config = get_config()
    return config.model_dump(exclude={"api_key"})


@app.post("/reload", dependencies=[Depends(verify_api_key)])
async def reload(request: Request):
    """Hot-reload config.yaml without restarting.

    The attached renderer keeps running; the new config applies to queries
    issued from now on and to the next renderer load.
    """
    try:
        new_config = reload_config()
        request.app.state.editor.apply_config(new_config)
        return {
            "status": "reloaded",
            "platform": new_config.platform,
            "query_timeout": new_config.query_timeout,
        }
    except Exception as e:
        logger.error(f"Reload failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Reload failed: {e}")
