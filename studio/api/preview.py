"""Live preview websocket.

The server plays the host for a stored project: the client is the
rendering context and speaks the JSON preview protocol. Every save of the
project pushes fresh markup to all of its open previews.
"""

import structlog
from fastapi import APIRouter, Depends, WebSocket, status

from studio.api.deps import get_hub, get_store
from studio.interfaces.preview import InvalidMessageError
from studio.interfaces.store import BaseProjectStore, ProjectNotFoundError, StoreError
from studio.interfaces.template import TemplateSnapshot
from studio.strategies.preview import PreviewHub, WebSocketChannel

logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/preview", tags=["preview"])


@router.websocket("/{project_id}")
async def preview_socket(
    websocket: WebSocket,
    project_id: str,
    store: BaseProjectStore = Depends(get_store),
    hub: PreviewHub = Depends(get_hub),
) -> None:
    """Serve one preview of a project until the client disconnects."""
    log = logger.bind(project_id=project_id)
    try:
        record = await store.get(project_id)
    except ProjectNotFoundError:
        log.info("preview_project_not_found")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Project not found")
        return
    except StoreError as e:
        log.error("preview_store_error", error=str(e), exc_info=True)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="Project store unavailable")
        return

    await websocket.accept()
    log.info("preview_connected")
    host = hub.connect(
        project_id,
        WebSocketChannel(websocket),
        TemplateSnapshot(template=record.html, state=record.state),
    )
    try:
        await host.run()
    except InvalidMessageError as e:
        log.warning("preview_invalid_message", error=str(e))
        await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA, reason="Invalid preview message")
    finally:
        hub.disconnect(project_id, host)
        log.info("preview_disconnected")
