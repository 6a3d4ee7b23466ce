import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from roomrelay.api.ws.connection.connection_manager import ConnectionManager
from roomrelay.api.ws.connection.router import EventRouter

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["relay"],
)


@router.websocket("/ws")
async def relay(websocket: WebSocket):
    manager: ConnectionManager = websocket.app.state.connection_manager
    event_router: EventRouter = websocket.app.state.event_router

    await websocket.accept()
    connection = manager.connect(websocket)
    if connection is None:
        await websocket.close(code=1013, reason="Server is full")
        return

    writer_task = asyncio.create_task(connection.pump())
    try:
        while True:
            event = await websocket.receive()
            if event.get("type") == "websocket.disconnect":
                break
            data_text = event.get("text")
            data_bytes = event.get("bytes")

            if data_text is not None:
                event_router.dispatch(connection, data_text)
            elif data_bytes is not None:
                event_router.dispatch(connection, data_bytes)
            else:
                logger.debug(f"Received event: {event}")
    except WebSocketDisconnect:
        logger.info(f"WebSocket {connection.connection_id} disconnected by client.")
    except Exception as e:
        logger.error(f"Unexpected error on connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        # Must run before any await: the task may already be cancelled here.
        manager.disconnect(connection)
        if not writer_task.done():
            writer_task.cancel()

        if (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        ):
            try:
                await websocket.close(code=1011)
            except RuntimeError as e:
                logger.debug(f"Could not close WebSocket {connection.connection_id}: {e}")

        try:
            await writer_task
        except asyncio.CancelledError:
            logger.debug(f"Writer task for {connection.connection_id} was cancelled.")
        except Exception as e:
            logger.warning(f"Writer task for {connection.connection_id} failed: {e}")
