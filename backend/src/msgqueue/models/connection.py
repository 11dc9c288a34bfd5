import asyncio
import itertools
import logging
from typing import Any, Optional, Union

from fastapi import WebSocket, status

from ..utilities import OUTBOUND_QUEUE_SIZE, SEND_TIMEOUT_SECONDS, TransportClosed, encode_frame

logger = logging.getLogger(__name__)

_connection_ids = itertools.count(1)


class Connection:
    ''' One accepted websocket. Hashes by identity so it can key the registry.'''

    def __init__(
        self,
        websocket: WebSocket,
        queue_size: int = OUTBOUND_QUEUE_SIZE,
        send_timeout: float = SEND_TIMEOUT_SECONDS,
    ):
        self.id = next(_connection_ids)
        self.websocket = websocket
        self.send_timeout = send_timeout

        # every frame for this socket goes through one bounded queue so that
        # broadcasters never wait on a slow peer and writes never interleave
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

        # background task that pops from queue and sends via WebSocket
        self.sender_task: Optional[asyncio.Task] = None
        self.closing_task: Optional[asyncio.Task] = None
        self.connected = True
        self.transport_closed = False

    def __repr__(self) -> str:
        return f"<Connection #{self.id}>"

    def start(self):
        if self.sender_task is None:
            self.sender_task = asyncio.create_task(connection_sender_loop(self))

    async def receive_frame(self) -> Union[str, bytes]:
        message = await self.websocket.receive()
        if message["type"] == "websocket.disconnect":
            self.transport_closed = True
            raise TransportClosed(message.get("code", status.WS_1000_NORMAL_CLOSURE))
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    def deliver(self, item: Any) -> bool:
        '''
        Hand a JSON-serializable value to the sender task without waiting.
        Returns False if the connection is gone or its queue is full; a full
        queue means the peer is too slow and the connection is aborted.
        '''
        if not self.connected:
            return False
        try:
            self.queue.put_nowait(item)
        except asyncio.QueueFull:
            logger.warning("Outbound queue full for %r; dropping slow connection", self)
            self.abort(status.WS_1011_INTERNAL_ERROR)
            return False
        return True

    def mark_closed(self):
        self.connected = False

    def abort(self, code: int = status.WS_1011_INTERNAL_ERROR):
        '''Stop accepting frames and close the transport in the background.'''
        if not self.connected:
            return
        self.connected = False
        self.closing_task = asyncio.create_task(self._close_transport(code))

    # graceful cleanup
    async def stop(self):
        self.connected = False
        if self.sender_task and self.sender_task is not asyncio.current_task():
            self.sender_task.cancel()
            try:
                await self.sender_task
            except asyncio.CancelledError:
                pass

    async def close(self, code: int = status.WS_1000_NORMAL_CLOSURE):
        await self.stop()
        if self.closing_task is not None:
            await self.closing_task
        else:
            await self._close_transport(code)

    async def _close_transport(self, code: int):
        if self.transport_closed:
            return
        self.transport_closed = True
        try:
            await self.websocket.close(code=code)
        except Exception as exc:
            # peer already gone
            logger.debug("Close of %r failed: %s", self, exc)


async def connection_sender_loop(conn: Connection):
    """
    Background task per connection: read from queue and send over websocket.
    A failed or timed out send aborts the connection.
    """
    websocket = conn.websocket
    while conn.connected:
        item = await conn.queue.get()
        try:
            await asyncio.wait_for(websocket.send_text(encode_frame(item)), timeout=conn.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Send to %r timed out after %.1fs", conn, conn.send_timeout)
            break
        except Exception as exc:
            # (broken pipe / closed) -> stop
            logger.warning("Send to %r failed: %s", conn, exc)
            break
        conn.queue.task_done()
    conn.abort(status.WS_1011_INTERNAL_ERROR)
