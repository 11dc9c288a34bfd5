# tests/helpers.py
import asyncio
import json


class FakeWebSocket:
    """Stands in for a starlette WebSocket: frames are fed in, sends recorded."""

    def __init__(self, fail_send: bool = False, send_delay: float = 0):
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent = []
        self.closed_with = None
        self.fail_send = fail_send
        self.send_delay = send_delay

    def feed(self, frame):
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        key = "bytes" if isinstance(frame, bytes) else "text"
        self.inbox.put_nowait({"type": "websocket.receive", key: frame})

    def disconnect(self, code: int = 1000):
        self.inbox.put_nowait({"type": "websocket.disconnect", "code": code})

    async def receive(self):
        message = await self.inbox.get()
        if isinstance(message, BaseException):
            raise message
        return message

    async def send_text(self, data: str):
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_send:
            raise RuntimeError("broken pipe")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.closed_with = code
        # the peer answers a close frame with its own
        self.disconnect(code)

    def sent_json(self):
        return [json.loads(s) for s in self.sent]


async def wait_for(predicate, timeout: float = 1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.001)
