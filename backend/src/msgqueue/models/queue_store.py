import asyncio
from collections import deque
from typing import Deque, Dict, List, Tuple


class TopicQueue:
    ''' FIFO buffer of pending payloads for one topic.'''

    def __init__(self, name: str):
        self.name = name
        self.messages: Deque[str] = deque()
        self.lock = asyncio.Lock()
        # stats
        self.enqueued = 0
        self.dequeued = 0


class TopicQueueStore:
    """
    Buffered-mode storage: one TopicQueue per topic, created on first enqueue.

    Every read or mutation of a topic's buffer happens under that topic's lock,
    so concurrent producers on one topic cannot reorder each other. Nothing is
    ordered across topics.
    """

    def __init__(self):
        self._queues: Dict[str, TopicQueue] = {}
        self._lock = asyncio.Lock()

    async def _get(self, topic: str):
        async with self._lock:
            return self._queues.get(topic)

    async def _get_or_create(self, topic: str) -> TopicQueue:
        async with self._lock:
            queue = self._queues.get(topic)
            if queue is None:
                queue = TopicQueue(topic)
                self._queues[topic] = queue
            return queue

    async def enqueue(self, topic: str, payload: str):
        queue = await self._get_or_create(topic)
        async with queue.lock:
            queue.messages.append(payload)
            queue.enqueued += 1

    async def dequeue(self, topic: str) -> Tuple[str, bool]:
        '''Pop the oldest payload; ("", False) when there is none.'''
        # an unknown topic stays unknown
        queue = await self._get(topic)
        if queue is None:
            return "", False
        async with queue.lock:
            if not queue.messages:
                return "", False
            queue.dequeued += 1
            return queue.messages.popleft(), True

    async def depth(self, topic: str) -> int:
        queue = await self._get(topic)
        if queue is None:
            return 0
        async with queue.lock:
            return len(queue.messages)

    async def topics(self) -> List[str]:
        async with self._lock:
            return list(self._queues)

    async def stats(self) -> Dict[str, Dict[str, int]]:
        async with self._lock:
            queues = list(self._queues.values())
        out = {}
        for q in queues:
            async with q.lock:
                out[q.name] = {"queued": len(q.messages), "enqueued": q.enqueued, "dequeued": q.dequeued}
        return out
