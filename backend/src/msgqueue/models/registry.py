import asyncio
import logging
from typing import Dict, List, Optional, Set

from ..schemas import Envelope
from .connection import Connection
from .tracker import ConnectionTracker

logger = logging.getLogger(__name__)


class TopicSubscribers:
    def __init__(self, name: str):
        self.name = name
        # dict as an insertion-ordered set
        self.connections: Dict[Connection, None] = {}
        self.lock = asyncio.Lock()
        # stats
        self.broadcasts = 0


class SubscriberRegistry:
    """
    Broadcast-mode fan-out: topic -> connections currently subscribed.

    Subscriber sets are only read or changed under their topic lock, and the
    lock is never held across a socket write: broadcast snapshots the set and
    hands the frame to each connection's outbound queue after releasing it.
    """

    def __init__(self, tracker: Optional[ConnectionTracker] = None):
        self.tracker = tracker if tracker is not None else ConnectionTracker()
        self._topics: Dict[str, TopicSubscribers] = {}
        self._lock = asyncio.Lock()

    async def _get(self, topic: str) -> Optional[TopicSubscribers]:
        async with self._lock:
            return self._topics.get(topic)

    async def _get_or_create(self, topic: str) -> TopicSubscribers:
        async with self._lock:
            subs = self._topics.get(topic)
            if subs is None:
                subs = TopicSubscribers(topic)
                self._topics[topic] = subs
            return subs

    async def subscribe(self, topic: str, connection: Connection) -> bool:
        '''Returns True if the connection was added, False if already there or gone.'''
        subs = await self._get_or_create(topic)
        async with subs.lock:
            # a connection removed while we waited for the lock must stay removed
            if not connection.connected or connection in subs.connections:
                return False
            subs.connections[connection] = None
            self.tracker.track(connection, topic)
        return True

    async def broadcast(self, topic: str, envelope: Envelope) -> int:
        '''Hand the envelope to every subscriber; returns how many accepted it.'''
        subs = await self._get_or_create(topic)
        async with subs.lock:
            subs.broadcasts += 1
            targets = list(subs.connections)

        # fan-out outside lock
        frame = envelope.to_wire()
        delivered = 0
        failed: List[Connection] = []
        for conn in targets:
            if conn.deliver(frame):
                delivered += 1
            else:
                failed.append(conn)

        for conn in failed:
            logger.warning("Broadcast on %r not delivered to %r; unsubscribing it", topic, conn)
            await self.remove_connection(conn)
        return delivered

    async def remove_connection(self, connection: Connection) -> Set[str]:
        '''
        Drop the connection from every topic it subscribed to. Safe to repeat.
        Once this returns no broadcast reaches the connection: it is marked
        closed before any subscriber set is touched, and deliver() refuses
        closed connections.
        '''
        connection.mark_closed()
        topics = self.tracker.release(connection)
        for name in topics:
            subs = await self._get(name)
            if subs is None:
                continue
            async with subs.lock:
                subs.connections.pop(connection, None)
        return topics

    async def subscribers(self, topic: str) -> List[Connection]:
        subs = await self._get(topic)
        if subs is None:
            return []
        async with subs.lock:
            return list(subs.connections)

    async def subscriber_count(self, topic: str) -> int:
        return len(await self.subscribers(topic))

    async def stats(self) -> Dict[str, Dict[str, int]]:
        async with self._lock:
            topics = list(self._topics.values())
        out = {}
        for t in topics:
            async with t.lock:
                out[t.name] = {"subscribers": len(t.connections), "broadcasts": t.broadcasts}
        return out
