from typing import TYPE_CHECKING, Dict, FrozenSet, Set

if TYPE_CHECKING:
    from .connection import Connection


class ConnectionTracker:
    """
    Inverse index connection -> subscribed topics, plus the set of open
    connections. Lets a disconnect touch only the topics that connection
    subscribed to.

    Methods never await, so each call runs to completion on the event loop
    without interleaving; the registry relies on this to track a subscription
    in the same critical section that adds it.
    """

    def __init__(self):
        self._topics: Dict["Connection", Set[str]] = {}

    def open(self, connection: "Connection"):
        self._topics.setdefault(connection, set())

    def track(self, connection: "Connection", topic: str):
        self._topics.setdefault(connection, set()).add(topic)

    def release(self, connection: "Connection") -> Set[str]:
        '''Forget the connection; returns the topics it was subscribed to.'''
        return self._topics.pop(connection, set())

    def topics_for(self, connection: "Connection") -> FrozenSet[str]:
        return frozenset(self._topics.get(connection, ()))

    def is_open(self, connection: "Connection") -> bool:
        return connection in self._topics

    def __len__(self) -> int:
        return len(self._topics)
