from .connection import Connection, connection_sender_loop
from .queue_store import TopicQueue, TopicQueueStore
from .registry import SubscriberRegistry, TopicSubscribers
from .tracker import ConnectionTracker
