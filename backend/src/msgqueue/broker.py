from datetime import datetime
from typing import Optional

from .models import ConnectionTracker, SubscriberRegistry, TopicQueueStore
from .utilities import now


class Broker:
    ''' Shared topic state for every connection served by one app.'''

    def __init__(
        self,
        store: Optional[TopicQueueStore] = None,
        registry: Optional[SubscriberRegistry] = None,
    ):
        self.store = store if store is not None else TopicQueueStore()
        self.registry = registry if registry is not None else SubscriberRegistry()
        self.started_at: datetime = now()

    @property
    def tracker(self) -> ConnectionTracker:
        return self.registry.tracker
