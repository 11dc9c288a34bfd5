import logging
from enum import Enum
from typing import Union

from .broker import Broker
from .models import Connection
from .schemas import Envelope, Role, TransmissionMode, decode_envelope
from .utilities import EnvelopeDecodeError, TransportClosed

logger = logging.getLogger(__name__)


class RouterState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class Outcome(str, Enum):
    SUBSCRIBED = "subscribed"
    ALREADY_SUBSCRIBED = "already_subscribed"
    DELIVERED = "delivered"      # dequeued payload handed back to the consumer
    EMPTY = "empty"
    DROPPED = "dropped"          # consumer cannot take the payload
    ENQUEUED = "enqueued"
    BROADCAST = "broadcast"
    REJECTED = "rejected"        # unknown role or transmissionMode
    MALFORMED = "malformed"


class ProtocolRouter:
    """
    Per-connection read loop. Each frame is decoded as an Envelope and routed
    to the queue store (buffered produce, pull) or the registry (subscribe,
    broadcast). Protocol mistakes are logged and skipped; the client never
    gets an error frame. The loop ends when the transport closes or fails,
    and the connection is then deregistered exactly once.
    """

    def __init__(self, connection: Connection, broker: Broker):
        self.connection = connection
        self.broker = broker
        self.store = broker.store
        self.registry = broker.registry
        self.state = RouterState.OPEN

    async def run(self):
        self.broker.tracker.open(self.connection)
        self.connection.start()
        logger.info("Connection %r opened", self.connection)
        try:
            while self.state is RouterState.OPEN:
                try:
                    frame = await self.connection.receive_frame()
                except TransportClosed as exc:
                    if exc.clean:
                        logger.info("Connection %r closed: %s", self.connection, exc)
                    else:
                        logger.warning("Unexpected close of %r: %s", self.connection, exc)
                    break
                except Exception:
                    logger.exception("Read error on %r", self.connection)
                    break
                await self.handle_frame(frame)
        finally:
            await self.close()

    async def close(self):
        if self.state is RouterState.CLOSED:
            return
        self.state = RouterState.CLOSED
        topics = await self.registry.remove_connection(self.connection)
        await self.connection.close()
        logger.info("Connection %r released (%d subscriptions)", self.connection, len(topics))

    async def handle_frame(self, frame: Union[str, bytes]) -> Outcome:
        try:
            envelope = decode_envelope(frame)
        except EnvelopeDecodeError as exc:
            logger.warning("JSON decode error on %r: %s", self.connection, exc)
            return Outcome.MALFORMED
        return await self.dispatch(envelope)

    async def dispatch(self, envelope: Envelope) -> Outcome:
        if envelope.role == Role.CONSUMER:
            if envelope.subscribe:
                return await self._subscribe(envelope)
            return await self._pull(envelope)

        if envelope.role == Role.PRODUCER:
            if envelope.transmission_mode == TransmissionMode.BUFFERED:
                await self.store.enqueue(envelope.topic, envelope.message)
                logger.info("Message buffered on %r", envelope.topic)
                return Outcome.ENQUEUED
            if envelope.transmission_mode == TransmissionMode.BROADCAST:
                delivered = await self.registry.broadcast(envelope.topic, envelope)
                logger.info("Message broadcast on %r to %d subscriber(s)", envelope.topic, delivered)
                return Outcome.BROADCAST
            logger.warning("Invalid transmissionMode %r from %r", envelope.transmission_mode, self.connection)
            return Outcome.REJECTED

        logger.warning("Invalid role %r from %r", envelope.role, self.connection)
        return Outcome.REJECTED

    async def _subscribe(self, envelope: Envelope) -> Outcome:
        if not await self.registry.subscribe(envelope.topic, self.connection):
            return Outcome.ALREADY_SUBSCRIBED
        logger.info("%r subscribed to %r", self.connection, envelope.topic)
        return Outcome.SUBSCRIBED

    async def _pull(self, envelope: Envelope) -> Outcome:
        # leave the message queued for someone who can still receive it
        if not self.connection.connected:
            logger.warning("Pull on %r ignored: %r is not accepting frames", envelope.topic, self.connection)
            return Outcome.DROPPED
        payload, found = await self.store.dequeue(envelope.topic)
        if not found:
            logger.debug("No data queued on %r", envelope.topic)
            return Outcome.EMPTY
        if not self.connection.deliver(payload):
            logger.warning("Dequeued message on %r lost: %r is not accepting frames", envelope.topic, self.connection)
            return Outcome.DROPPED
        logger.info("Data sent to consumer %r from %r", self.connection, envelope.topic)
        return Outcome.DELIVERED
