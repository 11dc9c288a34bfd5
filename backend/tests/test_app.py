# tests/test_app.py
import uuid

import pytest
from fastapi.testclient import TestClient

from msgqueue.main import create_app


@pytest.fixture
def client():
    # one portal for every socket, so all connections share an event loop
    with TestClient(create_app()) as c:
        yield c


def produce(topic, message, mode="buffered"):
    return {"role": "producer", "topic": topic, "transmissionMode": mode, "message": message}


def consume(topic, subscribe=False):
    return {"role": "consumer", "topic": topic, "subscribe": subscribe}


def sync(ws):
    """Round-trip a private buffered message; every earlier frame from ws is then handled."""
    token = f"sync-{uuid.uuid4()}"
    ws.send_json(produce(token, token))
    ws.send_json(consume(token))
    assert ws.receive_json() == token


def test_health_endpoint(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["topics"] == 0
    assert body["subscribers"] == 0
    assert body["connections"] == 0


def test_buffered_message_is_pulled_once(client):
    with client.websocket_connect("/") as producer, client.websocket_connect("/") as consumer:
        producer.send_json(produce("orders", "order-1"))
        sync(producer)

        consumer.send_json(consume("orders"))
        assert consumer.receive_json() == "order-1"

        # the second pull finds nothing, so the next frame is the sync reply
        consumer.send_json(consume("orders"))
        sync(consumer)


def test_buffered_messages_keep_fifo_order(client):
    with client.websocket_connect("/") as ws:
        for i in range(5):
            ws.send_json(produce("orders", f"order-{i}"))
        for i in range(5):
            ws.send_json(consume("orders"))
            assert ws.receive_json() == f"order-{i}"


def test_broadcast_reaches_only_subscribers(client):
    with client.websocket_connect("/") as a, \
            client.websocket_connect("/") as b, \
            client.websocket_connect("/") as producer:
        a.send_json(consume("alerts", subscribe=True))
        a.send_json(consume("alerts", subscribe=True))
        sync(a)

        producer.send_json(produce("alerts", "fire", "broadcast"))
        sync(producer)

        assert a.receive_json() == {
            "role": "producer",
            "topic": "alerts",
            "subscribe": False,
            "transmissionMode": "broadcast",
            "message": "fire",
        }
        # subscribed twice, delivered once
        sync(a)
        sync(b)


def test_disconnected_subscriber_is_skipped(client):
    with client.websocket_connect("/") as a:
        a.send_json(consume("alerts", subscribe=True))
        sync(a)
    assert client.get("/health").json()["subscribers"] == 0

    with client.websocket_connect("/") as c, client.websocket_connect("/ws") as producer:
        c.send_json(consume("alerts", subscribe=True))
        sync(c)
        assert client.get("/health").json()["subscribers"] == 1

        producer.send_json(produce("alerts", "fire", "broadcast"))
        assert c.receive_json()["message"] == "fire"

    health = client.get("/health").json()
    assert health["connections"] == 0
    assert health["subscribers"] == 0


def test_protocol_mistakes_keep_connection_open(client):
    with client.websocket_connect("/") as ws:
        ws.send_text("{not json")
        ws.send_json({"role": "admin", "topic": "orders"})
        ws.send_json({"role": "producer", "topic": "orders", "transmissionMode": "later", "message": "x"})
        ws.send_bytes(b'{"role": "producer", "topic": "orders", "transmissionMode": "buffered", "message": "ok"}')
        ws.send_json(consume("orders"))
        assert ws.receive_json() == "ok"


def test_topics_and_stats_reflect_traffic(client):
    with client.websocket_connect("/") as ws:
        ws.send_json(produce("orders", "1"))
        ws.send_json(produce("orders", "2"))
        ws.send_json(consume("alerts", subscribe=True))
        ws.send_json(produce("alerts", "fire", "broadcast"))
        ws.send_json(consume("orders"))
        assert ws.receive_json()["message"] == "fire"
        assert ws.receive_json() == "1"

        topics = client.get("/topics").json()["topics"]
        assert topics == [
            {"name": "alerts", "queued": 0, "subscribers": 1},
            {"name": "orders", "queued": 1, "subscribers": 0},
        ]

        stats = client.get("/stats").json()["topics"]
        assert stats["orders"] == {"queued": 1, "enqueued": 2, "dequeued": 1, "broadcasts": 0, "subscribers": 0}
        assert stats["alerts"] == {"queued": 0, "enqueued": 0, "dequeued": 0, "broadcasts": 1, "subscribers": 1}
