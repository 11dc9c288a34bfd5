import json
from datetime import datetime, timezone
from typing import Any


def now() -> datetime:
    return datetime.now(timezone.utc)

def now_ts() -> str:
    return now().isoformat()

def uptime_seconds(started_at: datetime) -> int:
    return int((now() - started_at).total_seconds())

# Server -> client frames are plain JSON values
def encode_frame(value: Any) -> str:
    return json.dumps(value)

# HTTP responses are built as dicts
def make_health(started_at: datetime, topics: int, subscribers: int, connections: int):
    return {
        "uptime_sec": uptime_seconds(started_at),
        "started_at": started_at.isoformat(),
        "topics": topics,
        "subscribers": subscribers,
        "connections": connections,
        "ts": now_ts(),
    }

def make_topic_summary(name: str, queued: int, subscribers: int):
    return {"name": name, "queued": queued, "subscribers": subscribers}

def make_topic_stats(queued: int, enqueued: int, dequeued: int, broadcasts: int, subscribers: int):
    return {
        "queued": queued,
        "enqueued": enqueued,
        "dequeued": dequeued,
        "broadcasts": broadcasts,
        "subscribers": subscribers,
    }
