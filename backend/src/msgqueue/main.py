from typing import Optional

from fastapi import APIRouter, FastAPI, Request, WebSocket

from .broker import Broker
from .models import Connection
from .protocol import ProtocolRouter
from .utilities import WS_PATH, make_health, make_topic_stats, make_topic_summary

router = APIRouter()


def create_app(broker: Optional[Broker] = None) -> FastAPI:
    app = FastAPI(title="Topic message queue")
    app.state.broker = broker if broker is not None else Broker()
    app.include_router(router)
    return app


# -------------- WebSocket handling --------------

@router.websocket(WS_PATH)
@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    await ProtocolRouter(Connection(ws), ws.app.state.broker).run()

# -------------- REST endpoints --------------

@router.get("/topics")
async def rest_list_topics(request: Request):
    broker: Broker = request.app.state.broker
    queues = await broker.store.stats()
    subscribers = await broker.registry.stats()
    names = sorted(set(queues) | set(subscribers))
    out = []
    for name in names:
        out.append(make_topic_summary(
            name,
            queued=queues.get(name, {}).get("queued", 0),
            subscribers=subscribers.get(name, {}).get("subscribers", 0),
        ))
    return {"topics": out}

@router.get("/health")
async def rest_health(request: Request):
    broker: Broker = request.app.state.broker
    queues = await broker.store.stats()
    subscribers = await broker.registry.stats()
    return make_health(
        broker.started_at,
        topics=len(set(queues) | set(subscribers)),
        subscribers=sum(s["subscribers"] for s in subscribers.values()),
        connections=len(broker.tracker),
    )

@router.get("/stats")
async def rest_stats(request: Request):
    broker: Broker = request.app.state.broker
    queues = await broker.store.stats()
    subscribers = await broker.registry.stats()
    out = {}
    for name in sorted(set(queues) | set(subscribers)):
        q = queues.get(name, {})
        s = subscribers.get(name, {})
        out[name] = make_topic_stats(
            queued=q.get("queued", 0),
            enqueued=q.get("enqueued", 0),
            dequeued=q.get("dequeued", 0),
            broadcasts=s.get("broadcasts", 0),
            subscribers=s.get("subscribers", 0),
        )
    return {"topics": out}


app = create_app()
