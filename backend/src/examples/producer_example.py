import asyncio
import json
import uuid
import websockets  # lightweight client; to install: pip install websockets

async def main():
    uri = "ws://localhost:8080/"
    async with websockets.connect(uri) as ws:
        # buffer a message on 'orders' for a consumer to pull later
        order = {
            "role": "producer",
            "topic": "orders",
            "transmissionMode": "buffered",
            "message": f"order-{uuid.uuid4()}",
        }
        print("Buffered: ", order)
        await ws.send(json.dumps(order))

        # push an alert to every consumer subscribed to 'alerts' right now
        alert = {
            "role": "producer",
            "topic": "alerts",
            "transmissionMode": "broadcast",
            "message": "fire",
        }
        print("Broadcast: ", alert)
        await ws.send(json.dumps(alert))
        # the server sends nothing back to producers

if __name__ == "__main__":
    asyncio.run(main())
