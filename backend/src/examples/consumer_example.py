import asyncio
import json
import websockets

async def main():
    uri = "ws://localhost:8080/"
    async with websockets.connect(uri) as ws:
        # pull whatever is buffered on 'orders'; an empty queue sends nothing
        await ws.send(json.dumps({"role": "consumer", "topic": "orders", "subscribe": False}))

        # receive every broadcast on 'alerts' from now on
        await ws.send(json.dumps({"role": "consumer", "topic": "alerts", "subscribe": True}))

        print("Awaiting messages... (press Ctrl+C to exit)")
        try:
            while True:
                msg = json.loads(await ws.recv())
                if isinstance(msg, dict):
                    print(f"Broadcast on {msg['topic']}:", msg["message"])
                else:
                    print("Pulled:", msg)
        except KeyboardInterrupt:
            print("Disconnected.")

if __name__ == "__main__":
    asyncio.run(main())
