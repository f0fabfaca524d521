#!/usr/bin/env python3
"""
Terminal chat client for the WKN realtime endpoint.

Usage:
    python chat_client.py <server_url> <room_id> <username>

Examples:
    python chat_client.py ws://localhost:8000 lobby alice
    python chat_client.py wss://your-server.com lobby alice   # For HTTPS

Commands (while connected):
    - Type any message and press Enter to send it to the room
    - Type '/join <room>' to switch rooms
    - Type 'quit' or 'exit' to disconnect
"""

import asyncio
import json
import sys
from datetime import datetime

import websockets


def format_timestamp(ts: str) -> str:
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00")).strftime("%H:%M:%S")
    except (AttributeError, ValueError):
        return str(ts)


def print_event(event: dict) -> None:
    kind = event.get("type", "unknown")

    if kind == "initialMessages":
        messages = event.get("messages", [])
        print(f"--- history ({len(messages)} message(s)) ---")
        for msg in messages:
            print(f"[{format_timestamp(msg.get('timestamp', ''))}] {msg.get('username')}: {msg.get('message')}")
        print("--- end of history ---")

    elif kind == "Chat":
        ts = format_timestamp(event.get("timestamp", ""))
        print(f"[{ts}] #{event.get('chatroom')} {event.get('username')}: {event.get('message')}")

    elif kind == "updateUsers":
        print(f"users here: {', '.join(event.get('users', [])) or '(none)'}")

    else:
        print(f"unknown event {kind}: {json.dumps(event, default=str)}")


async def receive_events(websocket) -> None:
    try:
        async for raw in websocket:
            try:
                print_event(json.loads(raw))
            except json.JSONDecodeError:
                print(f"non-JSON frame: {raw}")
    except websockets.exceptions.ConnectionClosed as e:
        print(f"connection closed: {e.code} {e.reason}")


async def send_input(websocket, room_id: str, username: str) -> None:
    loop = asyncio.get_running_loop()
    print("connected. type a message and press Enter; 'quit' to leave.")

    while True:
        line = (await loop.run_in_executor(None, sys.stdin.readline)).strip()
        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            await websocket.close()
            break
        if line.startswith("/join "):
            room_id = line.split(maxsplit=1)[1]
            await websocket.send(json.dumps({"type": "joinRoom", "roomId": room_id}))
            continue
        await websocket.send(json.dumps({
            "type": "Chat",
            "username": username,
            "message": line,
            "chatroom": room_id,
        }))


async def main(server_url: str, room_id: str, username: str) -> None:
    ws_url = f"{server_url}/ws"
    print(f"connecting to {ws_url}")

    async with websockets.connect(ws_url) as websocket:
        await websocket.send(json.dumps({"type": "joinRoom", "roomId": room_id}))

        receive_task = asyncio.create_task(receive_events(websocket))
        send_task = asyncio.create_task(send_input(websocket, room_id, username))
        done, pending = await asyncio.wait([receive_task, send_task], return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)

    server_url = sys.argv[1].rstrip("/")
    if not server_url.startswith(("ws://", "wss://")):
        server_url = f"ws://{server_url}"

    try:
        asyncio.run(main(server_url, sys.argv[2], sys.argv[3]))
    except KeyboardInterrupt:
        sys.exit(0)
