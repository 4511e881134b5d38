"""
WebSocket endpoint 的單元測試：用假的 WebSocket 直接呼叫 handler
"""
import asyncio

import pytest
from fastapi import WebSocketDisconnect

from api.websocket import room_updates
from core.room_manager import RoomManager


class MockWebSocket:
    """Lightweight mock for fastapi.WebSocket."""
    def __init__(self, fail_send=False, disconnect=False):
        self.sent_messages = []
        self.fail_send = fail_send
        self.disconnect = disconnect

    async def accept(self):
        pass

    async def send_json(self, data):
        if self.fail_send:
            raise RuntimeError("socket closed")
        self.sent_messages.append(data)

    async def receive_text(self):
        if self.disconnect:
            # 先讓初始狀態送出，再斷線
            await asyncio.sleep(0.05)
            raise WebSocketDisconnect(code=1000)
        await asyncio.Event().wait()


def test_send_failure_closes_handler_and_unsubscribes(store):
    RoomManager.ensure_room(store, "R1")
    ws = MockWebSocket(fail_send=True)

    with pytest.raises(RuntimeError):
        asyncio.run(room_updates(ws, "R1", store))

    assert store.listeners.count("R1") == 0


def test_disconnect_unsubscribes(store):
    RoomManager.ensure_room(store, "R1")
    ws = MockWebSocket(disconnect=True)

    asyncio.run(room_updates(ws, "R1", store))

    assert ws.sent_messages[0]["room"]["teams"] == []
    assert store.listeners.count("R1") == 0
