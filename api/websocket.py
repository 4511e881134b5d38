"""
Room WebSocket：推播 Room 文件

連線後立刻收到目前狀態（Room 不存在時 room 為 null），之後每次變更再收到一次：

    {"type": "room", "roomId": "...", "room": {...}}

訂閱的 callback 在寫入者的 thread 執行，透過 call_soon_threadsafe 交給 event loop
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from core.room_manager import RoomManager
from core.room_store import RoomStore, get_room_store

router = APIRouter(tags=["websocket"])
logger = logging.getLogger(__name__)


@router.websocket("/ws/rooms/{room_id}")
async def room_updates(websocket: WebSocket, room_id: str, store: RoomStore = Depends(get_room_store)):
    await websocket.accept()

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(document):
        loop.call_soon_threadsafe(queue.put_nowait, document)

    unsubscribe = await run_in_threadpool(RoomManager.listen_room, store, room_id, on_change)
    logger.info(f"WebSocket subscribed to room {room_id}")

    async def pump():
        while True:
            document = await queue.get()
            await websocket.send_json({"type": "room", "roomId": room_id, "room": document})

    async def listen():
        # 客戶端不需要送資料；持續 receive 才能偵測斷線
        while True:
            await websocket.receive_text()

    tasks = {asyncio.create_task(pump()), asyncio.create_task(listen())}
    try:
        # 任一邊結束（斷線或送出失敗）就收掉整個連線
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            task.result()
    except WebSocketDisconnect:
        logger.info(f"WebSocket for room {room_id} disconnected")
    finally:
        unsubscribe()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
