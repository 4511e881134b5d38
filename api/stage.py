"""
Stage API Endpoints（host 專用）

職責：切換舞台模式、公布答案、計時器控制、清空 used

所有操作都是一般的部分更新，不做權限檢查
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from core.exceptions import RoomMissing, TransactionConflict
from core.room_store import RoomStore, get_room_store
from core.stage_controller import StageController
from schemas import (
    LiveQuestion,
    RevealToggle,
    CharadesStart,
    HumStart,
    StatusResponse
)

router = APIRouter(prefix="/api/rooms", tags=["stage"])
logger = logging.getLogger(__name__)


def _run(operation, store: RoomStore, room_id: str, *args) -> StatusResponse:
    """執行一個舞台操作，統一轉換異常為 HTTP 錯誤"""
    try:
        operation(store, room_id, *args)
        return StatusResponse()
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Stage operation {operation.__name__} failed for room {room_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.put("/{room_id}/stage/live", response_model=StatusResponse)
def set_live_question(room_id: str, question: LiveQuestion, store: RoomStore = Depends(get_room_store)):
    """顯示題目（round -> questions，重置搶答器）"""
    return _run(StageController.set_live_question, store, room_id, question.live)


@router.put("/{room_id}/stage/reveal", response_model=StatusResponse)
def set_reveal(room_id: str, toggle: RevealToggle, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.set_reveal, store, room_id, toggle.reveal)


@router.delete("/{room_id}/stage", response_model=StatusResponse)
def clear_stage(room_id: str, store: RoomStore = Depends(get_room_store)):
    """回到 idle；隊伍和分數不動"""
    return _run(StageController.clear_stage, store, room_id)


# ============ 比手畫腳 ============

@router.post("/{room_id}/stage/charades", response_model=StatusResponse)
def start_charades(room_id: str, start: CharadesStart, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.start_charades, store, room_id, start.actor_team, start.person, start.seconds)


@router.post("/{room_id}/stage/charades/stop", response_model=StatusResponse)
def stop_charades(room_id: str, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.stop_charades, store, room_id)


@router.post("/{room_id}/stage/charades/reveal", response_model=StatusResponse)
def reveal_charades(room_id: str, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.reveal_charades, store, room_id)


@router.delete("/{room_id}/stage/charades/used", response_model=StatusResponse)
def reset_charades_pool(room_id: str, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.reset_charades_pool, store, room_id)


# ============ 哼歌猜歌 ============

@router.post("/{room_id}/stage/hum", response_model=StatusResponse)
def start_hum(room_id: str, start: HumStart, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.start_hum, store, room_id, start.hummer_team, start.song, start.seconds)


@router.post("/{room_id}/stage/hum/stop", response_model=StatusResponse)
def stop_hum(room_id: str, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.stop_hum, store, room_id)


@router.post("/{room_id}/stage/hum/reveal", response_model=StatusResponse)
def reveal_hum(room_id: str, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.reveal_hum, store, room_id)


@router.delete("/{room_id}/stage/hum/used", response_model=StatusResponse)
def reset_hum_pool(room_id: str, store: RoomStore = Depends(get_room_store)):
    return _run(StageController.reset_hum_pool, store, room_id)
