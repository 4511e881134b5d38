"""
Room API Endpoints

職責：
1. 建立 / migration Room（ensure）
2. 查詢 Room 文件
3. 設定題庫
"""
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from core.exceptions import RoomMissing, TransactionConflict
from core.room_manager import RoomManager
from core.room_store import RoomStore, get_room_store
from schemas import QuestionBankPayload, QuestionBankResponse

router = APIRouter(prefix="/api/rooms", tags=["rooms"])
logger = logging.getLogger(__name__)


@router.post("/{room_id}")
def ensure_room(room_id: str, store: RoomStore = Depends(get_room_store)):
    """
    確保 Room 存在（第一次存取時建立，舊文件補欄位）

    冪等：重複呼叫只回傳目前的文件
    """
    try:
        return RoomManager.ensure_room(store, room_id)
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to ensure room {room_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{room_id}")
def get_room(room_id: str, store: RoomStore = Depends(get_room_store)):
    """取得 Room 文件"""
    try:
        return RoomManager.get_room(store, room_id)
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except Exception as e:
        logger.error(f"Failed to get room {room_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.put("/{room_id}/question-bank", response_model=QuestionBankResponse)
def set_question_bank(
    room_id: str,
    payload: QuestionBankPayload,
    overwrite: bool = Query(False),
    store: RoomStore = Depends(get_room_store)
):
    """
    設定題庫

    參數：
        overwrite: 已有題庫時是否覆寫（預設不覆寫）

    返回：
        - stored: 這次是否有寫入
    """
    try:
        stored = RoomManager.set_question_bank(store, room_id, payload.bank, overwrite=overwrite)
        return QuestionBankResponse(stored=stored)
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set question bank for room {room_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
