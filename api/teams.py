"""
Team API Endpoints

職責：
1. 隊伍報名
2. 加減分
3. 搶答 / 重置搶答器

這三個操作都可能同時從多台裝置進來，原子性由 core 層的 transact 保證
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from core.buzzer import BuzzerArbiter
from core.exceptions import RoomMissing, TransactionConflict
from core.room_store import RoomStore, get_room_store
from core.score_ledger import ScoreLedger
from schemas import (
    TeamJoin,
    ScoreChange,
    ScoreResponse,
    BuzzSubmit,
    BuzzResponse,
    StatusResponse
)

router = APIRouter(prefix="/api/rooms", tags=["teams"])
logger = logging.getLogger(__name__)


@router.post("/{room_id}/teams", response_model=StatusResponse)
def register_team(room_id: str, team: TeamJoin, store: RoomStore = Depends(get_room_store)):
    """
    報名隊伍（冪等）

    重複報名不會重複加入，也不會把分數歸零
    """
    try:
        ScoreLedger.register_team(store, room_id, team.name)
        return StatusResponse()
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to register team: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{room_id}/teams/{team_name}/score", response_model=ScoreResponse)
def change_score(
    room_id: str,
    team_name: str,
    change: ScoreChange,
    store: RoomStore = Depends(get_room_store)
):
    """
    加減分

    返回：
        - team: 隊伍名稱
        - score: 調整後的分數
    """
    try:
        score = ScoreLedger.change_score(store, room_id, team_name, change.delta)
        return ScoreResponse(team=team_name, score=score)
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to change score: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{room_id}/buzz", response_model=BuzzResponse)
def buzz(room_id: str, submit: BuzzSubmit, store: RoomStore = Depends(get_room_store)):
    """
    搶答

    慢一步不是錯誤：回傳 200 和 locked=False
    """
    try:
        return BuzzResponse(locked=BuzzerArbiter.buzz(store, room_id, submit.team))
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to buzz: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/{room_id}/buzz", response_model=StatusResponse)
def reset_buzz(room_id: str, store: RoomStore = Depends(get_room_store)):
    """重置搶答器（host）"""
    try:
        BuzzerArbiter.reset_buzz(store, room_id)
        return StatusResponse()
    except RoomMissing:
        raise HTTPException(status_code=404, detail="Room not found")
    except TransactionConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to reset buzzer: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
