"""
搶答器：第一個按下的隊伍鎖住搶答權

慢一步的搶答不是錯誤，直接當作成功的 no-op（呼叫端不應該收到例外）
"""
import logging

from core.room_store import RoomStore
from services import clock_service
from services.stage_service import BUZZ_RESET

logger = logging.getLogger(__name__)


class BuzzerArbiter:

    @staticmethod
    def buzz(store: RoomStore, room_id: str, team_name: str) -> bool:
        """
        搶答（原子性 read-modify-write）

        流程：
        1. 在 transaction 內讀取 buzz.lockedBy
        2. 已經有人鎖住 -> 不寫入
        3. 沒人鎖住 -> 同一個 transaction 內寫入 lockedBy / lockedAt

        返回：
            True 表示這次搶到；False 表示已被其他隊伍搶先

        異常：
            RoomMissing: Room 不存在
        """
        def lock(current):
            if (current.get("buzz") or {}).get("lockedBy"):
                return None
            return {"buzz.lockedBy": team_name, "buzz.lockedAt": clock_service.now_ms()}

        won = bool(store.transact(room_id, lock))
        if won:
            logger.info(f"Room {room_id} buzzer locked by {team_name}")
        else:
            logger.debug(f"Room {room_id} buzz from {team_name} ignored, already locked")
        return won

    @staticmethod
    def reset_buzz(store: RoomStore, room_id: str) -> None:
        """清除搶答鎖（一般寫入即可，清除沒有競態問題）"""
        store.update_partial(room_id, BUZZ_RESET)
        logger.info(f"Room {room_id} buzzer reset")
