"""
Stage Controller：舞台模式的狀態機

game.round 的轉換：

    idle ──set_live_question──> questions
    任何 ──start_charades──> charades
    任何 ──start_hum──> hum
    任何 ──clear_stage──> idle

每次改變 game.round 都會重置搶答器，並清掉其他模式的進行中欄位，
任何裝置都不會同時看到兩個模式在進行。

只有 host 會呼叫這些操作，全部是一般的部分更新（last-writer-wins），
不做權限檢查。每個操作只呼叫一次 update_partial，整個切換一次生效。
"""
import logging
from typing import Any

from core.room_store import RoomStore
from models import StageRound
from services import clock_service
from services.stage_service import (
    clear_stage_patch,
    live_question_patch,
    reset_pool_patch,
    reveal_timed_patch,
    start_timed_patch,
    stop_timed_patch,
)

logger = logging.getLogger(__name__)


class StageController:
    """舞台模式控制器"""

    # ============ 題目 ============

    @staticmethod
    def set_live_question(store: RoomStore, room_id: str, live: Any) -> None:
        """
        顯示一題題目（round -> questions）

        - live 設為題目、reveal 設為 False
        - charades / hum 的進行中欄位清空（used 保留）
        - 重置搶答器
        """
        store.update_partial(room_id, live_question_patch(live))
        logger.info(f"Room {room_id} stage -> questions")

    @staticmethod
    def set_reveal(store: RoomStore, room_id: str, reveal: bool) -> None:
        """公布 / 隱藏題目答案（不切換模式）"""
        store.update_partial(room_id, {"reveal": bool(reveal)})

    # ============ 比手畫腳 ============

    @staticmethod
    def start_charades(store: RoomStore, room_id: str, actor_team: str, person: str, seconds: float) -> None:
        """
        開始一輪比手畫腳（round -> charades）

        參數：
            actor_team: 表演的隊伍
            person: 要表演的人名（會加進 charades.used）
            seconds: 計時秒數
        """
        StageController._start(store, room_id, StageRound.CHARADES, actor_team, person, seconds)

    @staticmethod
    def stop_charades(store: RoomStore, room_id: str) -> None:
        """提早停止計時（不公布答案）"""
        store.update_partial(room_id, stop_timed_patch(StageRound.CHARADES))

    @staticmethod
    def reveal_charades(store: RoomStore, room_id: str) -> None:
        """公布人名並停止計時"""
        store.update_partial(room_id, reveal_timed_patch(StageRound.CHARADES))
        logger.info(f"Room {room_id} charades revealed")

    @staticmethod
    def reset_charades_pool(store: RoomStore, room_id: str) -> None:
        """人名用完時手動清空 used"""
        store.update_partial(room_id, reset_pool_patch(StageRound.CHARADES))
        logger.info(f"Room {room_id} charades pool reset")

    # ============ 哼歌猜歌 ============

    @staticmethod
    def start_hum(store: RoomStore, room_id: str, hummer_team: str, song: str, seconds: float) -> None:
        """開始一輪哼歌（round -> hum），和 start_charades 對稱"""
        StageController._start(store, room_id, StageRound.HUM, hummer_team, song, seconds)

    @staticmethod
    def stop_hum(store: RoomStore, room_id: str) -> None:
        store.update_partial(room_id, stop_timed_patch(StageRound.HUM))

    @staticmethod
    def reveal_hum(store: RoomStore, room_id: str) -> None:
        store.update_partial(room_id, reveal_timed_patch(StageRound.HUM))
        logger.info(f"Room {room_id} hum revealed")

    @staticmethod
    def reset_hum_pool(store: RoomStore, room_id: str) -> None:
        store.update_partial(room_id, reset_pool_patch(StageRound.HUM))
        logger.info(f"Room {room_id} hum pool reset")

    # ============ 清場 ============

    @staticmethod
    def clear_stage(store: RoomStore, room_id: str) -> None:
        """
        回到 idle（只剩搶答器）

        清掉題目、所有模式的進行中欄位、搶答鎖；
        used 歷史、隊伍、分數都不動
        """
        store.update_partial(room_id, clear_stage_patch())
        logger.info(f"Room {room_id} stage cleared")

    @staticmethod
    def _start(store, room_id, mode, team, prompt, seconds):
        patch = start_timed_patch(mode, team, prompt, seconds, clock_service.now_ms())
        store.update_partial(room_id, patch)
        logger.info(f"Room {room_id} stage -> {mode.value} ({team}, {seconds}s)")
