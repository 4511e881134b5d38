"""
Room Manager：管理 Room 文件的生命週期

職責：
1. 第一次存取時建立 Room（lazy creation）
2. 舊版文件補上缺少的欄位（只增不減的 schema migration）
3. 查詢 / 訂閱 Room
4. 題庫只設定一次

原則：
- 單一職責：只管 Room 文件本身，不管搶答、分數、舞台
- 不刪除 Room：過期清理是外部的事
"""
import logging
from typing import Any, Callable, Optional

from core.exceptions import RoomMissing
from core.room_store import RoomStore
from services.room_state_service import default_room, missing_fields

logger = logging.getLogger(__name__)


class RoomManager:
    """Room 生命週期管理器"""

    @staticmethod
    def ensure_room(store: RoomStore, room_id: str) -> dict:
        """
        確保 Room 存在且是最新的形狀

        流程：
        1. Room 不存在 -> 以預設文件建立（createdAt 由資料庫指定）
        2. Room 已存在 -> 在 transaction 內找出缺少的頂層欄位，只補這些

        參數：
            store: RoomStore
            room_id: 房間識別字串

        返回：
            目前的 Room 文件

        注意：
            - 冪等：第二次呼叫不會寫入任何東西
            - 已存在的欄位（包含巢狀內容）絕對不覆寫
            - 資料庫連不上時異常直接往上拋
        """
        if store.create(room_id, default_room()):
            return store.get(room_id)

        def migrate(current):
            patch = missing_fields(current)
            if patch:
                logger.info(f"Migrating room {room_id}, adding fields {sorted(patch)}")
            return patch

        store.transact(room_id, migrate)
        return store.get(room_id)

    @staticmethod
    def get_room(store: RoomStore, room_id: str) -> dict:
        """
        取得 Room 文件

        異常：
            RoomMissing: Room 不存在
        """
        room = store.get(room_id)
        if room is None:
            raise RoomMissing(room_id)
        return room

    @staticmethod
    def listen_room(store: RoomStore, room_id: str,
                    callback: Callable[[Optional[dict]], None]) -> Callable[[], None]:
        """
        訂閱 Room 的即時狀態

        callback 立刻收到目前的文件（不存在時為 None），之後每次變更再收到一次；
        呼叫回傳的 function 即可取消訂閱。斷線重連不在這裡處理。
        """
        logger.debug(f"Subscribing to room {room_id}")
        return store.subscribe(room_id, callback)

    @staticmethod
    def set_question_bank(store: RoomStore, room_id: str, bank: Any, overwrite: bool = False) -> bool:
        """
        設定題庫（只設定一次）

        參數：
            bank: host 提供的題庫內容（不解析）
            overwrite: True 時允許覆寫已存在的題庫

        返回：
            True 表示這次有寫入；False 表示已經有題庫，沒有動作

        異常：
            RoomMissing: Room 不存在
        """
        def seed(current):
            if current.get("questionBank") is not None and not overwrite:
                return None
            return {"questionBank": bank}

        written = bool(store.transact(room_id, seed))
        if written:
            logger.info(f"Question bank stored for room {room_id} (overwrite={overwrite})")
        else:
            logger.debug(f"Room {room_id} already has a question bank, skipping")
        return written
