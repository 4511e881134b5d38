"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

兩層保護：
- PostgreSQL：SELECT ... FOR UPDATE 悲觀鎖（行級鎖）
- 所有資料庫：RoomRecord.version 樂觀鎖（SQLite 不支援 FOR UPDATE，靠這層）
"""
from sqlalchemy.orm import Session, Query

from models import RoomRecord


def with_room_lock(room_id: str, db: Session) -> Query:
    """
    鎖定一個 Room（行級鎖）

    使用場景：
    - 讀取 Room 文件後依內容決定怎麼寫（搶答、報隊、加分）
    - 需要確保 Room 在整個 transaction 期間不被其他請求修改

    範例：
        record = with_room_lock(room_id, db).first()
        if not record:
            raise RoomMissing(room_id)
        record.data = {...}
        db.commit()

    參數：
        room_id: 房間識別字串
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
        - SQLite 會忽略 FOR UPDATE，此時由 version 欄位在 commit 時偵測衝突
    """
    return db.query(RoomRecord).filter(
        RoomRecord.id == room_id
    ).with_for_update(nowait=False)
