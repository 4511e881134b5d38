"""
資料模型

一個房間只有一列資料：整份 Room 文件以 JSON 存在 data 欄位，
version 欄位交給 SQLAlchemy 做樂觀鎖（每次 commit 自動 +1）。
"""
import enum

from sqlalchemy import Column, String, Integer, DateTime, JSON, func

from database import Base


class StageRound(str, enum.Enum):
    """舞台模式（None 代表 idle / 只有搶答器）"""
    QUESTIONS = "questions"
    CHARADES = "charades"
    HUM = "hum"


class RoomRecord(Base):
    __tablename__ = "rooms"

    id = Column(String(64), primary_key=True)
    # 由資料庫指定，避免各裝置時鐘不一致
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    version = Column(Integer, nullable=False)
    data = Column(JSON, nullable=False, default=dict)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<RoomRecord id={self.id} version={self.version}>"
