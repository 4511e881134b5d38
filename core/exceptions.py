"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理
"""


class PartyQuizException(Exception):
    """所有房間核心異常的基類"""
    pass


# ============ Room 相關異常 ============

class RoomMissing(PartyQuizException):
    """房間文件不存在（寫入或 transaction 時）"""
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} missing")


# ============ Transaction 相關異常 ============

class TransactionConflict(PartyQuizException):
    """樂觀鎖重試次數用完，仍然和其他寫入者衝突"""
    def __init__(self, room_id, attempts):
        self.room_id = room_id
        self.attempts = attempts
        super().__init__(
            f"Room {room_id} transaction still conflicting after {attempts} attempts"
        )
