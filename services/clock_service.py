"""
時間服務

搶答時間、計時器結束時間都用「客戶端 epoch 毫秒」，
只有房間建立時間由資料庫指定。
"""
import time


def now_ms() -> int:
    """目前時間（epoch 毫秒）"""
    return int(time.time() * 1000)
