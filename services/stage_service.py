"""
舞台服務：計算每種舞台切換要寫入哪些欄位

舞台模式：
- None（idle）：只有搶答器
- questions：顯示一題題庫的題目
- charades：比手畫腳（actorTeam 表演 person）
- hum：哼歌猜歌（hummerTeam 哼 song）

規則：
- 切換 game.round 時一定重置搶答器，並清掉其他模式的「進行中」欄位
- used 歷史清單不會因為切換模式而被清掉，只有 reset pool 會清

純計算邏輯，不涉及資料庫；回傳值是 RoomStore.update_partial 的點號路徑 dict
"""
from typing import Any, Dict, Optional

from core.room_store import array_union
from models import StageRound

BUZZ_RESET = {"buzz.lockedBy": None, "buzz.lockedAt": None}

# 每個計時模式的欄位名稱：(表演隊伍, 題目)
TIMED_MODE_FIELDS = {
    StageRound.CHARADES: ("actorTeam", "person"),
    StageRound.HUM: ("hummerTeam", "song"),
}


def cleared_mode(mode: StageRound) -> Dict[str, Any]:
    """
    清掉計時模式的進行中欄位（保留 used）

    範例：
        cleared_mode(StageRound.HUM)
        -> {"hum.hummerTeam": None, "hum.song": None, "hum.endsAt": None,
            "hum.running": False, "hum.revealed": False}
    """
    team_field, prompt_field = TIMED_MODE_FIELDS[mode]
    prefix = mode.value
    return {
        f"{prefix}.{team_field}": None,
        f"{prefix}.{prompt_field}": None,
        f"{prefix}.endsAt": None,
        f"{prefix}.running": False,
        f"{prefix}.revealed": False,
    }


def _game(round_tag: Optional[StageRound], index: Any) -> Dict[str, Any]:
    return {
        "game": {
            "round": round_tag.value if round_tag else None,
            "index": index,
            "reveal": False,
        }
    }


def live_question_patch(live: Any) -> Dict[str, Any]:
    """切換到 questions 模式並顯示題目"""
    index = live.get("index") if isinstance(live, dict) else None
    if index is None:
        index = 0
    patch = {"live": live, "reveal": False}
    patch.update(_game(StageRound.QUESTIONS, index))
    patch.update(cleared_mode(StageRound.CHARADES))
    patch.update(cleared_mode(StageRound.HUM))
    patch.update(BUZZ_RESET)
    return patch


def start_timed_patch(mode: StageRound, team: Any, prompt: Any, seconds: Any, now: int) -> Dict[str, Any]:
    """
    開始一輪計時模式（charades / hum）

    流程：
    1. game.round 切到 mode，index 用開始時間（每輪都不同）
    2. 清掉題目（live / reveal）
    3. 設定本模式的進行中欄位，endsAt = now + seconds * 1000
    4. 題目加進本模式的 used
    5. 清掉另一個計時模式的進行中欄位
    6. 重置搶答器

    參數：
        mode: StageRound.CHARADES 或 StageRound.HUM
        team: 表演的隊伍
        prompt: 人名 / 歌名
        seconds: 秒數（不檢查正負）
        now: 目前 epoch 毫秒

    返回：
        update_partial 用的點號路徑 dict
    """
    team_field, prompt_field = TIMED_MODE_FIELDS[mode]
    prefix = mode.value
    other = StageRound.HUM if mode == StageRound.CHARADES else StageRound.CHARADES

    patch = {"live": None, "reveal": False}
    patch.update(_game(mode, now))
    patch.update({
        f"{prefix}.{team_field}": team,
        f"{prefix}.{prompt_field}": prompt,
        f"{prefix}.endsAt": now + int(float(seconds) * 1000),
        f"{prefix}.running": True,
        f"{prefix}.revealed": False,
        f"{prefix}.used": array_union(prompt),
    })
    patch.update(cleared_mode(other))
    patch.update(BUZZ_RESET)
    return patch


def stop_timed_patch(mode: StageRound) -> Dict[str, Any]:
    """提早停止計時（不公布答案）"""
    return {f"{mode.value}.running": False, f"{mode.value}.endsAt": None}


def reveal_timed_patch(mode: StageRound) -> Dict[str, Any]:
    """公布答案並停止計時（不管原本是否還在跑）"""
    return {
        f"{mode.value}.revealed": True,
        f"{mode.value}.running": False,
        f"{mode.value}.endsAt": None,
    }


def reset_pool_patch(mode: StageRound) -> Dict[str, Any]:
    return {f"{mode.value}.used": []}


def clear_stage_patch() -> Dict[str, Any]:
    """回到 idle：清掉題目和所有模式的進行中欄位，隊伍和分數不動"""
    patch = {"live": None, "reveal": False}
    patch.update(_game(None, 0))
    patch.update(cleared_mode(StageRound.CHARADES))
    patch.update(cleared_mode(StageRound.HUM))
    patch.update(BUZZ_RESET)
    return patch
