"""
房間狀態服務：Room 文件的標準預設形狀

純計算邏輯，不涉及資料庫
"""
from typing import Any, Dict


def default_buzz() -> Dict[str, Any]:
    return {"lockedBy": None, "lockedAt": None}


def default_game() -> Dict[str, Any]:
    return {"round": None, "index": 0, "reveal": False}


def default_charades() -> Dict[str, Any]:
    return {
        "actorTeam": None,
        "person": None,
        "endsAt": None,  # ms epoch
        "running": False,
        "revealed": False,
        "used": [],
    }


def default_hum() -> Dict[str, Any]:
    return {
        "hummerTeam": None,
        "song": None,
        "endsAt": None,  # ms epoch
        "running": False,
        "revealed": False,
        "used": [],
    }


def default_room() -> Dict[str, Any]:
    """
    建立一份全新的 Room 文件（所有欄位都是預設值）

    注意：
    - createdAt 不在這裡，由資料庫的 created_at 欄位提供
    - questionBank 是選填欄位，預設不存在
    - 每次呼叫都回傳新的物件，可以直接修改
    """
    return {
        "buzz": default_buzz(),
        "teams": [],
        "scores": {},
        "game": default_game(),
        "live": None,
        "reveal": False,
        "charades": default_charades(),
        "hum": default_hum(),
    }


def missing_fields(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    找出舊版文件缺少的頂層欄位（向前相容的 schema migration）

    只比對頂層 key；已存在的欄位（包含巢狀內容）一律不動，
    就算它的值是 None 也視為存在。

    參數：
        document: 目前資料庫內的 Room 文件

    返回：
        {欄位名稱: 預設值}，沒有缺少時回傳空 dict

    範例：
        missing_fields({"teams": ["Red"], "scores": {"Red": 1}, ...沒有 hum...})
        -> {"hum": default_hum()}
    """
    return {
        key: value
        for key, value in default_room().items()
        if key not in document
    }

