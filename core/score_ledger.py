"""
Score Ledger：隊伍報名和計分

兩個操作都可能被多台裝置同時呼叫，所以都走 transact：
- 兩隊同時報名，兩隊都要留下來
- 同一隊同時加減分，不能遺失任何一筆
"""
import logging

from core.room_store import RoomStore

logger = logging.getLogger(__name__)


class ScoreLedger:

    @staticmethod
    def register_team(store: RoomStore, room_id: str, team_name: str) -> None:
        """
        報名隊伍（冪等）

        - teams 沒有這隊 -> 加到尾端（保留報名順序）
        - scores 沒有這隊 -> 設為 0（已有分數絕不覆寫）

        異常：
            RoomMissing: Room 不存在
        """
        def register(current):
            teams = list(current.get("teams") or [])
            scores = dict(current.get("scores") or {})

            if team_name in teams and team_name in scores:
                return None
            if team_name not in teams:
                teams.append(team_name)
            scores.setdefault(team_name, 0)
            return {"teams": teams, "scores": scores}

        if store.transact(room_id, register):
            logger.info(f"Team {team_name} registered in room {room_id}")
        else:
            logger.debug(f"Team {team_name} already registered in room {room_id}")

    @staticmethod
    def change_score(store: RoomStore, room_id: str, team_name: str, delta: int) -> int:
        """
        調整分數（+1、+2、-1 ...）

        未報名的隊伍視為 0 分，並且順便加進 teams，
        確保 scores 的 key 永遠是 teams 的子集合。

        返回：
            調整後的分數

        異常：
            RoomMissing: Room 不存在
        """
        result = {}

        def adjust(current):
            teams = list(current.get("teams") or [])
            scores = dict(current.get("scores") or {})

            scores[team_name] = int(scores.get(team_name) or 0) + int(delta)
            result["score"] = scores[team_name]

            writes = {"scores": scores}
            if team_name not in teams:
                teams.append(team_name)
                writes["teams"] = teams
            return writes

        store.transact(room_id, adjust)
        logger.info(f"Room {room_id} score for {team_name} changed by {delta} -> {result['score']}")
        return result["score"]
