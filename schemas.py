"""
API Schemas（Pydantic）

Room 文件本身是自由形狀的 JSON（舊版文件可能缺欄位），
所以回應直接回傳 dict；這裡只定義 request body。
"""
from typing import Any, Optional

from pydantic import BaseModel, Field


class TeamJoin(BaseModel):
    name: str = Field(..., description="隊伍名稱")


class ScoreChange(BaseModel):
    delta: int = Field(..., description="加減分，例如 +1、+2、-1")


class ScoreResponse(BaseModel):
    team: str
    score: int


class BuzzSubmit(BaseModel):
    team: str = Field(..., description="按下搶答的隊伍")


class BuzzResponse(BaseModel):
    locked: bool = Field(..., description="True 表示這次搶到；False 表示已被搶先")


class RevealToggle(BaseModel):
    reveal: bool


class LiveQuestion(BaseModel):
    live: Optional[Any] = Field(None, description="題庫內的題目物件（不解析）")


class CharadesStart(BaseModel):
    actor_team: str
    person: str
    seconds: float = 60


class HumStart(BaseModel):
    hummer_team: str
    song: str
    seconds: float = 30


class QuestionBankPayload(BaseModel):
    bank: Any = Field(..., description="host 提供的題庫內容")


class QuestionBankResponse(BaseModel):
    stored: bool


class StatusResponse(BaseModel):
    status: str = "ok"
