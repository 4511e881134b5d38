"""
Room Store：一個房間 = 一份文件

職責：
1. 讀取 / 建立 / 覆寫 Room 文件
2. 點號路徑的部分更新（"charades.running"），不動到兄弟欄位
3. 原子性的 read-modify-write（transact）
4. 推播訂閱：每次 commit 之後把最新文件送給訂閱者

所有寫入都走同一條「鎖定 + 版本檢查」的路徑：
文件存在單一 JSON 欄位，部分更新本身就是 read-modify-write，
不這樣做的話，host 的舞台切換可能蓋掉同時發生的搶答。
"""
import copy
import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import RoomMissing, TransactionConflict
from core.locks import with_room_lock
from database import SessionLocal, settings, transactional
from models import RoomRecord

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Writes = Dict[str, Any]
RoomCallback = Callable[[Optional[Document]], None]


class ArrayUnion:
    """部分更新的特殊值：把元素加進 list 欄位（已存在的不重複加）"""

    def __init__(self, *values):
        self.values = values

    def __repr__(self):
        return f"ArrayUnion{self.values!r}"


def array_union(*values) -> ArrayUnion:
    return ArrayUnion(*values)


def apply_field_paths(document: Document, writes: Writes) -> Document:
    """
    把點號路徑的寫入套用到文件上

    規則：
    - "buzz.lockedBy" 只改 buzz 底下的 lockedBy，其他欄位保留
    - 中間節點不存在（或不是 dict）時會建立新的 dict
    - 值為 ArrayUnion 時，依序把不在 list 內的元素加到尾端
    - 其他值會 deepcopy，呼叫者之後修改原物件不會影響文件

    參數：
        document: 要修改的文件（會被原地修改）
        writes: {路徑: 值}

    返回：
        修改後的同一份 document
    """
    for path, value in writes.items():
        parts = path.split(".")
        node = document
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child

        leaf = parts[-1]
        if isinstance(value, ArrayUnion):
            current = node.get(leaf)
            items = list(current) if isinstance(current, list) else []
            for item in value.values:
                if item not in items:
                    items.append(item)
            node[leaf] = items
        else:
            node[leaf] = copy.deepcopy(value)
    return document


def _to_document(record: RoomRecord) -> Document:
    document = copy.deepcopy(record.data or {})
    created_at = record.created_at
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    document["createdAt"] = created_at.isoformat() if created_at else None
    return document


@transactional
def _locked_write(db: Session, room_id: str, mutate: Callable[[Document], Optional[Writes]],
                  replace: bool = False):
    """
    在 transaction 內鎖定 Room、計算寫入、套用

    參數：
        db: SQLAlchemy Session
        room_id: 房間識別字串
        mutate: 收到目前文件、回傳 writes 的 function
        replace: True 時以 writes 取代整份文件，而不是合併

    返回：
        mutate 回傳的 writes（None / 空 dict 表示沒有寫入）

    異常：
        RoomMissing: Room 不存在
        StaleDataError: commit 時版本已被其他寫入者改掉（由呼叫者重試）
    """
    record = with_room_lock(room_id, db).first()
    if record is None:
        raise RoomMissing(room_id)

    writes = mutate(_to_document(record))
    if writes:
        document = {} if replace else copy.deepcopy(record.data or {})
        record.data = apply_field_paths(document, writes)
    return writes


@dataclass
class _Subscription:
    callback: RoomCallback
    last_revision: int = -1


class RoomListeners:
    """
    同一個 process 內的訂閱者清單

    保證：
    - 每個訂閱者收到的 revision 嚴格遞增（舊的、重複的直接丟掉）
    - 同一個房間的推播在鎖內依序進行
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._rooms: Dict[str, Dict[int, _Subscription]] = {}
        self._ids = itertools.count(1)

    def add(self, room_id: str, callback: RoomCallback,
            read_current: Callable[[], Tuple[int, Optional[Document]]]) -> int:
        # 在鎖內讀取初始狀態，推播不會插在「讀取」和「註冊」之間
        with self._lock:
            sub_id = next(self._ids)
            subscription = _Subscription(callback=callback)
            self._rooms.setdefault(room_id, {})[sub_id] = subscription
            self._deliver(room_id, subscription, *read_current())
            return sub_id

    def remove(self, room_id: str, sub_id: int) -> None:
        with self._lock:
            subscriptions = self._rooms.get(room_id)
            if not subscriptions:
                return
            subscriptions.pop(sub_id, None)
            if not subscriptions:
                del self._rooms[room_id]

    def publish(self, room_id: str, revision: int, document: Optional[Document]) -> None:
        with self._lock:
            for subscription in list(self._rooms.get(room_id, {}).values()):
                self._deliver(room_id, subscription, revision, document)

    def count(self, room_id: str) -> int:
        with self._lock:
            return len(self._rooms.get(room_id, {}))

    @staticmethod
    def _deliver(room_id, subscription, revision, document):
        if revision <= subscription.last_revision:
            return
        subscription.last_revision = revision
        try:
            subscription.callback(copy.deepcopy(document))
        except Exception:
            # 一個訂閱者出錯不影響寫入者和其他訂閱者
            logger.exception(f"Room {room_id} listener failed at revision {revision}")


class RoomStore:
    """Room 文件的存取介面（SQLAlchemy 實作）"""

    def __init__(self, session_factory: sessionmaker, max_attempts: int = 10):
        self._session_factory = session_factory
        self.max_attempts = max_attempts
        self.listeners = RoomListeners()

    # ============ 讀取 ============

    def _read(self, room_id: str) -> Tuple[int, Optional[Document]]:
        db = self._session_factory()
        try:
            record = db.query(RoomRecord).filter(RoomRecord.id == room_id).first()
            if record is None:
                return 0, None
            return record.version, _to_document(record)
        finally:
            db.close()

    def get(self, room_id: str) -> Optional[Document]:
        """取得最新的 Room 文件，不存在時回傳 None"""
        return self._read(room_id)[1]

    def revision(self, room_id: str) -> int:
        """目前 commit 的版本號，不存在時為 0"""
        return self._read(room_id)[0]

    # ============ 寫入 ============

    def create(self, room_id: str, document: Document) -> bool:
        """
        Room 不存在時建立（insert-if-absent）

        返回：
            True 表示這次呼叫建立了 Room；False 表示已經存在，什麼都沒寫

        注意：
            - 兩個請求同時建立同一個 Room 時，主鍵衝突的那一方回傳 False
        """
        db = self._session_factory()
        try:
            if db.query(RoomRecord.id).filter(RoomRecord.id == room_id).first():
                return False
            db.add(RoomRecord(id=room_id, data=copy.deepcopy(document)))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.info(f"Room {room_id} was created concurrently, keeping existing document")
                return False
        finally:
            db.close()

        logger.info(f"Created room {room_id}")
        self._publish_latest(room_id)
        return True

    def set(self, room_id: str, document: Document) -> None:
        """整份覆寫 Room 文件（不存在時建立），createdAt 保留原值"""
        replacement = {key: value for key, value in document.items() if key != "createdAt"}
        if self.create(room_id, replacement):
            return
        self._write(room_id, lambda current: replacement, replace=True)

    def update_partial(self, room_id: str, fields: Writes) -> None:
        """
        點號路徑的部分更新（last-writer-wins）

        異常：
            RoomMissing: Room 不存在
        """
        self._write(room_id, lambda current: dict(fields))

    def transact(self, room_id: str, fn: Callable[[Document], Optional[Writes]]) -> Optional[Writes]:
        """
        原子性的 read-modify-write

        fn 收到目前的文件（複本），回傳要寫入的點號路徑 dict；
        回傳 None 或空 dict 代表不寫入。
        版本衝突時 fn 會以最新狀態重新執行，所以 fn 不應該有副作用。

        返回：
            實際 commit 的 writes，沒有寫入時為 None / 空 dict

        異常：
            RoomMissing: Room 不存在（不重試）
            TransactionConflict: 重試次數用完
        """
        return self._write(room_id, fn)

    def _write(self, room_id: str, mutate: Callable[[Document], Optional[Writes]],
               replace: bool = False) -> Optional[Writes]:
        for attempt in range(1, self.max_attempts + 1):
            db = self._session_factory()
            try:
                writes = _locked_write(db, room_id, mutate, replace=replace)
            except StaleDataError:
                logger.warning(
                    f"Room {room_id} changed during transaction, retrying "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue
            finally:
                db.close()

            if writes:
                self._publish_latest(room_id)
            return writes

        raise TransactionConflict(room_id, self.max_attempts)

    # ============ 訂閱 ============

    def subscribe(self, room_id: str, callback: RoomCallback) -> Callable[[], None]:
        """
        訂閱 Room 的變化

        callback 會立刻收到目前的文件（不存在時為 None），
        之後每次 commit 再收到一次。

        返回：
            取消訂閱的 function（重複呼叫無害）
        """
        sub_id = self.listeners.add(room_id, callback, lambda: self._read(room_id))

        def unsubscribe():
            self.listeners.remove(room_id, sub_id)

        return unsubscribe

    def _publish_latest(self, room_id: str) -> None:
        if not self.listeners.count(room_id):
            return
        revision, document = self._read(room_id)
        self.listeners.publish(room_id, revision, document)


_default_store: Optional[RoomStore] = None


def get_room_store() -> RoomStore:
    """
    FastAPI dependency：整個 process 共用一個 RoomStore

    訂閱者清單存在 RoomStore 上，所以必須共用同一個實例
    """
    global _default_store
    if _default_store is None:
        _default_store = RoomStore(SessionLocal, max_attempts=settings.room_txn_max_attempts)
    return _default_store
