import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401  (registers RoomRecord on Base.metadata)
from core.room_manager import RoomManager
from core.room_store import RoomStore, get_room_store
from database import Base, make_engine


@pytest.fixture
def store(tmp_path):
    """每個測試一個獨立的 SQLite 檔案（多執行緒測試需要檔案型資料庫）"""
    engine = make_engine(f"sqlite:///{tmp_path / 'rooms.db'}")
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield RoomStore(session_factory, max_attempts=50)
    engine.dispose()


@pytest.fixture
def room(store):
    RoomManager.ensure_room(store, "PARTY1")
    return "PARTY1"


@pytest.fixture
def client(store):
    from main import app

    app.dependency_overrides[get_room_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
