from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from database import Base, engine, settings
from api import rooms, teams, stage, websocket


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 設定 log level、建立資料庫表
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    )
    Base.metadata.create_all(bind=engine)
    yield
    # Shutdown: Room 文件不需要清理，過期刪除由外部處理


app = FastAPI(
    title="Party Quiz Room API",
    description="Shared room state for a multi-device party quiz: buzzer, scores and stage modes",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rooms.router)
app.include_router(teams.router)
app.include_router(stage.router)
app.include_router(websocket.router)


@app.get("/")
def root():
    return {"message": "Party Quiz Room API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
