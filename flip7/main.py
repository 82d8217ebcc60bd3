import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flip7.config import get_settings
from flip7.routers import rooms, ws
from flip7.services.room import get_room_service
from flip7.services.websocket.manager import get_connection_manager

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    manager = get_connection_manager()
    await manager.start_cleanup_task()
    logger.info("Flip 7 server up (debug=%s)", settings.DEBUG)

    yield

    logger.info(
        "Flip 7 server shutting down: rooms=%d, sockets=%d",
        get_room_service().get_room_count(),
        manager.get_total_connection_count(),
    )
    await manager.stop_cleanup_task()
    await manager.close_all_connections()


app = FastAPI(
    title="Flip 7 API",
    description="Room server for the Flip 7 card game",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms.router, prefix="/api/v1")
app.include_router(ws.router, prefix="/api/v1")


@app.get("/")
def root():
    return {"message": "Flip 7 API"}


@app.get("/health")
def health():
    return {"status": "healthy"}
