"""FastAPI application: REST routes, WebSocket endpoint, per-session frame loop."""

import asyncio
import json
import logging
import math

from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .config import Settings
from .constants import GRID, TILE_SIZE
from .connection_manager import (
    ConnectionManager, build_game_over_msg, build_gyro_msg, build_state_msg, build_welcome_msg,
)
from .game import monotonic_ms
from .logging_config import configure_logging
from .models import GamePhase
from .session import GameSession
from .store import JsonHighScoreStore

logger = logging.getLogger(__name__)

settings = Settings.from_env()
store = JsonHighScoreStore(settings.high_score_path)
manager = ConnectionManager()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(level=settings.log_level)
    logger.info("Snake server ready (frame rate %d)", settings.frame_rate)
    yield


app = FastAPI(lifespan=lifespan)


@app.get("/api/high-score")
async def get_high_score():
    return {"high_score": store.load_high_score()}


@app.get("/api/config")
async def get_config():
    return {
        "grid": GRID,
        "tile_size": TILE_SIZE,
        "frame_rate": settings.frame_rate,
        "options": settings.default_options.to_dict(),
    }


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


async def handle_message(ws: WebSocket, session: GameSession, msg: dict):
    kind = msg.get("type")
    if kind == "start":
        session.start()
    elif kind == "pause":
        session.toggle_pause()
    elif kind == "key":
        session.key(msg.get("key"))
    elif kind == "button":
        session.button(msg.get("direction"))
    elif kind in ("touch_start", "touch_move"):
        x, y = _number(msg.get("x")), _number(msg.get("y"))
        if x is None or y is None:
            return
        if kind == "touch_start":
            session.touch_start(x, y)
        else:
            session.touch_move(x, y)
    elif kind == "gyro_toggle":
        answer = msg.get("permission")
        request = None
        if answer is not None:
            async def request():
                return answer
        permission = await session.toggle_gyro(request, supported=msg.get("supported", True) is not False)
        await manager.send_personal(ws, build_gyro_msg(session.arbiter.gyro, permission))
    elif kind == "gyro_sample":
        beta, gamma = msg.get("beta"), msg.get("gamma")
        session.gyro_sample(_number(beta), _number(gamma))
    elif kind == "gyro_recalibrate":
        session.recalibrate_gyro()
        await manager.send_personal(ws, build_gyro_msg(session.arbiter.gyro))
    elif kind == "options":
        session.update_options(msg)
        await manager.send_personal(ws, build_welcome_msg(session))
    else:
        logger.debug("Ignoring message type %r", kind)


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    session = GameSession(options=settings.new_options(), store=store)
    manager.connect(ws, session)
    await ws.send_text(build_welcome_msg(session))
    loop_task = asyncio.create_task(frame_loop(ws, session))
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring malformed message")
                continue
            if not isinstance(msg, dict):
                continue
            await handle_message(ws, session, msg)
    except WebSocketDisconnect:
        pass
    finally:
        loop_task.cancel()
        manager.disconnect(ws)


async def frame_loop(ws: WebSocket, session: GameSession):
    """Drive one session's scheduler at the configured frame rate."""
    interval = 1 / settings.frame_rate
    announced_over = False
    while True:
        session.frame(monotonic_ms())
        phase = session.phase

        if session.gyro_changed:
            if not await manager.send_personal(ws, build_gyro_msg(session.arbiter.gyro)):
                return

        if phase in (GamePhase.RUNNING, GamePhase.PAUSED):
            announced_over = False
            if not await manager.send_personal(ws, build_state_msg(session)):
                return
        elif phase is GamePhase.OVER and not announced_over:
            announced_over = True
            if not await manager.send_personal(ws, build_state_msg(session)):
                return
            if not await manager.send_personal(ws, build_game_over_msg(session)):
                return

        await asyncio.sleep(interval)


def run():
    import uvicorn
    configure_logging(level=settings.log_level)
    logger.info("Snake server starting on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
