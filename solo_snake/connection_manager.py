"""WebSocket connection management and state serialization."""

import json
import logging
from typing import Optional

from fastapi import WebSocket

from .constants import GRID, LEVEL_THEMES, TILE_SIZE
from .input import GyroController
from .models import Cell, SensorPermission
from .session import GameSession, theme_for_level

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self.sessions: dict[WebSocket, GameSession] = {}

    def connect(self, ws: WebSocket, session: GameSession):
        self.sessions[ws] = session

    def disconnect(self, ws: WebSocket) -> Optional[GameSession]:
        session = self.sessions.pop(ws, None)
        if session is not None:
            session.stop()
        return session

    async def send_personal(self, ws: WebSocket, message: str) -> bool:
        try:
            await ws.send_text(message)
        except Exception:
            logger.debug("Send failed, dropping connection")
            self.disconnect(ws)
            return False
        return True


def cells_to_list(cells) -> list[list[int]]:
    return [[x, y] for x, y in cells]


def segment_seams(prev: list[Cell], cur: list[Cell]) -> list[int]:
    """Indices of segments that jumped more than one cell between ticks (wrap seams)."""
    seams = []
    for i, (a, b) in enumerate(zip(prev, cur)):
        if abs(a[0] - b[0]) + abs(a[1] - b[1]) > 1:
            seams.append(i)
    return seams


def build_welcome_msg(session: GameSession) -> str:
    return json.dumps({
        "type": "welcome",
        "grid": GRID,
        "tile_size": TILE_SIZE,
        "high_score": session.engine.run.high_score,
        "options": session.options.to_dict(),
    })


def build_state_msg(session: GameSession) -> str:
    engine = session.engine
    run = engine.run
    effects = session.effects
    frame = session.last_frame
    theme_index = (run.level - 1) % len(LEVEL_THEMES)
    theme = theme_for_level(run.level)
    return json.dumps({
        "type": "state",
        "phase": engine.phase.value,
        "snake": cells_to_list(engine.snake),
        "prev_snake": cells_to_list(engine.prev_snake),
        "seams": segment_seams(engine.prev_snake, engine.snake),
        "direction": run.direction,
        "food": list(engine.food) if engine.food else None,
        "obstacles": cells_to_list(sorted(engine.obstacles)),
        "interpolation": round(frame.interpolation, 4),
        "score": run.score,
        "high_score": run.high_score,
        "level": run.level,
        "theme": {"index": theme_index, "name": theme["name"]},
        "combo": effects.combo,
        "combo_timer": round(effects.combo_timer, 3),
        "level_flash": round(effects.level_flash, 3),
        "particles": [
            [round(p.x, 1), round(p.y, 1), round(p.life, 3), p.color, round(p.size, 2)]
            for p in effects.particles
        ],
        "cues": [_cue(event) for event in session.last_cues],
    })


def _cue(event: dict) -> dict:
    cue = dict(event)
    if "cell" in cue:
        cue["cell"] = list(cue["cell"])
    return cue


def build_game_over_msg(session: GameSession) -> str:
    run = session.engine.run
    return json.dumps({
        "type": "game_over",
        "score": run.score,
        "level": run.level,
        "high_score": run.high_score,
        "new_record": run.new_record,
    })


def build_gyro_msg(gyro: GyroController, permission: Optional[SensorPermission] = None) -> str:
    return json.dumps({
        "type": "gyro",
        "state": gyro.state.value,
        "enabled": gyro.enabled,
        "unavailable": gyro.unavailable,
        "permission": permission.value if permission else None,
    })
