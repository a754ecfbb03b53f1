"""High score persistence."""

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class HighScoreStore(Protocol):
    def load_high_score(self) -> int: ...

    def save_high_score(self, score: int) -> None: ...


class MemoryHighScoreStore:
    def __init__(self, high_score: int = 0):
        self.high_score = high_score

    def load_high_score(self) -> int:
        return self.high_score

    def save_high_score(self, score: int) -> None:
        self.high_score = score


class JsonHighScoreStore:
    """Stores the best score as ``{"high_score": n}`` in a JSON file.

    Read and write failures are logged and never raised, so a broken disk
    cannot end a run.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load_high_score(self) -> int:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as e:
            logger.warning("Could not read high score from %s: %s", self.path, e)
            return 0

        score = data.get("high_score", 0) if isinstance(data, dict) else 0
        if not isinstance(score, int) or isinstance(score, bool) or score < 0:
            logger.warning("Ignoring malformed high score in %s: %r", self.path, score)
            return 0
        return score

    def save_high_score(self, score: int) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump({"high_score": int(score)}, f)
        except OSError as e:
            logger.error("Failed to save high score to %s: %s", self.path, e)
            return
        logger.debug("Saved high score %d to %s", score, self.path)
