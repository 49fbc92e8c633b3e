"""JSON file persistence for the seen-offer state and the subscriber list.

Both stores overwrite their file in full on every save. There is no locking;
the poll loop is the only writer of the state file and runs one cycle at a time.
"""
import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from .models import MonitorState

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


class StateStore:
    """Seen-offer state persisted as a JSON object"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> MonitorState:
        """Load state, falling back to a fresh first-run state"""
        if not self.path.exists():
            return MonitorState()
        try:
            return MonitorState.model_validate(_read_json(self.path))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"⚠️ Estado ilegible en {self.path}, se usa el estado inicial: {e}")
            return MonitorState()

    def save(self, state: MonitorState) -> None:
        _write_json(self.path, state.to_json_dict())


class SubscriberStore:
    """Telegram chat ids persisted as a JSON array"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[int]:
        """Load subscribers, deduplicated, in registration order"""
        if not self.path.exists():
            return []
        try:
            data = _read_json(self.path)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Lista de suscriptores ilegible en {self.path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"⚠️ Lista de suscriptores con formato inválido en {self.path}")
            return []

        subscribers: List[int] = []
        for item in data:
            try:
                chat_id = int(item)
            except (TypeError, ValueError):
                continue
            if chat_id not in subscribers:
                subscribers.append(chat_id)
        return subscribers

    def save(self, subscribers: List[int]) -> None:
        _write_json(self.path, list(dict.fromkeys(subscribers)))

    def add(self, chat_id: int) -> bool:
        """Register a chat id; returns False if it was already registered"""
        subscribers = self.load()
        if chat_id in subscribers:
            return False
        subscribers.append(chat_id)
        self.save(subscribers)
        logger.info(f"👤 Nuevo suscriptor registrado: {chat_id}")
        return True
