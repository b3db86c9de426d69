from __future__ import annotations
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional
import json, logging, threading, time

logger = logging.getLogger(__name__)

STATE_FILENAME = 'scroll_positions.json'


@dataclass
class ScrollRecord:
    top: float
    ratio: float
    updatedAt: int  # epoch ms

    @staticmethod
    def parse(raw) -> Optional['ScrollRecord']:
        """Validate a stored record; anything malformed reads as absent."""
        if not isinstance(raw, dict):
            return None
        try:
            top = float(raw['top'])
            ratio = float(raw['ratio'])
            updated = int(raw.get('updatedAt', 0))
        except (KeyError, TypeError, ValueError):
            return None
        if top < 0 or not (0.0 <= ratio <= 1.0):
            return None
        return ScrollRecord(top=top, ratio=ratio, updatedAt=updated)


class ScrollStateStore:
    """Best-effort per-document scroll positions kept in a local JSON file."""

    def __init__(self, state_dir: Path):
        self.path = Path(state_dir) / STATE_FILENAME
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, dict]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.debug("Ignoring unreadable scroll state %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, doc_id: str) -> Optional[ScrollRecord]:
        with self._lock:
            return ScrollRecord.parse(self._read_all().get(doc_id))

    def save(self, doc_id: str, top: float, ratio: float) -> ScrollRecord:
        record = ScrollRecord(top=max(0.0, top), ratio=min(1.0, max(0.0, ratio)), updatedAt=int(time.time() * 1000))
        with self._lock:
            data = self._read_all()
            data[doc_id] = asdict(record)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, 'w', encoding='utf-8') as f:
                    json.dump(data, f)
            except OSError as e:
                logger.debug("Could not persist scroll state: %s", e)
        return record
