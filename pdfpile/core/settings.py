from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import os


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Runtime configuration.

    Env Vars:
      PDFPILE_API_URL          Document Store base URL (default http://localhost:3001)
      PDFPILE_STORAGE_DIR      server directory holding db.json (default backend/storage)
      PDFPILE_UPLOADS_DIR      server directory for PDF binaries (default <storage>/uploads)
      PDFPILE_STATE_DIR        client-side local state, e.g. scroll positions (default ~/.pdfpile)
      PDFPILE_AUTOSAVE_DELAY   quiet period before autosave, seconds (default 1.0)
      PDFPILE_HISTORY_LIMIT    undo snapshots kept (default 50)
      PDFPILE_HTTP_TIMEOUT     client request timeout, seconds (default 10)
      PDFPILE_LOG_LEVEL        server log level (default INFO)
      PORT                     server port (default 3001)
    """
    api_url: str = 'http://localhost:3001'
    storage_dir: Path = Path('backend', 'storage')
    uploads_dir: Path = field(default_factory=lambda: Path('backend', 'storage', 'uploads'))
    state_dir: Path = field(default_factory=lambda: Path.home() / '.pdfpile')
    autosave_delay: float = 1.0
    history_limit: int = 50
    http_timeout: float = 10.0
    log_level: str = 'INFO'
    port: int = 3001

    @classmethod
    def from_env(cls) -> 'Settings':
        storage = Path(os.environ.get('PDFPILE_STORAGE_DIR') or Path('backend', 'storage'))
        uploads = Path(os.environ.get('PDFPILE_UPLOADS_DIR') or storage / 'uploads')
        state = Path(os.environ.get('PDFPILE_STATE_DIR') or Path.home() / '.pdfpile')
        history_limit = _env_int('PDFPILE_HISTORY_LIMIT', 50)
        return cls(
            api_url=(os.environ.get('PDFPILE_API_URL') or 'http://localhost:3001').rstrip('/'),
            storage_dir=storage,
            uploads_dir=uploads,
            state_dir=state,
            autosave_delay=max(0.0, _env_float('PDFPILE_AUTOSAVE_DELAY', 1.0)),
            history_limit=history_limit if history_limit > 0 else 50,
            http_timeout=_env_float('PDFPILE_HTTP_TIMEOUT', 10.0),
            log_level=os.environ.get('PDFPILE_LOG_LEVEL', 'INFO').upper(),
            port=_env_int('PORT', 3001),
        )
