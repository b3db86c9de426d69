# Ensure project root is on sys.path for test imports, and keep the module-level
# server app (backend.app.main:app) from creating storage inside the checkout.
import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_SCRATCH = Path(tempfile.mkdtemp(prefix="pdfpile-tests-"))
os.environ.setdefault("PDFPILE_STORAGE_DIR", str(_SCRATCH / "storage"))
os.environ.setdefault("PDFPILE_STATE_DIR", str(_SCRATCH / "state"))
