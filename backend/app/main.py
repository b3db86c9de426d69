from __future__ import annotations
import uvicorn, logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pdfpile.core.settings import Settings
from .routers import documents
from .storage import DocStore

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str):
    """Set up the service's loggers; runs in whichever process serves requests."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in ('backend', 'pdfpile'):
        logging.getLogger(name).setLevel(level)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    app = FastAPI(title="PDF-Pile Document Store", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = DocStore(str(settings.storage_dir), str(settings.uploads_dir))
    app.include_router(documents.router)

    # Uploaded PDFs are fetched by the viewer from /files/<filename>
    app.mount('/files', StaticFiles(directory=str(settings.uploads_dir)), name='files')

    @app.get('/')
    async def root():
        return {"service": "pdfpile", "status": "ok"}

    return app


app = create_app()

if __name__ == '__main__':
    _settings = Settings.from_env()
    uvicorn.run("backend.app.main:app", host="0.0.0.0", port=_settings.port, reload=True,
                log_level=_settings.log_level.lower())
