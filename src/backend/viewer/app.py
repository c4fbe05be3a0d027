from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from src.backend.fs.storage import LocalStorage, StorageAdapter

from .api import create_viewer_router


def create_viewer_app(*, output_root: Path, storage: Optional[StorageAdapter] = None) -> FastAPI:
    root = Path(output_root).resolve()
    storage = storage or LocalStorage()

    app = FastAPI(title="page-media-scraper viewer")
    app.include_router(create_viewer_router(output_root=root, storage=storage))

    app.state.output_root = root
    app.state.storage = storage
    return app
