"""
Read-only routes for browsing past scrape outputs.
"""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse
from pydantic import BaseModel

from src.backend.downloader.dedup import MANIFEST_FILENAME
from src.backend.fs.storage import StorageAdapter
from src.backend.pipeline.scrape_runner import INDEX_FILENAME


class ScrapeSummaryOut(BaseModel):
    """One past scrape with a readable manifest."""
    name: str
    source: Optional[str] = None
    fetched_at: Optional[str] = None
    file_count: int


def _render_index(names: list[str]) -> str:
    items = "\n".join(
        f'<li><a href="/view/{quote(name)}/">{html.escape(name)}</a></li>' for name in names
    )
    return (
        "<!doctype html>\n"
        "<html>\n"
        '<head><meta charset="utf-8"><title>Scrape outputs</title></head>\n'
        "<body>\n"
        "<h1>Scrape outputs</h1>\n"
        f"<ul>\n{items}\n</ul>\n"
        "</body></html>\n"
    )


def _resolve_inside(output_root: Path, *parts: str) -> Path:
    """Resolve a path under output_root; 404 if it escapes the root."""
    root = output_root.resolve()
    candidate = root.joinpath(*parts).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        raise HTTPException(status_code=404, detail="Not found") from None
    return candidate


def create_viewer_router(*, output_root: Path, storage: StorageAdapter) -> APIRouter:
    router = APIRouter(tags=["viewer"])

    def list_outputs() -> list[str]:
        return sorted(p.name for p in storage.list_dirs(output_root))

    def read_manifest(folder: str) -> Optional[dict[str, Any]]:
        manifest_path = _resolve_inside(output_root, folder, MANIFEST_FILENAME)
        try:
            raw = json.loads(storage.read_text(manifest_path))
        except (OSError, ValueError):
            return None
        return raw if isinstance(raw, dict) else None

    @router.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(_render_index(list_outputs()))

    @router.get("/api/scrapes", response_model=list[ScrapeSummaryOut])
    def list_scrapes() -> list[ScrapeSummaryOut]:
        out: list[ScrapeSummaryOut] = []
        for name in list_outputs():
            manifest = read_manifest(name)
            if manifest is None:
                continue
            files = manifest.get("files")
            out.append(
                ScrapeSummaryOut(
                    name=name,
                    source=manifest.get("source"),
                    fetched_at=manifest.get("fetchedAt"),
                    file_count=len(files) if isinstance(files, list) else 0,
                )
            )
        return out

    @router.get("/api/scrapes/{folder}/manifest")
    def get_manifest(folder: str) -> dict[str, Any]:
        manifest = read_manifest(folder)
        if manifest is None:
            raise HTTPException(status_code=404, detail=f"No manifest for {folder}")
        return manifest

    @router.get("/view/{folder}")
    def view_folder_redirect(folder: str) -> RedirectResponse:
        return RedirectResponse(url=f"/view/{quote(folder)}/")

    @router.get("/view/{folder}/{rest:path}")
    def view_file(folder: str, rest: str) -> FileResponse:
        file_path = _resolve_inside(output_root, folder, rest or INDEX_FILENAME)
        if not file_path.is_file():
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(str(file_path))

    return router
