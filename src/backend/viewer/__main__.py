"""
Serve past scrape outputs for browsing.

Example:
  python -m src.backend.viewer --output ./output --port 3000
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import uvicorn

from src.backend.pipeline.scrape_runner import DEFAULT_OUTPUT_DIR_NAME

from .app import create_viewer_app


def main() -> None:
    parser = argparse.ArgumentParser(prog="page-media-viewer", description="Browse scrape outputs.")
    parser.add_argument("--output", "-o", default=DEFAULT_OUTPUT_DIR_NAME, help="Output root directory")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = create_viewer_app(output_root=Path(args.output))
    logging.getLogger(__name__).info("Viewer running at http://%s:%d/", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
