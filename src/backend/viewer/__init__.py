"""
Read-only web viewer for past scrape outputs.
"""

from .app import create_viewer_app

__all__ = ["create_viewer_app"]
