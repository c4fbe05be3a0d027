from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .models import ScrapeConfig


logger = logging.getLogger(__name__)


class ConfigStore:
    """
    JSON file backed scrape configuration.

    Lookup order on load: `path`, then `fallback_path` (an example config
    shipped next to it), then built-in defaults.
    """

    def __init__(self, *, path: Path, fallback_path: Optional[Path] = None) -> None:
        self._path = Path(path)
        self._fallback_path = Path(fallback_path) if fallback_path is not None else None

    def load(self) -> ScrapeConfig:
        """
        Raises:
            ValueError: If a readable config holds an invalid folderNaming.
        """
        for candidate in (self._path, self._fallback_path):
            if candidate is None:
                continue
            raw = self._read_json(candidate)
            if raw is None:
                continue
            return ScrapeConfig.from_persist_dict(raw)
        return ScrapeConfig()

    def save(self, config: ScrapeConfig) -> None:
        payload = config.to_persist_dict()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        tmp_path.replace(self._path)

    @staticmethod
    def _read_json(path: Path) -> Optional[dict[str, Any]]:
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", path, exc)
            return None
        if not isinstance(raw, dict):
            logger.warning("Ignoring config %s: top-level value is not an object", path)
            return None
        return raw
