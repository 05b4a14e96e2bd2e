import json
import logging
from pathlib import Path
from typing import Optional

from . import config


class SettingsStore:
    """Remembers the last folder the renamer was pointed at."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else config.SETTINGS_PATH

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def last_path(self) -> Optional[Path]:
        value = self._load().get("last_path")
        return Path(value) if value else None

    def remember_path(self, folder: Path):
        data = self._load()
        data["last_path"] = str(folder)
        try:
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logging.warning(f"Could not save settings to {self.path}: {e}")
