# storage.py
from __future__ import annotations
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# path setup
ROOT_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.getenv("LEARNING_JOURNEY_DATA_DIR", str(ROOT_DIR / "data")))
CONFIG_PATH = DATA_DIR / "config.json"


def _write_atomic(path: Path, text: str) -> None:
    """write to a .tmp sibling, then swap it in"""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


#----- Key-value blob stores -----
class KeyValueStore(ABC):
    """
    minimal blob store: text values under string keys
    """
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """stored text, or None when the key is absent"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """store text under key, replacing any previous value"""

    @abstractmethod
    def remove(self, key: str) -> None:
        """drop key; an absent key is not an error"""


class MemoryStore(KeyValueStore):
    """dict-backed store, nothing touches the disk"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(KeyValueStore):
    """
    one file per key: <data_dir>/<key>.json
    writes go to a .tmp sibling first, then replace the target
    """
    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.warning("could not read %s", path, exc_info=True)
            return None

    def set(self, key: str, value: str) -> None:
        _write_atomic(self.path_for(key), value)

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


#----- App configuration -----
def ensure_data_files(default_config: Dict[str, Any],
                      config_path: Optional[Path] = None) -> None:
    """
    check and create data directory and config file if they do not exist.
    """
    path = config_path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    # config.json
    if not path.exists():
        save_config(default_config, path)


def load_config(default_config: Optional[Dict[str, Any]] = None,
                config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    read config.json; missing keys are filled from default_config.
    an unreadable file falls back to the defaults.
    """
    path = config_path or CONFIG_PATH
    cfg: Dict[str, Any] = dict(default_config or {})
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.warning("config %s is unreadable, using defaults", path, exc_info=True)
            return cfg
        if isinstance(data, dict):
            cfg.update(data)
        else:
            logger.warning("config %s is not an object, using defaults", path)
    return cfg


def save_config(cfg: Dict[str, Any], config_path: Optional[Path] = None) -> None:
    _write_atomic(config_path or CONFIG_PATH,
                  json.dumps(cfg, ensure_ascii=False, indent=2))
