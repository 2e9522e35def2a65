"""Engine configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "KANBANFLOW_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "kanbanflow" / "config.yaml"


@dataclass
class EngineConfig:
    """Runtime configuration for a board session."""

    store_path: str = "~/.local/share/kanbanflow/boards.json"

    # Simulated round-trip latency per operation family, in milliseconds
    board_delay_ms: int = 300
    column_delay_ms: int = 200
    task_delay_ms: int = 250

    log_level: str = "INFO"

    @property
    def resolved_store_path(self) -> Path:
        return Path(self.store_path).expanduser()

    @classmethod
    def load(cls, path: str | Path | None = None) -> "EngineConfig":
        """Load config from YAML, falling back to defaults.

        ``path`` wins over ``$KANBANFLOW_CONFIG``, which wins over the
        default location. Unknown keys are ignored, and so are values of the
        wrong type.
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
        cfg_path = Path(path).expanduser()
        if not cfg_path.exists():
            return cls()
        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
            return cls()
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a mapping", cfg_path)
            return cls()
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        return cls(**EngineConfig._checked(values, cfg_path))

    @staticmethod
    def _checked(values: dict, cfg_path: Path) -> dict:
        """Coerce numeric strings; drop values of the wrong type with a warning."""
        checked = {}
        for key, value in values.items():
            if key.endswith("_delay_ms"):
                if isinstance(value, str):
                    try:
                        value = int(value.strip())
                    except ValueError:
                        pass
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    logger.warning(
                        "Ignoring %s in %s: expected milliseconds, got %r", key, cfg_path, value
                    )
                    continue
            elif not isinstance(value, str):
                logger.warning("Ignoring %s in %s: expected a string, got %r", key, cfg_path, value)
                continue
            checked[key] = value
        return checked
