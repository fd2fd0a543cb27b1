from __future__ import annotations

from pathlib import Path
from typing import Any, Dict
import tomllib

import yaml
from loguru import logger

from .models import Config

DEFAULT_CONFIG_DIR = Path("~/.config/rmenu")
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"


class ConfigLoader:
    """Read a settings document (YAML or TOML) into a validated Config."""

    def load_toml(self, path: str | Path) -> Dict[str, Any]:
        """Load a TOML settings file into a dict."""

        path = Path(path)
        return tomllib.loads(path.read_text(encoding="utf-8"))

    def load_yaml(self, path: str | Path) -> Dict[str, Any]:
        """Load a YAML settings file into a dict; an empty file yields {}."""

        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: invalid YAML: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
        return data

    def parse_config(self, config: Dict[str, Any]) -> Config:
        return Config.model_validate(config)

    def load(self, path: str | Path) -> Config:
        path = Path(path).expanduser()
        logger.info(f"Loading config from: {path}")
        if path.suffix == ".toml":
            data = self.load_toml(path)
        else:
            data = self.load_yaml(path)
        return self.parse_config(data)

    def load_default(self) -> Config:
        """Load the per-user config, falling back to defaults when absent."""

        path = DEFAULT_CONFIG_PATH.expanduser()
        if not path.exists():
            logger.debug(f"No config at {path}, using defaults")
            return Config()
        return self.load(path)
