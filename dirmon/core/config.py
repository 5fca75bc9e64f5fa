# Copyright (c) 2025 Trae AI. All rights reserved.

import yaml
from pathlib import Path
from typing import Any, Dict
from pydantic import BaseModel
from .errors import ConfigError


def read_config_file(path: str) -> Dict[str, Any]:
    """
    Reads the YAML file as plain values, so the command line can fill in the rest.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}")
    return data


class Config(BaseModel):
    watch_dir: Path
    action: str
    recursive: bool = True
    shell: bool = False
    verbose: bool = False

    @classmethod
    def load(cls, path: str = "config.yaml") -> "Config":
        return cls(**read_config_file(path))

    def validate_paths(self):
        if not self.watch_dir.exists():
            raise ConfigError(f"Directory not found: {self.watch_dir}")
        if not self.watch_dir.is_dir():
            raise ConfigError(f"Not a directory: {self.watch_dir}")
        # With shell enabled the action is a command line, not a file
        if not self.shell and not Path(self.action).is_file():
            raise ConfigError(f"Action not found: {self.action}")
