# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol
from .errors import ActionCrash


class ActionExecutor(Protocol):
    def run(self, action: str) -> int:
        ...


class ProcessActionExecutor:
    """
    Runs the action as a child process and waits for it to finish.
    """

    def __init__(self, shell: bool = False, cwd: Optional[Path] = None):
        self.shell = shell
        self.cwd = cwd
        self.logger = logging.getLogger(__name__)

    def run(self, action: str) -> int:
        args = action if self.shell else [action]
        self.logger.debug(f"Running {action} (shell={self.shell})")
        try:
            completed = subprocess.run(args, shell=self.shell, cwd=self.cwd, check=False)
        except OSError as e:
            raise ActionCrash(action, e) from e
        return completed.returncode
