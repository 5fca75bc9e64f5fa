# Copyright (c) 2025 Trae AI. All rights reserved.


class DirMonError(Exception):
    pass


class SourceExhausted(DirMonError):
    """
    Raised by a notification source once it has been closed or has failed.
    """


class ActionCrash(DirMonError):
    """
    The action could not be launched at all.
    """

    def __init__(self, action: str, reason: Exception):
        super().__init__(f"Could not run {action}: {reason}")
        self.action = action
        self.reason = reason


class ConfigError(DirMonError):
    pass
