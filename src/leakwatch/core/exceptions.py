"""leakwatch custom exceptions."""

from __future__ import annotations


class LeakwatchConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, config_path: str = None, section: str = None):
        self.config_path = config_path
        self.section = section
        super().__init__(message)

    def __str__(self):
        msg = super().__str__()
        if self.config_path:
            msg += f" (config: {self.config_path})"
        if self.section:
            msg += f" (section: {self.section})"
        return msg


class StoreError(Exception):
    """Raised when the findings store cannot be read or written."""

    def __init__(self, message: str, path: str = None):
        self.path = path
        super().__init__(message)

    def __str__(self):
        msg = super().__str__()
        if self.path:
            msg += f" (store: {self.path})"
        return msg
