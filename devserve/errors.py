from __future__ import annotations


class DevServeError(RuntimeError):
    pass


class ConfigurationError(DevServeError):
    """Raised for unknown, malformed or rejected command line arguments."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class HelpRequested(DevServeError):
    pass
