"""Exceptions raised by pyfcimport."""


class FcImportError(Exception):
    """Base exception for all repository import errors."""


class ConfigError(FcImportError):
    """Raised when required configuration cannot be loaded."""


class ResourceReadError(FcImportError):
    """Raised when a local file cannot be read during a traversal pass.

    The pass is aborted; there is no per-file recovery.
    """

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(message or f"Could not read {path}")
