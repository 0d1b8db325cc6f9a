"""Exception types raised by the loadout library."""


class LoadoutError(Exception):
    """Base class for loadout library errors."""


class CoverageError(LoadoutError):
    """Raised when a rule table does not cover the optimization vocabulary.

    Registry, conflict and guide tables are checked when their modules are
    imported, so a missing or duplicated handler fails at import time.
    """


class CompilationError(LoadoutError):
    """Raised when a fragment generator fails during compilation."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Rule '{key}' failed: {message}")


class ProfileLoadError(LoadoutError):
    """Raised when a saved profile document cannot be parsed."""
