from pathlib import Path


class RouteFuseError(Exception):
    """Base class for errors raised by routefuse."""


class DirectoryReadError(RouteFuseError):
    """A directory in the project tree could not be listed. Aborts discovery."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Unable to read directory {path}")
