from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

from routefuse.constants import DEFAULT_EXCLUDED_FOLDERS, SOURCE_SUFFIXES


def parse_exclude_filter(exclude_filter: str) -> tuple[frozenset[str], frozenset[str]]:
    """Split a space-separated filter into ``(files, folders)``.

    Tokens ending in a source suffix are file names, every other token is a folder name.
    """
    tokens = [token for token in exclude_filter.split(" ") if token]
    files = frozenset(token for token in tokens if token.endswith(SOURCE_SUFFIXES))
    folders = frozenset(token for token in tokens if token not in files)
    return files, folders


@dataclass(frozen=True)
class DiscoveryConfig:
    """Settings for a single discovery run.

    The permanent default folders are always merged into `excluded_folders`,
    so callers can only add exclusions.
    """

    root_path: Path
    excluded_folders: frozenset[str] = field(default_factory=frozenset)
    excluded_files: frozenset[str] = field(default_factory=frozenset)
    enable_introspection: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "root_path", Path(self.root_path).absolute())
        object.__setattr__(self, "excluded_folders", DEFAULT_EXCLUDED_FOLDERS | frozenset(self.excluded_folders))
        object.__setattr__(self, "excluded_files", frozenset(self.excluded_files))

    @classmethod
    def from_filter(cls, root_path: Path | str, exclude_filter: str = "", enable_introspection: bool = False) -> Self:
        files, folders = parse_exclude_filter(exclude_filter)
        return cls(
            root_path=Path(root_path),
            excluded_folders=folders,
            excluded_files=files,
            enable_introspection=enable_introspection,
        )
