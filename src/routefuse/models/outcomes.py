from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TypeAlias


class SourceKind(Enum):
    """
    Where a candidate file sits.

    PACKAGE_MODULE - its directory has an ``__init__.py``
    SCRIPT - a standalone file
    """

    PACKAGE_MODULE = "package_module"
    SCRIPT = "script"


@dataclass(frozen=True)
class Candidate:
    path: Path
    kind: SourceKind = SourceKind.SCRIPT


# Results of a single loading strategy


@dataclass(frozen=True)
class Loaded:
    value: Any
    strategy: str = ""


@dataclass(frozen=True)
class NotApplicable:
    """The file does not follow this strategy's module convention."""

    strategy: str = ""


@dataclass(frozen=True)
class LoadError:
    """The file follows the convention but blew up while loading."""

    error: BaseException
    strategy: str = ""


StrategyResult: TypeAlias = Loaded | NotApplicable | LoadError


# Result of the whole loader for one candidate


class LoadFailure(Enum):
    NOT_THIS_CONVENTION = "not_this_convention"
    LOAD_ERROR = "load_error"


@dataclass(frozen=True)
class LoadFailed:
    reason: LoadFailure
    error: BaseException | None = None


LoadOutcome: TypeAlias = Loaded | LoadFailed


# Shapes a loaded value can take


@dataclass(frozen=True)
class SingleRouter:
    router: Any
    name: str | None = None


@dataclass(frozen=True)
class ApplicationLike:
    application: Any


@dataclass(frozen=True)
class Container:
    members: tuple[SingleRouter, ...]


@dataclass(frozen=True)
class NotRoutable:
    pass


Classification: TypeAlias = SingleRouter | ApplicationLike | Container | NotRoutable


class MountOutcome(Enum):
    MOUNTED = "mounted"
    SKIPPED_NOT_ROUTABLE = "skipped_not_routable"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    MOUNT_FAILED = "mount_failed"


@dataclass(frozen=True)
class MountAttempt:
    name: str | None
    outcome: MountOutcome
    error: BaseException | None = None


@dataclass(frozen=True)
class RegistrationRecord:
    candidate_path: Path
    outcome: MountOutcome
    attempts: tuple[MountAttempt, ...] = ()

    @property
    def mounted(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.outcome is MountOutcome.MOUNTED)
