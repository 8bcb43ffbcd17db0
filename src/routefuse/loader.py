"""
Turn candidate files into module objects.

Each strategy follows one module convention and reports a typed result instead
of raising. A file that does not follow a strategy's convention is a normal,
silent outcome: most files in a project are not routers and many are not
meant to be imported standalone at all.
"""

import hashlib
import importlib
import importlib.machinery
import importlib.util
import re
import sys
from collections.abc import Sequence
from pathlib import Path
from types import ModuleType
from typing import Protocol

import structlog

from routefuse.models import (
    Candidate,
    LoadError,
    Loaded,
    LoadFailed,
    LoadFailure,
    LoadOutcome,
    NotApplicable,
    StrategyResult,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

SYNTHETIC_MODULE_PREFIX = "_routefuse_"


class LoaderStrategy(Protocol):
    name: str

    def load(self, path: Path) -> StrategyResult:
        """Try to produce a module for `path` using this strategy's convention."""
        ...


def module_path(module: object) -> Path | None:
    module_file = getattr(module, "__file__", None)
    if not isinstance(module_file, str) or not module_file:
        return None
    try:
        return Path(module_file).resolve()
    except OSError:
        return None


class ImportedModuleStrategy:
    """Reuse a module that is already in `sys.modules`, e.g. the host's own `__main__`."""

    name = "imported"

    def __init__(self) -> None:
        # resolved __file__ per module name, valid while the same module object is registered
        self._paths: dict[str, tuple[ModuleType, Path | None]] = {}

    def _path_of(self, module_name: str, module: ModuleType) -> Path | None:
        cached = self._paths.get(module_name)
        if cached is None or cached[0] is not module:
            cached = (module, module_path(module))
            self._paths[module_name] = cached
        return cached[1]

    def load(self, path: Path) -> StrategyResult:
        for module_name, module in list(sys.modules.items()):
            if isinstance(module, ModuleType) and self._path_of(module_name, module) == path:
                return Loaded(module, strategy=self.name)
        return NotApplicable(strategy=self.name)


def dotted_module_name(path: Path) -> tuple[str, Path] | None:
    """
    Work out the importable name of `path` by walking up through package directories.

    Returns the dotted name and the directory that must be on `sys.path` for it to
    import, or None when a component is not a valid identifier.
    """
    parts = [] if path.name == "__init__.py" else [path.stem]
    parent = path.parent
    while (parent / "__init__.py").is_file():
        parts.insert(0, parent.name)
        if parent.parent == parent:
            break
        parent = parent.parent

    if not parts or not all(part.isidentifier() for part in parts):
        return None
    return ".".join(parts), parent


def _import_roots() -> set[Path]:
    roots: set[Path] = set()
    for entry in sys.path:
        try:
            roots.add(Path(entry or ".").resolve())
        except OSError:
            continue
    return roots


class PackageImportStrategy:
    """Import the file by its dotted name when its package root is on `sys.path`."""

    name = "package_import"

    def load(self, path: Path) -> StrategyResult:
        resolved = dotted_module_name(path)
        if resolved is None:
            return NotApplicable(strategy=self.name)

        module_name, import_root = resolved
        if import_root.resolve() not in _import_roots():
            return NotApplicable(strategy=self.name)

        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            if exc.name is not None and (module_name == exc.name or module_name.startswith(exc.name + ".")):
                return NotApplicable(strategy=self.name)
            return LoadError(exc, strategy=self.name)
        except (Exception, SystemExit) as exc:
            return LoadError(exc, strategy=self.name)

        # Another module with the same dotted name shadows this file
        if module_path(module) != path:
            return NotApplicable(strategy=self.name)

        return Loaded(module, strategy=self.name)


def synthetic_module_name(path: Path) -> str:
    """Build a unique `sys.modules` key for a file loaded by location."""
    digest = hashlib.sha1(str(path).encode()).hexdigest()[:12]
    stem = re.sub(r"\W", "_", path.stem)
    return f"{SYNTHETIC_MODULE_PREFIX}{stem}_{digest}"


def _is_relative_import_error(exc: ImportError) -> bool:
    return exc.name is None and "relative import" in str(exc)


class FileLocationStrategy:
    """Execute the file as a standalone module, without touching `sys.path`."""

    name = "file_location"

    def load(self, path: Path) -> StrategyResult:
        module_name = synthetic_module_name(path)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            return NotApplicable(strategy=self.name)

        module = importlib.util.module_from_spec(spec)
        # Registered up front so dataclasses and pydantic models can find their module
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except ImportError as exc:
            del sys.modules[module_name]
            if _is_relative_import_error(exc):
                return NotApplicable(strategy=self.name)
            return LoadError(exc, strategy=self.name)
        except (Exception, SystemExit) as exc:
            del sys.modules[module_name]
            return LoadError(exc, strategy=self.name)

        return Loaded(module, strategy=self.name)


def _synthetic_package(import_root: Path) -> str:
    name = synthetic_module_name(import_root)
    if name not in sys.modules:
        spec = importlib.machinery.ModuleSpec(name, None, is_package=True)
        spec.submodule_search_locations = [str(import_root)]
        sys.modules[name] = importlib.util.module_from_spec(spec)
    return name


class PackageLocationStrategy:
    """
    Import a package member whose package root is not on `sys.path`.

    The root directory is exposed as a synthetic top-level package, so the member's
    package chain is imported first and its relative imports resolve.
    """

    name = "package_location"

    def load(self, path: Path) -> StrategyResult:
        resolved = dotted_module_name(path)
        if resolved is None:
            return NotApplicable(strategy=self.name)

        module_name, import_root = resolved
        if "." not in module_name and path.name != "__init__.py":
            return NotApplicable(strategy=self.name)

        qualified_name = f"{_synthetic_package(import_root)}.{module_name}"
        try:
            module = importlib.import_module(qualified_name)
        except (Exception, SystemExit) as exc:
            return LoadError(exc, strategy=self.name)

        if module_path(module) != path:
            return NotApplicable(strategy=self.name)

        return Loaded(module, strategy=self.name)


def default_strategies() -> tuple[LoaderStrategy, ...]:
    """A fresh strategy chain, so no per-strategy state outlives a run."""
    return (
        ImportedModuleStrategy(),
        PackageImportStrategy(),
        FileLocationStrategy(),
        PackageLocationStrategy(),
    )


class Loader:
    """Handles loading of candidates, at most once per path"""

    def __init__(self, strategies: Sequence[LoaderStrategy] | None = None) -> None:
        self.strategies = tuple(strategies) if strategies is not None else default_strategies()
        self._outcomes: dict[Path, LoadOutcome] = {}

    def load(self, candidate: Candidate) -> LoadOutcome:
        path = candidate.path.resolve()
        if path in self._outcomes:
            return self._outcomes[path]

        outcome = self._load(path, candidate)
        self._outcomes[path] = outcome
        return outcome

    def _load(self, path: Path, candidate: Candidate) -> LoadOutcome:
        for strategy in self.strategies:
            result = strategy.load(path)

            if isinstance(result, Loaded):
                logger.debug("Loaded candidate", path=str(path), strategy=strategy.name, kind=candidate.kind.value)
                return result

            if isinstance(result, LoadError):
                logger.error(
                    "Error loading candidate",
                    path=str(path),
                    strategy=strategy.name,
                    exc_info=result.error,
                )
                return LoadFailed(LoadFailure.LOAD_ERROR, result.error)

        logger.debug("Candidate is not a loadable module", path=str(path))
        return LoadFailed(LoadFailure.NOT_THIS_CONVENTION)
