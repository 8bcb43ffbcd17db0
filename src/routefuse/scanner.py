import asyncio
import os
from pathlib import Path

import structlog

from routefuse.constants import SOURCE_SUFFIXES
from routefuse.custom_exceptions import DirectoryReadError
from routefuse.models import Candidate, DiscoveryConfig, SourceKind

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


def list_directory(directory: Path) -> list[os.DirEntry[str]]:
    """Return the entries of `directory` sorted by name."""
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


async def scan(config: DiscoveryConfig) -> list[Candidate]:
    """
    Walk `config.root_path` depth-first and return every source file that survives the exclusion rules.

    Entries are visited in lexicographic order at every level, so two scans of an
    unchanged tree return the same list in the same order. Routers are later
    mounted in this order, which decides route precedence.

    Exceptions:
        DirectoryReadError: A directory could not be listed. Nothing has been mounted at this point.
    """
    candidates: list[Candidate] = []
    await _walk(config.root_path, config, candidates, visited=set())
    logger.debug("Scanned project tree", root=str(config.root_path), candidates=len(candidates))
    return candidates


async def _walk(
    directory: Path,
    config: DiscoveryConfig,
    candidates: list[Candidate],
    visited: set[tuple[int, int]],
) -> None:
    try:
        stat = await asyncio.to_thread(os.stat, directory)
        entries = await asyncio.to_thread(list_directory, directory)
    except OSError as exc:
        logger.error("Error reading directory", path=str(directory), error=str(exc))
        raise DirectoryReadError(directory) from exc

    # symlinks can make the same directory reachable twice
    identity = (stat.st_dev, stat.st_ino)
    if identity in visited:
        logger.debug("Directory already visited, skipping", path=str(directory))
        return
    visited.add(identity)

    kind = SourceKind.PACKAGE_MODULE if any(entry.name == "__init__.py" for entry in entries) else SourceKind.SCRIPT

    for entry in entries:
        entry_path = directory / entry.name
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
        except OSError as exc:
            logger.error("Error processing directory entry", path=str(entry_path), error=str(exc))
            continue

        if is_dir:
            if entry.name not in config.excluded_folders:
                await _walk(entry_path, config, candidates, visited)
        elif is_file and entry.name.endswith(SOURCE_SUFFIXES) and entry.name not in config.excluded_files:
            candidates.append(Candidate(path=entry_path, kind=kind))
