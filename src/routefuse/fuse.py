import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from routefuse.classifier import classify
from routefuse.constants import RouteFuse, routefuse_settings
from routefuse.custom_exceptions import DirectoryReadError
from routefuse.introspection import attach_route_table
from routefuse.loader import Loader
from routefuse.models import DiscoveryConfig, Loaded, MountOutcome, NotRoutable, RegistrationRecord
from routefuse.registrar import Registrar
from routefuse.scanner import scan

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


def build_config(
    project_path: Path | str | None = None,
    exclude_filter: str | None = None,
    enable_introspection: bool | None = None,
    settings: RouteFuse = routefuse_settings,
) -> DiscoveryConfig:
    """Fill in whatever the caller left out from the settings."""
    if project_path is None:
        project_path = settings.project_path or Path.cwd()
    if exclude_filter is None:
        exclude_filter = settings.exclude_filter
    if enable_introspection is None:
        enable_introspection = settings.enable_introspection

    return DiscoveryConfig.from_filter(project_path, exclude_filter, enable_introspection)


async def discover(
    application: Any,
    config: DiscoveryConfig,
    loader: Loader | None = None,
) -> tuple[RegistrationRecord, ...]:
    """Run one discovery pass with an explicit config. See `fuse_routes`."""
    loader = loader or Loader()
    registrar = Registrar(application)
    records: list[RegistrationRecord] = []

    with bound_contextvars(discovery_root=str(config.root_path)):
        if not callable(getattr(application, "include_router", None)):
            logger.error("Target application cannot include routers", application=type(application).__name__)

        try:
            candidates = await scan(config)
        except DirectoryReadError:
            logger.exception("Error fusing routes to application")
            raise

        for candidate in candidates:
            outcome = loader.load(candidate)
            classification = classify(outcome.value) if isinstance(outcome, Loaded) else NotRoutable()
            records.append(registrar.register(candidate.path, classification))
            # let other tasks run between imports
            await asyncio.sleep(0)

        if config.enable_introspection:
            attach_route_table(application)

        logger.info(
            "Finished fusing routes",
            candidates=len(candidates),
            mounted=sum(record.mounted for record in records),
            failed=sum(1 for record in records if record.outcome is MountOutcome.MOUNT_FAILED),
        )

    return tuple(records)


async def fuse_routes(
    application: Any,
    project_path: Path | str | None = None,
    exclude_filter: str | None = None,
    enable_introspection: bool | None = None,
) -> tuple[RegistrationRecord, ...]:
    """
    Find every router under `project_path` and mount it onto `application`.

    Args:
        application: The FastAPI app (or APIRouter) to mount routers onto. Mutated in place.
        project_path: Root of the scan. Defaults to the `ROUTEFUSE_PROJECT_PATH` setting, then the working directory.
        exclude_filter: Space-separated names to skip. Tokens ending in ``.py`` are files, the rest are folders.
            ``.git`` and ``.venv`` are always skipped.
        enable_introspection: Attach ``GET /help`` returning the live route table.

    Exceptions:
        DirectoryReadError: A directory could not be listed. Raised before anything is mounted.

    Returns:
        One `RegistrationRecord` per discovered file, in mount order.

    Files that fail to import and routers that fail to mount are logged and skipped.
    """
    config = build_config(project_path, exclude_filter, enable_introspection)
    return await discover(application, config)


def fuse_routes_sync(
    application: Any,
    project_path: Path | str | None = None,
    exclude_filter: str | None = None,
    enable_introspection: bool | None = None,
) -> tuple[RegistrationRecord, ...]:
    """
    Blocking version of `fuse_routes` for module-level use.

    Servers such as uvicorn import the application module while their event loop is
    running. In that case the run happens on a worker thread and this call blocks
    until it finishes. A discovered file that imports the module calling this
    function would wait on that module's import lock, so route files must not
    import the host module back.
    """
    coroutine = fuse_routes(application, project_path, exclude_filter, enable_introspection)
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coroutine)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="routefuse") as executor:
        return executor.submit(asyncio.run, coroutine).result()
