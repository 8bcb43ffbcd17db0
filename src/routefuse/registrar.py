from pathlib import Path
from typing import Any

import structlog

from routefuse.models import (
    Classification,
    Container,
    MountAttempt,
    MountOutcome,
    RegistrationRecord,
    SingleRouter,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


class Registrar:
    """Mounts classified routers onto one application, one at a time and in call order."""

    def __init__(self, application: Any) -> None:
        self.application = application
        self._mounted: set[int] = set()
        # keep the routers alive so their ids stay unique for the whole run
        self._routers: list[Any] = []

    def register(self, candidate_path: Path, classification: Classification) -> RegistrationRecord:
        if isinstance(classification, SingleRouter):
            members: tuple[SingleRouter, ...] = (classification,)
        elif isinstance(classification, Container):
            members = classification.members
        else:
            return RegistrationRecord(candidate_path, MountOutcome.SKIPPED_NOT_ROUTABLE)

        attempts = tuple(self._mount(candidate_path, member) for member in members)
        return RegistrationRecord(candidate_path, _overall_outcome(attempts), attempts)

    def _mount(self, candidate_path: Path, member: SingleRouter) -> MountAttempt:
        router = member.router
        log = logger.bind(path=str(candidate_path), router=member.name)

        if router is self.application:
            log.debug("Router is the target application itself, skipping")
            return MountAttempt(member.name, MountOutcome.SKIPPED_NOT_ROUTABLE)

        if id(router) in self._mounted:
            log.debug("Router already mounted in this run, skipping")
            return MountAttempt(member.name, MountOutcome.SKIPPED_DUPLICATE)

        try:
            self.application.include_router(router)
        except Exception as exc:
            log.error("Error mounting router", exc_info=exc)
            return MountAttempt(member.name, MountOutcome.MOUNT_FAILED, exc)

        self._mounted.add(id(router))
        self._routers.append(router)
        log.info("Mounted router", routes=len(router.routes))
        return MountAttempt(member.name, MountOutcome.MOUNTED)


def _overall_outcome(attempts: tuple[MountAttempt, ...]) -> MountOutcome:
    outcomes = {attempt.outcome for attempt in attempts}
    if MountOutcome.MOUNT_FAILED in outcomes:
        return MountOutcome.MOUNT_FAILED
    if MountOutcome.MOUNTED in outcomes:
        return MountOutcome.MOUNTED
    if MountOutcome.SKIPPED_DUPLICATE in outcomes:
        return MountOutcome.SKIPPED_DUPLICATE
    return MountOutcome.SKIPPED_NOT_ROUTABLE
