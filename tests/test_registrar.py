from pathlib import Path
from unittest.mock import Mock, call

from fastapi import APIRouter, FastAPI

from routefuse.models import (
    ApplicationLike,
    Container,
    MountAttempt,
    MountOutcome,
    NotRoutable,
    RegistrationRecord,
    SingleRouter,
)
from routefuse.registrar import Registrar

CANDIDATE = Path("/project/routes.py")


def make_router(path: str) -> APIRouter:
    router = APIRouter()

    @router.get(path)
    def handle() -> None: ...

    return router


def test_single_router_is_mounted(app: FastAPI):
    router = make_router("/users")

    record = Registrar(app).register(CANDIDATE, SingleRouter(router))

    assert record == RegistrationRecord(CANDIDATE, MountOutcome.MOUNTED, (MountAttempt(None, MountOutcome.MOUNTED),))
    assert "/users" in [route.path for route in app.routes]


def test_not_routable_and_application_are_skipped():
    application = Mock()
    registrar = Registrar(application)

    assert registrar.register(CANDIDATE, NotRoutable()).outcome is MountOutcome.SKIPPED_NOT_ROUTABLE
    assert registrar.register(CANDIDATE, ApplicationLike(FastAPI())).outcome is MountOutcome.SKIPPED_NOT_ROUTABLE
    application.include_router.assert_not_called()


def test_container_members_mounted_in_order():
    application = Mock()
    first, second = APIRouter(), APIRouter()

    record = Registrar(application).register(
        CANDIDATE, Container((SingleRouter(first, name="first"), SingleRouter(second, name="second")))
    )

    assert record.outcome is MountOutcome.MOUNTED
    assert record.mounted == 2
    assert application.include_router.call_args_list == [call(first), call(second)]


def test_mount_failure_is_isolated(captured_logs: list[dict]):
    application = Mock()
    error = RuntimeError("cannot mount")
    application.include_router.side_effect = [None, error, None]
    routers = [APIRouter(), APIRouter(), APIRouter()]

    record = Registrar(application).register(
        CANDIDATE, Container(tuple(SingleRouter(router, name=str(i)) for i, router in enumerate(routers)))
    )

    assert record.outcome is MountOutcome.MOUNT_FAILED
    assert [attempt.outcome for attempt in record.attempts] == [
        MountOutcome.MOUNTED,
        MountOutcome.MOUNT_FAILED,
        MountOutcome.MOUNTED,
    ]
    assert record.attempts[1].error is error
    assert application.include_router.call_count == 3

    errors = [entry for entry in captured_logs if entry["log_level"] == "error"]
    assert len(errors) == 1
    assert errors[0]["router"] == "1"
    assert errors[0]["exc_info"] is error


def test_failure_does_not_stop_later_candidates():
    application = Mock()
    application.include_router.side_effect = [ValueError("nope"), None]
    registrar = Registrar(application)

    failed = registrar.register(Path("/project/a.py"), SingleRouter(APIRouter()))
    mounted = registrar.register(Path("/project/b.py"), SingleRouter(APIRouter()))

    assert failed.outcome is MountOutcome.MOUNT_FAILED
    assert mounted.outcome is MountOutcome.MOUNTED


def test_same_router_mounted_once(app: FastAPI):
    router = make_router("/users")
    registrar = Registrar(app)

    first = registrar.register(Path("/project/users.py"), SingleRouter(router, name="router"))
    reexport = registrar.register(Path("/project/__init__.py"), SingleRouter(router, name="users_router"))

    assert first.outcome is MountOutcome.MOUNTED
    assert reexport.outcome is MountOutcome.SKIPPED_DUPLICATE
    assert [route.path for route in app.routes].count("/users") == 1


def test_target_router_is_never_mounted_onto_itself():
    target = make_router("/users")

    record = Registrar(target).register(CANDIDATE, SingleRouter(target))

    assert record.outcome is MountOutcome.SKIPPED_NOT_ROUTABLE
    assert len(target.routes) == 1
