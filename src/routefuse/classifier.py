"""
Structural classification of loaded values.

FastAPI applications and routers share a base shape: both are ASGI callables
carrying a ``routes`` list and an ``include_router`` method. They are told apart
by the capabilities only a whole application has (``add_middleware`` and
``build_middleware_stack``). This is a heuristic: a user-defined object with the
same shape is classified the same way.
"""

from collections.abc import Iterator, Mapping
from types import ModuleType
from typing import Any, Protocol, TypeGuard

from starlette.types import Receive, Scope, Send

from routefuse.models import ApplicationLike, Classification, Container, NotRoutable, SingleRouter

DEFAULT_SLOT = "default"

_APPLICATION_MARKERS = ("add_middleware", "build_middleware_stack")


class Router(Protocol):
    """Anything that can be passed to ``include_router``."""

    routes: list[Any]

    def include_router(self, router: Any, **kwargs: Any) -> None: ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


class Application(Router, Protocol):
    """The root object owning the middleware stack."""

    def add_middleware(self, middleware_class: Any, *args: Any, **kwargs: Any) -> None: ...

    def build_middleware_stack(self) -> Any: ...


def _capability(value: object, name: str) -> Any:
    try:
        return getattr(value, name, None)
    except Exception:
        # a property blowing up means the capability is not usable
        return None


def is_application(value: object) -> TypeGuard[Application]:
    if isinstance(value, type) or not callable(value):
        return False
    return all(callable(_capability(value, marker)) for marker in _APPLICATION_MARKERS)


def is_router(value: object) -> TypeGuard[Router]:
    if isinstance(value, type) or not callable(value):
        return False
    if not isinstance(_capability(value, "routes"), list):
        return False
    if not callable(_capability(value, "include_router")):
        return False
    return not is_application(value)


def _default_slot(value: object) -> Any:
    if isinstance(value, Mapping):
        return value.get(DEFAULT_SLOT)
    return _capability(value, DEFAULT_SLOT)


def _as_router(value: object, name: str | None) -> SingleRouter | None:
    if is_router(value):
        return SingleRouter(value, name=name)

    default = _default_slot(value)
    if default is not None and is_router(default):
        qualified = DEFAULT_SLOT if name is None else f"{name}.{DEFAULT_SLOT}"
        return SingleRouter(default, name=qualified)

    return None


def _own_members(value: object) -> Iterator[tuple[str, Any]]:
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, ModuleType) or hasattr(value, "__dict__"):
        items = vars(value).items()
    else:
        return

    for key, member in list(items):
        if isinstance(key, str) and key.startswith("__"):
            continue
        yield str(key), member


def classify(value: object) -> Classification:
    """
    Decide what a loaded value is, in priority order:

    1. the whole application (never mounted)
    2. a single router
    3. a router stored in the value's ``default`` slot
    4. a plain container whose members are routers
    5. nothing routable
    """
    if value is None:
        return NotRoutable()

    if is_application(value):
        return ApplicationLike(value)

    if (router := _as_router(value, None)) is not None:
        return router

    if callable(value):
        return NotRoutable()

    members = tuple(
        router for name, member in _own_members(value) if (router := _as_router(member, name)) is not None
    )
    if members:
        return Container(members)

    return NotRoutable()
