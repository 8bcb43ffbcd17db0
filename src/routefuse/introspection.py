from collections.abc import Callable, Iterable
from typing import Any

import structlog
from starlette.routing import BaseRoute, Mount, Route, WebSocketRoute

from routefuse.constants import INTROSPECTION_PATH
from routefuse.models import RouteDescriptor

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

WEBSOCKET_METHOD = "WEBSOCKET"
ANY_METHOD = "ANY"
ROUTE_TABLE_NAME = "routefuse_route_table"


def extract_routes(
    routes: Iterable[BaseRoute],
    prefix: str = "",
    exclude: Iterable[Callable[..., Any]] = (),
) -> list[RouteDescriptor]:
    """
    Flatten a route list into method and path pairs, in registration order.

    Mounted sub-applications are followed with their path prefix. Routes whose
    endpoint is in `exclude` are left out.
    """
    excluded = list(exclude)
    descriptors: list[RouteDescriptor] = []

    for route in routes:
        if any(getattr(route, "endpoint", None) is endpoint for endpoint in excluded):
            continue

        if isinstance(route, Mount):
            descriptors.extend(extract_routes(route.routes, prefix + route.path, excluded))
        elif isinstance(route, Route):
            methods = sorted(route.methods) if route.methods else [ANY_METHOD]
            descriptors.extend(RouteDescriptor(method=method, path=prefix + route.path) for method in methods)
        elif isinstance(route, WebSocketRoute):
            descriptors.append(RouteDescriptor(method=WEBSOCKET_METHOD, path=prefix + route.path))
        elif isinstance(nested := getattr(route, "routes", None), list):
            descriptors.extend(extract_routes(nested, prefix, excluded))

    return descriptors


def attach_route_table(application: Any, path: str = INTROSPECTION_PATH) -> None:
    """
    Add a GET endpoint at `path` listing every route of `application`.

    The table is rebuilt on each request, so routers mounted later show up too.
    Attaching twice at the same path is a no-op.
    """
    if any(
        getattr(route, "name", None) == ROUTE_TABLE_NAME and getattr(route, "path", None) == path
        for route in application.routes
    ):
        logger.debug("Route table endpoint already attached", path=path)
        return

    async def route_table() -> list[RouteDescriptor]:
        return extract_routes(application.routes, exclude=(route_table,))

    application.add_api_route(
        path,
        route_table,
        methods=["GET"],
        include_in_schema=False,
        response_model=list[RouteDescriptor],
        name=ROUTE_TABLE_NAME,
    )
    logger.info("Attached route table endpoint", path=path)
