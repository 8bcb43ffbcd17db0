from routefuse.classifier import classify
from routefuse.custom_exceptions import DirectoryReadError, RouteFuseError
from routefuse.fuse import fuse_routes, fuse_routes_sync
from routefuse.introspection import attach_route_table, extract_routes

__version__ = "0.1.0"

__all__ = [
    "DirectoryReadError",
    "RouteFuseError",
    "attach_route_table",
    "classify",
    "extract_routes",
    "fuse_routes",
    "fuse_routes_sync",
]
