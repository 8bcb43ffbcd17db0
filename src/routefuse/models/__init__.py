"""Data passed between the discovery stages."""

from routefuse.models.config import DiscoveryConfig, parse_exclude_filter
from routefuse.models.outcomes import (
    ApplicationLike,
    Candidate,
    Classification,
    Container,
    LoadError,
    Loaded,
    LoadFailed,
    LoadFailure,
    LoadOutcome,
    MountAttempt,
    MountOutcome,
    NotApplicable,
    NotRoutable,
    RegistrationRecord,
    SingleRouter,
    SourceKind,
    StrategyResult,
)
from routefuse.models.schemas import RouteDescriptor

__all__ = [
    "ApplicationLike",
    "Candidate",
    "Classification",
    "Container",
    "DiscoveryConfig",
    "LoadError",
    "LoadFailed",
    "LoadFailure",
    "LoadOutcome",
    "Loaded",
    "MountAttempt",
    "MountOutcome",
    "NotApplicable",
    "NotRoutable",
    "RegistrationRecord",
    "RouteDescriptor",
    "SingleRouter",
    "SourceKind",
    "StrategyResult",
    "parse_exclude_filter",
]
