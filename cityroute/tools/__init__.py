"""Configuration tools."""

from .config_loader import (
    ConfigLoader,
    RoutingConfig,
    AssignmentConfig,
    get_config,
    load_routing_config,
    load_assignment_config,
    PROFILE_ENV_VAR,
    DEFAULT_PROFILE,
)

__all__ = [
    "ConfigLoader",
    "RoutingConfig",
    "AssignmentConfig",
    "get_config",
    "load_routing_config",
    "load_assignment_config",
    "PROFILE_ENV_VAR",
    "DEFAULT_PROFILE",
]
