"""
Configuration loader for city profiles and environment variables.
"""

import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional
import yaml


PROFILE_ENV_VAR = "CITYROUTE_PROFILE"
DEFAULT_PROFILE = "default"


@dataclass
class RoutingConfig:
    """Configuration for the routing service."""

    cache_capacity: int = 1000
    """Maximum number of cached route results."""

    astar_distance_threshold: float = 10.0
    """Straight-line distance above which A* replaces Dijkstra."""

    alternative_penalty: float = 1000.0
    """Additive penalty on already-used edges when searching alternates."""

    default_strategy: str = "balanced"
    """Strategy used when a query does not name one (fastest, shortest, balanced)."""

    def __post_init__(self):
        if self.cache_capacity < 1:
            raise ValueError(f"cache_capacity must be >= 1, got {self.cache_capacity}")
        if self.astar_distance_threshold < 0:
            raise ValueError("astar_distance_threshold must be >= 0")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RoutingConfig":
        return cls(**_known_keys(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AssignmentConfig:
    """Configuration for unit-to-task assignment."""

    dummy_cost_factor: float = 2.0
    """Padding cost = factor x largest real cost (must be >= 2)."""

    unreachable_cost: float = 10000.0
    """Cost given to agent/task pairs with no route."""

    max_assignment_cost: float = 5000.0
    """Assignments at or above this cost are dropped from a dispatch plan."""

    greedy_when_single: bool = True
    """Use greedy matching when there is only one agent or one task."""

    def __post_init__(self):
        if self.dummy_cost_factor < 2.0:
            raise ValueError(f"dummy_cost_factor must be >= 2.0, got {self.dummy_cost_factor}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AssignmentConfig":
        return cls(**_known_keys(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _known_keys(cls, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (data or {}).items() if k in names}


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"

    @classmethod
    def load_city_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a city profile configuration.

        Args:
            profile_name: Name of the profile (default, large-city)

        Returns:
            Dictionary with configuration values

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if not profile_path.exists():
            available = sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )

        with open(profile_path, "r") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get city profile name from CITYROUTE_PROFILE environment variable."""
        return os.getenv(PROFILE_ENV_VAR)

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load city profile from environment variable or use the default profile.

        Returns:
            Configuration dictionary
        """
        profile = cls.get_profile_from_env() or DEFAULT_PROFILE
        return cls.load_city_profile(profile)


def get_config(profile: Optional[str] = None) -> Dict[str, Any]:
    """Convenience function to get the named (or current) profile."""
    if profile is not None:
        return ConfigLoader.load_city_profile(profile)
    return ConfigLoader.load_default_or_env_profile()


def load_routing_config(profile: Optional[str] = None) -> RoutingConfig:
    return RoutingConfig.from_dict(get_config(profile).get("routing"))


def load_assignment_config(profile: Optional[str] = None) -> AssignmentConfig:
    return AssignmentConfig.from_dict(get_config(profile).get("assignment"))
