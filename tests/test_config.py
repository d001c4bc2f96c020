"""
Unit Tests for Configuration Loading (cityroute/tools/config_loader.py)
"""

import pytest

from cityroute.tools import (
    AssignmentConfig,
    ConfigLoader,
    PROFILE_ENV_VAR,
    RoutingConfig,
    get_config,
    load_assignment_config,
    load_routing_config,
)


class TestConfigLoader:
    """Test YAML profile loading."""

    def test_default_profile(self):
        """The default profile carries both sections."""
        config = ConfigLoader.load_city_profile("default")
        assert config["routing"]["cache_capacity"] == 1000
        assert config["assignment"]["dummy_cost_factor"] == 2.0

    def test_missing_profile_lists_available(self):
        """Unknown profiles raise with the available names."""
        with pytest.raises(FileNotFoundError, match="large-city"):
            ConfigLoader.load_city_profile("atlantis")

    def test_env_profile(self, monkeypatch):
        """The environment variable selects the profile."""
        monkeypatch.setenv(PROFILE_ENV_VAR, "large-city")
        assert ConfigLoader.get_profile_from_env() == "large-city"
        assert get_config()["routing"]["cache_capacity"] == 5000

    def test_default_without_env(self, monkeypatch):
        """Without the variable the default profile is used."""
        monkeypatch.delenv(PROFILE_ENV_VAR, raising=False)
        assert get_config()["routing"]["default_strategy"] == "balanced"

    def test_typed_configs(self):
        """Sections load into dataclasses."""
        routing = load_routing_config("large-city")
        assignment = load_assignment_config("large-city")
        assert routing.astar_distance_threshold == 5.0
        assert routing.default_strategy == "fastest"
        assert assignment.unreachable_cost == 50000.0


class TestConfigValidation:
    """Test dataclass validation."""

    def test_defaults(self):
        """Defaults match the documented values."""
        assert RoutingConfig().cache_capacity == 1000
        assert RoutingConfig().astar_distance_threshold == 10.0
        assert AssignmentConfig().max_assignment_cost == 5000.0

    def test_unknown_keys_ignored(self):
        """Extra keys in a section do not break loading."""
        config = RoutingConfig.from_dict({"cache_capacity": 10, "colour": "blue"})
        assert config.cache_capacity == 10

    def test_missing_section(self):
        """A missing section gives defaults."""
        assert AssignmentConfig.from_dict(None) == AssignmentConfig()

    def test_invalid_values(self):
        """Out-of-range values raise ValueError."""
        with pytest.raises(ValueError):
            RoutingConfig(cache_capacity=0)
        with pytest.raises(ValueError):
            RoutingConfig(astar_distance_threshold=-1.0)
        with pytest.raises(ValueError):
            AssignmentConfig(dummy_cost_factor=1.5)

    def test_round_trip_dict(self):
        """to_dict feeds back into from_dict."""
        config = AssignmentConfig(unreachable_cost=123.0)
        assert AssignmentConfig.from_dict(config.to_dict()) == config
