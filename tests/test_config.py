"""Tests for engine configuration."""

import pytest
from datetime import timedelta

from cobuy.config import ELIGIBLE_STATUSES, EngineConfig
from cobuy.exceptions import CobuyError, ConfigurationError


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.min_support == 0.15
        assert config.min_confidence == 0.5
        assert config.ttl == timedelta(hours=24)
        assert config.min_transactions == 5
        assert config.max_len == 10
        assert config.eligible_statuses == ELIGIBLE_STATUSES

    @pytest.mark.parametrize("value", [0, -0.1, 1.01])
    def test_min_support_range(self, value):
        with pytest.raises(ConfigurationError):
            EngineConfig(min_support=value)

    @pytest.mark.parametrize("value", [0, 1.5])
    def test_min_confidence_range(self, value):
        with pytest.raises(ConfigurationError):
            EngineConfig(min_confidence=value)

    def test_upper_bound_inclusive(self):
        config = EngineConfig(min_support=1, min_confidence=1)
        assert config.min_support == 1

    def test_ttl_seconds(self):
        assert EngineConfig(ttl=90).ttl == timedelta(seconds=90)

    def test_negative_ttl(self):
        with pytest.raises(ConfigurationError):
            EngineConfig(ttl=-1)

    def test_other_bounds(self):
        with pytest.raises(ConfigurationError):
            EngineConfig(min_transactions=-1)
        with pytest.raises(ConfigurationError):
            EngineConfig(max_len=0)
        with pytest.raises(ConfigurationError):
            EngineConfig(eligible_statuses=[])

    def test_statuses_normalized(self):
        config = EngineConfig(eligible_statuses=[" Delivered ", "SHIPPED"])
        assert config.eligible_statuses == frozenset({"delivered", "shipped"})

    def test_from_mapping(self):
        config = EngineConfig.from_mapping({"min_support": 0.2, "ttl": 30})
        assert config.min_support == 0.2
        assert config.ttl == timedelta(seconds=30)

    def test_from_mapping_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown settings"):
            EngineConfig.from_mapping({"min_lift": 2})

    def test_replace(self):
        config = EngineConfig().replace(min_confidence=0.8, ttl=None)
        assert config.min_confidence == 0.8
        assert config.ttl == timedelta(hours=24)

    def test_error_hierarchy(self):
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ConfigurationError, CobuyError)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            EngineConfig().min_support = 0.9

    def test_single_status_string(self):
        config = EngineConfig.from_mapping({"eligible_statuses": "Delivered"})
        assert config.eligible_statuses == frozenset({"delivered"})

    def test_numeric_strings_coerced(self):
        config = EngineConfig.from_mapping({"min_support": "0.2", "max_len": "3", "ttl": "60"})
        assert config.min_support == 0.2
        assert config.max_len == 3
        assert config.ttl == timedelta(seconds=60)

    @pytest.mark.parametrize("settings", [
        {"min_support": "lots"},
        {"min_confidence": None},
        {"min_transactions": "five"},
        {"ttl": "a day"},
        {"max_len": True},
    ])
    def test_non_numeric_raises_configuration_error(self, settings):
        with pytest.raises(ConfigurationError, match="must be a number"):
            EngineConfig.from_mapping(settings)
