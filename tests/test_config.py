"""Tests for sequential sampling configuration."""

import pytest

from uncertain import PointMass, QueryTrace, SequentialConfig, SPRTConfig


class TestConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        config = SPRTConfig()
        assert config.batch_size == 10
        assert config.max_batches == 1000
        assert config.max_samples == 10000
        assert config.alpha == config.beta == 1e-8
        config.validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"batch_size": 0},
            {"max_batches": 0},
            {"alpha": 1.0},
            {"beta": -0.1},
            {"indifference": 0.5},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SPRTConfig(**kwargs).validate()

    def test_configs_are_immutable(self):
        config = SequentialConfig()
        with pytest.raises(AttributeError):
            config.batch_size = 3

    def test_batch_size_shapes_sampling(self):
        trace = QueryTrace()
        PointMass(1.0).expect(0.1, config=SequentialConfig(batch_size=25), trace=trace)
        assert trace.frame()["samples"].to_list() == [25]
