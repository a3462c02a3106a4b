"""Tests for the scipy-backed distribution constructors."""

import pytest
from scipy import stats

from uncertain import ConvergenceFailure, Distribution, PointMass
from uncertain.api.distributions import (
    bernoulli,
    binomial,
    normal,
    point,
    poisson,
    uniform,
)


class TestDistributionsFacade:
    """Tests for the scipy-backed constructors."""

    def test_constructors_build_leaves(self):
        for node in (
            normal(0.0, 1.0),
            bernoulli(0.5),
            binomial(10, 0.5),
            poisson(2.0),
            uniform(0.0, 1.0),
        ):
            assert isinstance(node, Distribution)
        assert isinstance(point(3), PointMass)

    @pytest.mark.parametrize(
        "factory, args",
        [
            (normal, (0.0, 0.0)),
            (bernoulli, (-0.1,)),
            (binomial, (-1, 0.5)),
            (binomial, (3, 1.5)),
            (poisson, (0.0,)),
            (uniform, (1.0, 1.0)),
        ],
    )
    def test_invalid_parameters(self, factory, args):
        with pytest.raises(ValueError):
            factory(*args)

    def test_uniform_mean(self):
        mu = uniform(2.0, 4.0).expect(0.05)
        assert not isinstance(mu, ConvergenceFailure)
        assert abs(mu - 3.0) < 0.1

    def test_sensor_reading_example(self):
        speed = normal(5.0, 1.0).into_shared()
        limit = point(4.0)
        assert speed.gt(limit).pr(0.7)
        assert not speed.gt(limit).pr(0.95)
        assert Distribution(stats.norm(5.0, 1.0)).lt(2.0).not_().pr(0.99)
