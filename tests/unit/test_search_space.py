"""
Tests for the search spaces and Params

Checked invariants:
1. len() equals the number of Params one iteration produces
2. Grid search enumerates the full cross product in a fixed order
3. Iteration can be repeated
4. Reading a missing parameter raises MissingParameterError
"""

import numpy as np
import pytest

from optiback.common.config import Config
from optiback.common.errors import ConfigurationError, MissingParameterError
from optiback.optimization.search_space import EmptySearchSpace, GridSearch, Parameter, Params, RandomSearch


# =============================================================================
# TESTS: Params
# =============================================================================


class TestParams:
    """Immutable parameter values of a single trial."""

    def test_typed_getters(self):
        params = Params({"fast": 12, "ratio": "0.5", "name": "ema", "enabled": 1})
        assert params.get_int("fast") == 12
        assert params.get_float("ratio") == 0.5
        assert params.get_str("name") == "ema"
        assert params.get_bool("enabled") is True

    def test_missing_key(self):
        params = Params({"fast": 12})
        with pytest.raises(MissingParameterError) as exc_info:
            params.get_int("slow")
        assert exc_info.value.name == "slow"
        assert "slow" in str(exc_info.value)

        # still a KeyError, so Mapping.get works
        assert params.get("slow") is None
        with pytest.raises(KeyError):
            params["slow"]

    def test_immutable(self):
        source = {"fast": 12}
        params = Params(source)
        source["fast"] = 99
        assert params["fast"] == 12
        with pytest.raises(TypeError):
            params["fast"] = 1

    def test_equality_and_hash(self):
        assert Params({"a": 1, "b": 2}) == Params({"b": 2, "a": 1})
        assert hash(Params({"a": 1, "b": 2})) == hash(Params({"b": 2, "a": 1}))
        assert Params({"a": 1}) == {"a": 1}
        assert len(Params()) == 0


# =============================================================================
# TESTS: Parameter
# =============================================================================


class TestParameter:
    """Validation of parameter definitions."""

    def test_values_from_range_and_array(self):
        assert Parameter(name="p", values=range(3)).values == [0, 1, 2]
        assert Parameter(name="p", values=np.arange(3)).values == [0, 1, 2]

    def test_requires_values_or_generator(self):
        with pytest.raises(ValueError):
            Parameter(name="p")
        with pytest.raises(ValueError):
            Parameter(name="p", values=[1], generator=lambda: 1)

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            Parameter(name="p", values=[])
        with pytest.raises(ValueError):
            Parameter(name="", values=[1])


# =============================================================================
# TESTS: Search spaces
# =============================================================================


class TestGridSearch:
    """Exhaustive search."""

    @pytest.fixture
    def space(self) -> GridSearch:
        space = GridSearch()
        space.add("p1", range(3))
        space.add("p2", range(100))
        space.add("p3", np.arange(100))
        return space

    def test_size(self, space):
        assert len(space) == 30000
        params = list(space)
        assert len(params) == 30000
        assert len([p for p in params if p.get_int("p1") == 1]) == 10000

    def test_all_combinations_distinct(self, space):
        assert len(set(space)) == 30000

    def test_order(self):
        space = GridSearch().add("a", [1, 2]).add("b", ["x", "y"])
        assert list(space) == [
            Params({"a": 1, "b": "x"}),
            Params({"a": 1, "b": "y"}),
            Params({"a": 2, "b": "x"}),
            Params({"a": 2, "b": "y"}),
        ]
        assert list(space) == list(space)

    def test_generator_is_sampled_once(self):
        calls = []

        def generate():
            calls.append(1)
            return len(calls)

        space = GridSearch().add("a", [1, 2]).add("noise", generate, samples=5)
        assert len(space) == 10
        assert len(calls) == 5
        assert list(space) == list(space)
        assert len(calls) == 5

    def test_generator_requires_samples(self):
        with pytest.raises(ConfigurationError):
            GridSearch().add("noise", lambda: 1.0)

    def test_duplicate_name(self):
        space = GridSearch().add("a", [1])
        with pytest.raises(ConfigurationError):
            space.add("a", [2])

    def test_empty_values(self):
        with pytest.raises(ConfigurationError):
            GridSearch().add("a", [])

    def test_parameter_names(self, space):
        assert space.get_parameter_names() == ["p1", "p2", "p3"]


class TestRandomSearch:
    """Random search."""

    def test_size(self):
        space = RandomSearch(100).add("p1", range(3)).add("p2", lambda: Config.random.uniform(0.0, 1.0))
        params = list(space)
        assert len(space) == 100
        assert len(params) == 100
        for p in params:
            assert p.get_int("p1") in (0, 1, 2)
            assert 0.0 <= p.get_float("p2") < 1.0

    def test_seed_is_reproducible(self):
        space = RandomSearch(20, seed=42).add("p1", range(1000))
        assert list(space) == list(space)

    def test_positive_size(self):
        with pytest.raises(ConfigurationError):
            RandomSearch(0)


class TestEmptySearchSpace:
    """Search space without parameters."""

    def test_single_empty_params(self):
        space = EmptySearchSpace()
        assert len(space) == 1
        assert list(space) == [Params()]
        with pytest.raises(MissingParameterError):
            list(space)[0].get_int("fast")
