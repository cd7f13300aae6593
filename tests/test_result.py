"""Tests for MapResult."""

import pytest

from py_polymap.core.result import MapResult
from py_polymap.errors import GenerationExhausted, TriangulationCollapsed, ValidationFailed
from py_polymap.models import MapData


def empty_map():
    return MapData(tiles=[], nodes=[], edges=[])


class TestCapture:
    """Test wrapping of generator outcomes."""

    def test_success(self):
        map_data = empty_map()
        result = MapResult.capture("hex", lambda: map_data)

        assert result.ok
        assert result.map_data is map_data
        assert result.generator == "hex"
        assert result.attempts == ["hex"]
        assert result.errors() == []

    def test_engine_error(self):
        def build():
            raise ValidationFailed(["Map has no tiles"])

        result = MapResult.capture("polygon", build)

        assert not result.ok
        assert isinstance(result.error, ValidationFailed)
        assert result.errors() == ["Map has no tiles"]

    def test_other_errors_propagate(self):
        """Only engine errors are captured."""
        def build():
            raise ValueError("bad argument")

        with pytest.raises(ValueError):
            MapResult.capture("polygon", build)

    def test_error_without_list(self):
        result = MapResult.failure(TriangulationCollapsed("initial", 2), "polygon")
        assert result.errors() == ["Triangulation collapsed during initial (2 points)"]


class TestOrElse:
    """Test the fallback combinator."""

    def test_success_skips_fallback(self):
        calls = []
        result = MapResult.success(empty_map(), "polygon").or_else(
            lambda error: calls.append(error) or MapResult.success(empty_map(), "hex")
        )

        assert result.generator == "polygon"
        assert calls == []

    def test_failure_runs_fallback(self):
        first = ValidationFailed(["too small"])
        seen = []

        def fallback(error):
            seen.append(error)
            return MapResult.success(empty_map(), "hex-fallback")

        result = MapResult.failure(first, "polygon").or_else(fallback)

        assert result.ok
        assert seen == [first]
        assert result.attempts == ["polygon", "hex-fallback"]


class TestUnwrap:
    """Test extraction of the map."""

    def test_returns_map(self):
        map_data = empty_map()
        assert MapResult.success(map_data, "hex").unwrap() is map_data

    def test_raises_error(self):
        with pytest.raises(ValidationFailed):
            MapResult.failure(ValidationFailed(["bad"]), "hex").unwrap()

    def test_empty_result(self):
        with pytest.raises(GenerationExhausted):
            MapResult().unwrap()
