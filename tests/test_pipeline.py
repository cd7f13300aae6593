"""Tests for the irregular polygon map pipeline."""

import pytest

from py_polymap.core.context import PipelineConfig
from py_polymap.core.pipeline import default_erosion_rounds, generate_polygon_map, point_budget
from py_polymap.core.validator import validate_map
from py_polymap.models import Resource


@pytest.fixture(scope="module")
def delaunay_map():
    return generate_polygon_map("delaunay", 30, seed=1)


class TestHelpers:
    """Test sizing helpers."""

    @pytest.mark.parametrize("target,rounds", [(1, 1), (19, 1), (30, 1), (50, 2), (100, 4)])
    def test_default_erosion_rounds(self, target, rounds):
        assert default_erosion_rounds(target) == rounds

    def test_point_budget(self):
        config = PipelineConfig()
        assert point_budget(10, config) == 150
        assert point_budget(30, config) == 240


class TestStandardLayout:
    """Test ring growth on an unjittered lattice."""

    def test_nineteen_tiles(self):
        map_data = generate_polygon_map("standard", 19, seed="lattice", irregularity=0)

        assert len(map_data.tiles) == 19
        result = validate_map(map_data)
        assert result.valid, result.errors
        assert map_data.metadata["layout"] == "standard"
        assert map_data.metadata["regularization_iterations"] == 0


class TestDelaunayLayout:
    """Test the regularized Poisson layout."""

    def test_node_degree(self, delaunay_map):
        assert map_data_nonempty(delaunay_map)
        assert all(1 <= len(node.tiles) <= 3 for node in delaunay_map.nodes)

    def test_single_desert(self, delaunay_map):
        deserts = [t for t in delaunay_map.tiles if t.resource == Resource.DESERT]
        assert len(deserts) == 1
        assert deserts[0].dice_number is None

    def test_metadata(self, delaunay_map):
        meta = delaunay_map.metadata
        assert meta["generator"] == "polygon"
        assert meta["layout"] == "delaunay"
        assert meta["seed"] == 1
        assert meta["target_tile_count"] == 30
        assert meta["land_tiles"] == len(delaunay_map.tiles)

    def test_deterministic(self, delaunay_map):
        again = generate_polygon_map("delaunay", 30, seed=1)

        assert [t.nodes for t in again.tiles] == [t.nodes for t in delaunay_map.tiles]
        assert [n.location for n in again.nodes] == [n.location for n in delaunay_map.nodes]
        assert [(t.resource, t.dice_number) for t in again.tiles] == \
            [(t.resource, t.dice_number) for t in delaunay_map.tiles]

    def test_irregularity_applies_to_hex_layouts_only(self, delaunay_map):
        """Poisson sampling ignores lattice jitter; hex sampling uses it."""
        jittered = generate_polygon_map("delaunay", 30, seed=1, irregularity=0.9)
        assert [n.location for n in jittered.nodes] == [n.location for n in delaunay_map.nodes]

        flat = generate_polygon_map("expanded-hex", 20, seed="jitter", irregularity=0)
        rough = generate_polygon_map("expanded-hex", 20, seed="jitter", irregularity=0.9)
        assert [n.location for n in flat.nodes] != [n.location for n in rough.nodes]

    def test_bounding_radius(self):
        map_data = generate_polygon_map("delaunay", 20, seed="square", bounding_radius=300)
        for node in map_data.nodes:
            assert -1 <= node.location[0] <= 601
            assert -1 <= node.location[1] <= 601


class TestArguments:
    """Test argument checking."""

    def test_unknown_layout(self):
        with pytest.raises(ValueError, match="Unknown layout"):
            generate_polygon_map("triangles", 30)

    @pytest.mark.parametrize("target", [0, -5])
    def test_non_positive_target(self, target):
        with pytest.raises(ValueError):
            generate_polygon_map("delaunay", target)


def map_data_nonempty(map_data):
    return bool(map_data.tiles) and bool(map_data.nodes) and bool(map_data.edges)
