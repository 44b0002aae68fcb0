"""
Unit tests for pyramid addressing.

Tests label conversion, in-layer coordinates, bounds validation and the
support geometry between layers.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path to import game modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from margo.errors import InvalidCoordinate
from margo.margo_position import (
    Cell,
    cell_to_label,
    grid_width,
    in_bounds,
    label_to_cell,
    layer_width,
    positions_for,
    support_cells,
    validate_cell,
)


def all_cells(size):
    return [
        Cell.from_layer_coords(col, row, layer)
        for layer in range(size)
        for row in range(layer_width(size, layer))
        for col in range(layer_width(size, layer))
    ]


class TestLabels:
    """Test conversion between cells and labels."""

    def test_base_corner_label(self):
        assert cell_to_label(Cell(0, 0, 0), 7) == "1a13"

    def test_opposite_corner_label(self):
        assert cell_to_label(Cell(12, 12, 0), 7) == "1m1"

    def test_apex_label(self):
        assert cell_to_label(Cell(6, 6, 6), 7) == "7g7"

    def test_label_to_cell_is_case_insensitive(self):
        assert label_to_cell("1A13", 7) == Cell(0, 0, 0)
        assert label_to_cell(" 2b12 ", 7) == Cell(1, 1, 1)

    @pytest.mark.parametrize("size", [4, 6, 7, 9])
    def test_every_cell_roundtrips(self, size):
        for cell in all_cells(size):
            assert label_to_cell(cell_to_label(cell, size), size) == cell

    @pytest.mark.parametrize("label", ["", "zz", "1a", "a13", "0a13", "1a99"])
    def test_unparsable_or_off_board_labels(self, label):
        with pytest.raises(InvalidCoordinate):
            label_to_cell(label, 7)

    def test_label_on_wrong_parity_for_layer(self):
        # x = 0 only exists on the base layer
        with pytest.raises(InvalidCoordinate):
            label_to_cell("2a13", 7)


class TestLayerCoordinates:
    """Test in-layer (col, row) coordinates."""

    def test_physical_offsets(self):
        assert Cell.from_layer_coords(0, 0, 0) == Cell(0, 0, 0)
        assert Cell.from_layer_coords(0, 0, 1) == Cell(1, 1, 1)
        assert Cell.from_layer_coords(2, 1, 1) == Cell(5, 3, 1)

    def test_layer_widths_shrink(self):
        assert [layer_width(7, layer) for layer in range(7)] == [7, 6, 5, 4, 3, 2, 1]
        assert grid_width(7) == 13


class TestBounds:
    """Test cell existence rules."""

    def test_parity_must_match_layer(self):
        assert in_bounds(4, 4, 0, 7)
        assert not in_bounds(5, 4, 0, 7)
        assert in_bounds(5, 5, 1, 7)
        assert not in_bounds(4, 4, 1, 7)

    def test_upper_layers_shrink_inward(self):
        assert not in_bounds(0, 0, 2, 7)
        assert in_bounds(2, 2, 2, 7)
        assert in_bounds(10, 10, 2, 7)
        assert not in_bounds(12, 12, 2, 7)

    def test_validate_cell_rejects_bad_cells(self):
        with pytest.raises(InvalidCoordinate):
            validate_cell((1, 0, 0), 7)
        with pytest.raises(InvalidCoordinate):
            validate_cell((0, 0, -1), 7)
        assert validate_cell((3, 3, 3), 7) == Cell(3, 3, 3)

    def test_invalid_coordinate_is_value_error(self):
        with pytest.raises(ValueError):
            validate_cell((13, 0, 0), 7)


class TestSupportGeometry:
    """Test the relation between a cell and the layers around it."""

    def test_support_cells(self):
        assert set(support_cells(Cell(5, 5, 1))) == {
            Cell(4, 4, 0), Cell(4, 6, 0), Cell(6, 4, 0), Cell(6, 6, 0)
        }

    def test_base_has_no_support(self):
        assert support_cells(Cell(4, 4, 0)) == []


class TestPositionCollection:
    """Test the per-size label cache."""

    @pytest.mark.parametrize("size", [4, 6, 7, 9])
    def test_every_cell_has_a_label(self, size):
        positions = positions_for(size)
        cells = all_cells(size)
        assert len(cells) == sum((size - layer) ** 2 for layer in range(size))
        for cell in cells:
            label = positions.label_for(cell)
            assert positions.get_by_label(label) == cell

    def test_lookup_by_label(self):
        positions = positions_for(7)
        assert positions.get_by_label("7G7") == Cell(6, 6, 6)
        assert positions.get_by_label("8a1") is None
        assert positions.label_for(Cell(1, 1, 1)) == "2b12"
        assert positions.label_for(Cell(1, 0, 0)) == ""

    def test_collection_is_shared_per_size(self):
        assert positions_for(7) is positions_for(7)
