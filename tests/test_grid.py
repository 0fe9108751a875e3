"""
Tests for the Grid Package
==========================

Tests the grid builder, the GridMover cost/heuristic/passability rules and
end-to-end searches on small grids, checked against networkx brute force.
"""

import doctest
import json
import logging

import networkx as nx
import pytest
from pydantic import ValidationError

from wayfinder.core import engine as engine_module
from wayfinder.core import graph as graph_module
from wayfinder.core.engine import Pathfinder, SearchStatus
from wayfinder.core.graph import NodeGraph
from wayfinder.core.schema import MoveCosts
from wayfinder.grid.builder import (
    NodeType,
    build_grid_graph,
    get_node_type,
    grid_from_strings,
    set_node_type,
)
from wayfinder.grid import builder as builder_module
from wayfinder.grid import mover as mover_module
from wayfinder.grid.mover import GridMover


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def open_grid():
    """3x3 grid, every cell open, diagonal adjacency."""
    return build_grid_graph(3, 3)


@pytest.fixture
def blocked_center_grid():
    """3x3 grid with the center cell closed."""
    return build_grid_graph(3, 3, closed=[(1, 1)])


@pytest.fixture
def maze_grid():
    """
    5x5 grid with a few closed cells:

        . . . . .
        . # # . .
        . . . # .
        # # . # .
        . . . . .
    """
    return grid_from_strings([
        ".....",
        ".##..",
        "...#.",
        "##.#.",
        ".....",
    ])


@pytest.fixture
def sparse_grid():
    """Diagonal pair (0,0)-(1,1) whose corner cell (1,0) doesn't exist."""
    graph = NodeGraph()
    for node in ((0, 0), (0, 1), (1, 1)):
        graph.add_node(node, x=node[0], y=node[1], type=NodeType.OPEN)
    graph.connect((0, 0), (0, 1))
    graph.connect((0, 1), (1, 1))
    graph.connect((0, 0), (1, 1))
    return graph


def passable_digraph(graph, mover) -> nx.DiGraph:
    """Brute-force reference: every passable edge weighted by its move cost."""
    G = nx.DiGraph()
    for node in graph:
        G.add_node(node)
        for adjacent in graph.adjacent(node):
            if mover.passable(node, adjacent):
                G.add_edge(node, adjacent, weight=mover.cost_for_move(node, adjacent))
    return G


def open_cells(graph):
    return [n for n in graph if get_node_type(graph, n) == NodeType.OPEN]


# =============================================================================
# Builder Tests
# =============================================================================

class TestGridBuilder:
    """Tests for grid graph construction."""

    def test_node_count_and_attributes(self, open_grid):
        assert len(open_grid) == 9
        assert open_grid.get_attribute((2, 1), "x") == 2
        assert open_grid.get_attribute((2, 1), "y") == 1
        assert get_node_type(open_grid, (2, 1)) == NodeType.OPEN

    def test_corner_has_three_neighbors(self, open_grid):
        assert open_grid.adjacent((0, 0)) == [(1, 0), (0, 1), (1, 1)]

    def test_center_neighbors_row_major(self, open_grid):
        assert open_grid.adjacent((1, 1)) == [
            (0, 0), (1, 0), (2, 0),
            (0, 1), (2, 1),
            (0, 2), (1, 2), (2, 2),
        ]

    def test_orthogonal_only(self):
        graph = build_grid_graph(3, 3, diagonal=False)
        assert graph.adjacent((1, 1)) == [(1, 0), (0, 1), (2, 1), (1, 2)]

    def test_closed_cells(self, blocked_center_grid):
        assert get_node_type(blocked_center_grid, (1, 1)) == NodeType.CLOSED
        # Closed cells keep their adjacency
        assert len(blocked_center_grid.adjacent((1, 1))) == 8

    @pytest.mark.parametrize("width, height", [(0, 3), (3, 0), (-1, 2)])
    def test_rejects_bad_dimensions(self, width, height):
        with pytest.raises(ValueError):
            build_grid_graph(width, height)

    def test_rejects_closed_cell_off_grid(self):
        with pytest.raises(ValueError):
            build_grid_graph(2, 2, closed=[(5, 5)])

    def test_from_strings(self, maze_grid):
        assert len(maze_grid) == 25
        assert get_node_type(maze_grid, (1, 1)) == NodeType.CLOSED
        assert get_node_type(maze_grid, (0, 3)) == NodeType.CLOSED
        assert get_node_type(maze_grid, (4, 4)) == NodeType.OPEN

    def test_from_strings_rejects_ragged_rows(self):
        with pytest.raises(ValueError):
            grid_from_strings(["...", ".."])

    def test_from_strings_rejects_unknown_character(self):
        with pytest.raises(ValueError):
            grid_from_strings([".x."])

    def test_set_node_type(self, open_grid):
        set_node_type(open_grid, (1, 1), NodeType.CLOSED)
        assert get_node_type(open_grid, (1, 1)) == NodeType.CLOSED
        set_node_type(open_grid, (1, 1), "open")
        assert get_node_type(open_grid, (1, 1)) == NodeType.OPEN

    def test_unknown_node_reads_closed(self, open_grid):
        assert get_node_type(open_grid, (9, 9)) == NodeType.CLOSED


# =============================================================================
# Configuration Tests
# =============================================================================

class TestMoveCosts:
    """Tests for the MoveCosts schema."""

    def test_defaults(self):
        costs = MoveCosts()
        assert costs.orthogonal == 1.0
        assert costs.diagonal == 1.4
        assert costs.tie_break_scale == 0.001
        assert costs.allow_diagonal is True

    def test_rejects_negative_cost(self):
        with pytest.raises(ValidationError):
            MoveCosts(orthogonal=-1.0)

    def test_rejects_diagonal_cheaper_than_orthogonal(self):
        with pytest.raises(ValidationError):
            MoveCosts(orthogonal=2.0, diagonal=1.0)

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            MoveCosts(teleport=0.0)

    def test_step_cost(self):
        costs = MoveCosts(orthogonal=2.0, diagonal=3.0)
        assert costs.step_cost(diagonal=False) == 2.0
        assert costs.step_cost(diagonal=True) == 3.0

    def test_mover_from_json_file(self, open_grid, tmp_path):
        config_path = tmp_path / "costs.json"
        config_path.write_text(json.dumps({"orthogonal": 2.0, "diagonal": 3.0}))

        mover = GridMover.from_json_file(open_grid, config_path)

        assert mover.costs.orthogonal == 2.0
        assert mover.cost_for_move((0, 0), (1, 1)) == 3.0

    def test_mover_from_bad_config(self, open_grid):
        with pytest.raises(ValidationError):
            GridMover.from_config(open_grid, {"diagonal": -5})


# =============================================================================
# GridMover Tests
# =============================================================================

class TestGridMover:
    """Tests for GridMover rules."""

    def test_step_costs(self, open_grid):
        mover = GridMover(open_grid)
        assert mover.cost_for_move((0, 0), (1, 0)) == 1.0
        assert mover.cost_for_move((0, 0), (0, 1)) == 1.0
        assert mover.cost_for_move((0, 0), (1, 1)) == 1.4

    def test_leaving_closed_cell_has_normal_cost(self, open_grid):
        set_node_type(open_grid, (0, 0), NodeType.CLOSED)
        mover = GridMover(open_grid)
        assert mover.cost_for_move((0, 0), (1, 0)) == 1.0

    def test_entering_closed_cell_logs_and_costs_zero(self, blocked_center_grid, caplog):
        mover = GridMover(blocked_center_grid)
        with caplog.at_level(logging.ERROR, logger="wayfinder.grid.mover"):
            cost = mover.cost_for_move((1, 0), (1, 1))
        assert cost == 0.0
        assert "Unhandled node type combination" in caplog.text

    def test_heuristic_octile(self, open_grid):
        mover = GridMover(open_grid, MoveCosts(tie_break_scale=0.0))
        assert mover.heuristic((0, 0), (2, 2), (0, 0)) == pytest.approx(2.8)
        assert mover.heuristic((0, 0), (2, 1), (0, 0)) == pytest.approx(2.4)
        assert mover.heuristic((2, 2), (2, 2), (0, 0)) == 0.0

    def test_heuristic_caps_expensive_diagonals(self, open_grid):
        mover = GridMover(open_grid, MoveCosts(diagonal=3.0, tie_break_scale=0.0))
        # Two orthogonal steps beat one diagonal, so the estimate is Manhattan
        assert mover.heuristic((0, 0), (2, 2), (0, 0)) == pytest.approx(4.0)
        assert mover.heuristic((0, 0), (2, 1), (0, 0)) == pytest.approx(3.0)

    def test_heuristic_manhattan_without_diagonals(self, open_grid):
        costs = MoveCosts(tie_break_scale=0.0, allow_diagonal=False)
        mover = GridMover(open_grid, costs)
        assert mover.heuristic((0, 0), (2, 2), (0, 0)) == pytest.approx(4.0)

    def test_heuristic_tie_break_term(self, open_grid):
        mover = GridMover(open_grid)
        on_line = mover.heuristic((1, 1), (2, 2), (0, 0))
        off_line = mover.heuristic((1, 0), (2, 2), (0, 0))
        # (1,0)->(2,2) = (-1,-2), (0,0)->(2,2) = (-2,-2): |(-1)(-2) - (-2)(-2)| = 2
        assert on_line == pytest.approx(1.4)
        assert off_line == pytest.approx(2.4 + 2 * 0.001)

    def test_closed_destination_impassable(self, blocked_center_grid):
        mover = GridMover(blocked_center_grid)
        assert mover.passable((1, 0), (1, 1)) is False
        assert mover.passable((1, 1), (1, 0)) is True

    def test_diagonal_allowed_when_corners_open(self, open_grid):
        assert GridMover(open_grid).passable((0, 0), (1, 1)) is True

    def test_diagonal_blocked_when_cutting_corner(self, blocked_center_grid):
        mover = GridMover(blocked_center_grid)
        assert mover.passable((1, 0), (2, 1)) is False
        assert mover.passable((0, 1), (1, 2)) is False
        assert mover.passable((1, 0), (0, 1)) is False

    def test_diagonal_blocked_when_corner_missing(self, sparse_grid):
        assert GridMover(sparse_grid).passable((0, 0), (1, 1)) is False

    def test_diagonals_disabled(self, open_grid):
        mover = GridMover(open_grid, MoveCosts(allow_diagonal=False))
        assert mover.passable((0, 0), (1, 1)) is False
        assert mover.passable((0, 0), (1, 0)) is True

    def test_reads_current_occupancy(self, open_grid):
        mover = GridMover(open_grid)
        assert mover.passable((0, 0), (1, 0)) is True
        set_node_type(open_grid, (1, 0), NodeType.CLOSED)
        assert mover.passable((0, 0), (1, 0)) is False


# =============================================================================
# Concrete Scenarios
# =============================================================================

class TestGridScenarios:
    """End-to-end searches on the 3x3 grid."""

    def test_diagonal_path_across_open_grid(self, open_grid):
        mover = GridMover(open_grid)
        finder = Pathfinder(open_grid)

        result = finder.find_path(mover, (0, 0), (2, 2))

        assert result.path == [(0, 0), (1, 1), (2, 2)]
        assert result.cost == pytest.approx(2.8)
        assert finder.cost_of_path(mover, result.path) == pytest.approx(2.8)

    def test_routes_around_closed_center_without_cutting_corners(self, blocked_center_grid):
        mover = GridMover(blocked_center_grid)
        finder = Pathfinder(blocked_center_grid)

        result = finder.find_path(mover, (0, 0), (2, 2))

        assert result.found
        assert (1, 1) not in result.path
        assert len(result.path) == 5
        assert result.cost == pytest.approx(4.0)
        for node, nxt in zip(result.path, result.path[1:]):
            assert not GridMover.is_diagonal(node, nxt)

    def test_reachable_within_one_step(self, open_grid):
        mover = GridMover(open_grid)
        reachable = Pathfinder(open_grid).find_all_reachable(mover, (0, 0), 1.0)
        assert reachable == {(0, 0), (1, 0), (0, 1)}

    def test_reachable_includes_diagonal_at_exact_budget(self, open_grid):
        mover = GridMover(open_grid)
        reachable = Pathfinder(open_grid).find_all_reachable(mover, (0, 0), 1.4)
        assert reachable == {(0, 0), (1, 0), (0, 1), (1, 1)}

    def test_orthogonal_only_movement(self, open_grid):
        mover = GridMover(open_grid, MoveCosts(allow_diagonal=False))
        result = Pathfinder(open_grid).find_path(mover, (0, 0), (2, 2))
        assert len(result.path) == 5
        assert result.cost == pytest.approx(4.0)

    def test_walled_off_target_is_no_path(self):
        graph = grid_from_strings([
            "..#..",
            "..#..",
            "..#..",
        ])
        result = Pathfinder(graph).find_path(GridMover(graph), (0, 0), (4, 2))
        assert result.status == SearchStatus.NO_PATH

    def test_occupancy_change_observed_by_next_search(self):
        graph = grid_from_strings([
            "...",
            "...",
        ])
        finder = Pathfinder(graph)
        mover = GridMover(graph)
        assert finder.find_path(mover, (0, 0), (2, 0)).cost == pytest.approx(2.0)

        set_node_type(graph, (1, 0), NodeType.CLOSED)
        detour = finder.find_path(mover, (0, 0), (2, 0))
        assert (1, 0) not in detour.path
        assert detour.cost == pytest.approx(4.0)

        set_node_type(graph, (1, 1), NodeType.CLOSED)
        assert finder.find_path(mover, (0, 0), (2, 0)).status == SearchStatus.NO_PATH

    def test_start_on_closed_cell_can_leave(self, open_grid):
        set_node_type(open_grid, (0, 0), NodeType.CLOSED)
        result = Pathfinder(open_grid).find_path(GridMover(open_grid), (0, 0), (2, 0))
        assert result.path == [(0, 0), (1, 0), (2, 0)]


# =============================================================================
# Properties Against Brute Force
# =============================================================================

class TestGridProperties:
    """Path and reachability properties on the 5x5 maze."""

    def test_paths_are_optimal(self, maze_grid):
        mover = GridMover(maze_grid)
        finder = Pathfinder(maze_grid)
        reference = passable_digraph(maze_grid, mover)
        cells = open_cells(maze_grid)

        for start in cells:
            for target in cells:
                result = finder.find_path(mover, start, target)
                if nx.has_path(reference, start, target):
                    expected = nx.dijkstra_path_length(reference, start, target)
                    assert result.found
                    assert result.cost == pytest.approx(expected)
                    if len(result.path) > 1:
                        assert finder.cost_of_path(mover, result.path) == pytest.approx(expected)
                else:
                    assert result.status == SearchStatus.NO_PATH

    @pytest.mark.parametrize(
        "costs",
        [
            MoveCosts(diagonal=3.0),
            MoveCosts(orthogonal=1.0, diagonal=2.5, allow_diagonal=False),
        ],
    )
    def test_paths_optimal_with_expensive_diagonals(self, maze_grid, costs):
        mover = GridMover(maze_grid, costs)
        finder = Pathfinder(maze_grid)
        reference = passable_digraph(maze_grid, mover)

        for target in open_cells(maze_grid):
            if not nx.has_path(reference, (0, 0), target):
                continue
            expected = nx.dijkstra_path_length(reference, (0, 0), target)
            assert finder.find_path(mover, (0, 0), target).cost == pytest.approx(expected)

    def test_paths_are_connected_and_passable(self, maze_grid):
        mover = GridMover(maze_grid)
        finder = Pathfinder(maze_grid)

        result = finder.find_path(mover, (0, 0), (0, 4))

        assert result.path[0] == (0, 0)
        assert result.path[-1] == (0, 4)
        for node, nxt in zip(result.path, result.path[1:]):
            assert nxt in maze_grid.adjacent(node)
            assert mover.passable(node, nxt)

    def test_identity_path_everywhere(self, maze_grid):
        finder = Pathfinder(maze_grid)
        mover = GridMover(maze_grid)
        for cell in open_cells(maze_grid):
            assert finder.find_path(mover, cell, cell).path == [cell]

    def test_reachability_matches_brute_force(self, maze_grid):
        mover = GridMover(maze_grid)
        finder = Pathfinder(maze_grid)
        reference = passable_digraph(maze_grid, mover)

        for budget in (0.5, 2.5, 3.3, 4.1, 6.7, 100.0):
            expected = set(
                nx.single_source_dijkstra_path_length(reference, (0, 0), cutoff=budget)
            )
            assert finder.find_all_reachable(mover, (0, 0), budget) == expected

    def test_reachability_is_monotonic(self, maze_grid):
        mover = GridMover(maze_grid)
        finder = Pathfinder(maze_grid)
        budgets = (0.0, 1.0, 1.5, 2.5, 3.9, 5.1, 8.0)

        previous = set()
        for budget in budgets:
            current = finder.find_all_reachable(mover, (4, 4), budget)
            assert previous <= current
            assert (4, 4) in current
            previous = current

    def test_reachable_nodes_have_path_within_budget(self, maze_grid):
        mover = GridMover(maze_grid)
        finder = Pathfinder(maze_grid)

        for node in finder.find_all_reachable(mover, (0, 0), 3.9):
            result = finder.find_path(mover, (0, 0), node)
            assert result.found
            assert result.cost <= 3.9


# =============================================================================
# Docstring Examples
# =============================================================================

class TestDocstringExamples:
    """The usage examples in module docstrings run as written."""

    @pytest.mark.parametrize(
        "module", [engine_module, graph_module, builder_module, mover_module]
    )
    def test_examples_run(self, module):
        results = doctest.testmod(module)
        assert results.attempted > 0
        assert results.failed == 0
