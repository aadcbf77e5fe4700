"""Tests for grid snapping, bounds and centering."""

from __future__ import annotations

import pytest

from process_designer.layout import Bounds, center_diagram, compute_bounds, snap


class TestSnap:
    @pytest.mark.parametrize("raw, expected", [
        ((0, 0), (0, 0)),
        ((9, 11), (0, 20)),
        ((31, 49), (40, 40)),
        ((-12, 7.5), (-20, 0)),
        ((203.7, 118.2), (200, 120)),
    ])
    def test_rounds_to_nearest_grid_point(self, raw, expected):
        assert snap(*raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        ((10, 50), (20, 60)),
        ((30, 70), (40, 80)),
        ((-10, -30), (0, -20)),
    ])
    def test_halves_round_up(self, raw, expected):
        assert snap(*raw) == expected

    def test_result_is_on_grid(self):
        for x in range(-50, 50, 7):
            sx, sy = snap(x, x * 1.3)
            assert sx % 20 == 0 and sy % 20 == 0

    def test_moves_at_most_half_a_cell(self):
        for step in range(-400, 401):
            raw = step / 4
            sx, sy = snap(raw, -raw)
            assert abs(sx - raw) <= 10 and abs(sy + raw) <= 10
            assert sx % 20 == 0 and sy % 20 == 0


class TestBounds:
    def test_empty(self):
        bounds = compute_bounds([])
        assert bounds == Bounds(0, 0, 0, 0)
        assert bounds.is_empty()

    def test_mixed_node_sizes(self, graph):
        graph.add_step(template_id="tpl-a", x=50, y=10)
        graph.add_logic(x=200, y=100)
        bounds = compute_bounds(graph.nodes)
        assert bounds.as_tuple() == (50, 10, 290, 230)


class TestCenterDiagram:
    def test_empty_graph_is_untouched(self, graph, router):
        assert center_diagram(graph, router, 1000, 600) == (0, 0)

    def test_centers_on_canvas(self, graph, router):
        node = graph.add_step(template_id="tpl-a", x=0, y=0)
        dx, dy = center_diagram(graph, router, 1000, 600)
        assert (node.x, node.y) == ((1000 - 140) // 2, (600 - 70) // 2)
        assert (dx, dy) == (430, 265)

    def test_second_call_is_a_no_op(self, graph, router):
        graph.add_step(template_id="tpl-a", x=13, y=7)
        graph.add_logic(x=301, y=250)
        center_diagram(graph, router, 1000, 600)
        before = [(node.x, node.y) for node in graph.nodes]
        assert center_diagram(graph, router, 1000, 600) == (0, 0)
        assert [(node.x, node.y) for node in graph.nodes] == before

    def test_large_diagram_is_pinned_to_padding(self, graph, router):
        graph.add_step(template_id="tpl-a", x=500, y=500)
        graph.add_step(template_id="tpl-b", x=2000, y=1500)
        center_diagram(graph, router, 1000, 600, padding=24)
        bounds = compute_bounds(graph.nodes)
        assert (bounds.min_x, bounds.min_y) == (24, 24)

    def test_connections_follow_nodes(self, graph, router, surface, view):
        a = graph.add_step(template_id="tpl-a", x=0, y=0)
        b = graph.add_step(template_id="tpl-b", x=0, y=100)
        view.show_node(a)
        view.show_node(b)
        conn = router.add_connection(a, b)
        center_diagram(graph, router, 1000, 600)
        assert conn.points == (a.center_x, a.bottom, b.center_x, b.y)
        assert surface.arrows[view.connection_handle(conn)]["points"] == conn.points
        assert surface.shapes[view.node_handle(a)]["x"] == a.x
