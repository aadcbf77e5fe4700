"""Tests for selection, click-to-connect, delete and drag."""

from __future__ import annotations

import pytest

from process_designer.controller import InteractionController, SelectionState
from process_designer.view import ArrowStyle


@pytest.fixture
def controller(graph, router, view):
    return InteractionController(graph, router, view, log_func=lambda message: None)


@pytest.fixture
def three_steps(graph, view):
    nodes = [graph.add_step(template_id=template_id) for template_id in ("tpl-a", "tpl-b", "tpl-c")]
    for node in nodes:
        view.show_node(node)
    return nodes


class TestClickNode:
    def test_first_click_selects_and_highlights(self, controller, three_steps, surface, view):
        a = three_steps[0]
        assert controller.click_node(a) is None
        assert controller.state == SelectionState.ONE_SELECTED
        assert controller.selected_node is a
        assert surface.shapes[view.node_handle(a)]["highlight"] is True

    def test_same_node_twice_deselects(self, controller, three_steps, surface, view):
        a = three_steps[0]
        controller.click_node(a)
        controller.click_node(a)
        assert controller.state == SelectionState.IDLE
        assert surface.shapes[view.node_handle(a)]["highlight"] is False

    def test_second_node_creates_connection(self, controller, three_steps, graph, surface, view):
        a, b, _ = three_steps
        controller.click_node(a)
        created = controller.click_node(b)

        assert created is not None
        assert (created.from_node, created.to_node) == (a, b)
        assert created.color == "black"
        assert controller.state == SelectionState.IDLE
        assert surface.shapes[view.node_handle(a)]["highlight"] is False
        assert view.connection_handle(created) in surface.arrows

    def test_existing_connection_is_not_duplicated(self, controller, three_steps, graph):
        a, b, _ = three_steps
        controller.click_node(a)
        controller.click_node(b)
        controller.click_node(a)
        assert controller.click_node(b) is None
        assert len(graph.connections) == 1
        assert controller.state == SelectionState.IDLE

    def test_reverse_connection_is_allowed(self, controller, three_steps, graph):
        a, b, _ = three_steps
        controller.click_node(a)
        controller.click_node(b)
        controller.click_node(b)
        controller.click_node(a)
        assert {(conn.from_node, conn.to_node) for conn in graph.connections} == {(a, b), (b, a)}

    def test_node_click_clears_connection_selection(self, controller, three_steps, router, surface, view):
        a, b, c = three_steps
        conn = router.add_connection(a, b)
        controller.click_connection(conn)
        controller.click_node(c)
        assert controller.selected_connection is None
        assert surface.arrows[view.connection_handle(conn)]["style"] == ArrowStyle.normal("black")


class TestClickConnection:
    def test_toggle_restores_own_color(self, controller, three_steps, router, surface, view):
        a, b, _ = three_steps
        conn = router.add_connection(a, b, "green")
        handle = view.connection_handle(conn)

        controller.click_connection(conn)
        assert surface.arrows[handle]["style"] == ArrowStyle.selected()

        controller.click_connection(conn)
        assert controller.selected_connection is None
        assert surface.arrows[handle]["style"] == ArrowStyle.normal("green")

    def test_selecting_another_restores_previous(self, controller, three_steps, router, surface, view):
        a, b, c = three_steps
        first = router.add_connection(a, b)
        second = router.add_connection(b, c)
        controller.click_connection(first)
        controller.click_connection(second)
        assert controller.selected_connection is second
        assert surface.arrows[view.connection_handle(first)]["style"] == ArrowStyle.normal("black")

    def test_clears_node_selection(self, controller, three_steps, router):
        a, b, c = three_steps
        conn = router.add_connection(a, b)
        controller.click_node(c)
        controller.click_connection(conn)
        assert controller.selected_node is None
        assert controller.state == SelectionState.IDLE


class TestDeleteSelected:
    def test_nothing_selected(self, controller, three_steps, graph):
        assert controller.delete_selected() is False
        assert len(graph) == 3

    def test_deletes_only_the_connection(self, controller, three_steps, graph, router, surface, view):
        a, b, _ = three_steps
        conn = router.add_connection(a, b)
        handle = view.connection_handle(conn)
        controller.click_connection(conn)

        assert controller.delete_selected() is True
        assert graph.connections == []
        assert len(graph) == 3
        assert handle not in surface.arrows

    def test_deletes_node_with_edges_and_renumbers(self, controller, three_steps, graph, router, surface, view):
        a, b, c = three_steps
        router.add_connection(a, b)
        kept = router.add_connection(b, c)
        controller.click_node(a)

        assert controller.delete_selected() is True
        assert [conn for conn in graph.connections] == [kept]
        assert [step.step_number for step in graph.steps] == [1, 2]
        assert surface.shapes[view.node_handle(b)]["label"] == "Step 1\nBeta"
        assert len(surface.shapes) == 2
        assert len(surface.arrows) == 1
        assert controller.state == SelectionState.IDLE


class TestDragMove:
    def test_snaps_and_reroutes(self, controller, three_steps, router, surface, view):
        a, b, _ = three_steps
        conn = router.add_connection(a, b)

        assert controller.drag_move(a, 93, 418) == (100, 420)
        assert (a.x, a.y) == (100, 420)
        assert surface.shapes[view.node_handle(a)]["x"] == 100
        assert conn.points == (170, 420, b.center_x, b.bottom)
        assert surface.arrows[view.connection_handle(conn)]["points"] == conn.points
        assert surface.batch_draw_count == 1
