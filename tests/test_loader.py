"""Tests for turning a template loaded for editing into a graph."""

from __future__ import annotations

import pytest

from process_designer.loader import TemplateLoader, parse_template
from process_designer.model import LoadError, LogicNode, ProcessGraph


@pytest.fixture
def loader(graph):
    return TemplateLoader(graph, log_func=lambda message: None)


class TestParseTemplate:
    def test_header_fields(self, gated_data):
        template = parse_template(dict(gated_data, templateId="tpl-x"))
        assert template.process_name == "Gated"
        assert template.steps_to_complete == "All of it."
        assert template.template_id == "tpl-x"
        assert [record.ref_id for record in template.steps] == ["s1", "s2", "s3"]
        assert template.connections == [("s1", "s3"), ("s2", "s3")]

    def test_gating_requires_requirement_and_logic(self, gated_data):
        template = parse_template(gated_data)
        assert [record.is_gated for record in template.steps] == [False, False, True]

    def test_custom_logic_without_requirement_is_not_gated(self, gated_data):
        data = gated_data
        data["steps"][2]["inProgressRequirement"] = "Previous Step Completed"
        assert not parse_template(data).steps[2].is_gated

    @pytest.mark.parametrize("data", [
        [],
        {"steps": [{"stepNumber": 1}]},
        {"steps": [{"id": "s1", "stepNumber": "one"}]},
        {"steps": [{"id": "s1"}]},
        {"steps": [{"id": "s1", "stepNumber": 1, "x": "left"}]},
        {"steps": [{"id": "s1", "stepNumber": 1}], "connections": [{"fromStep": "s1"}]},
        {"steps": [{"id": "s1", "stepNumber": 1}], "connections": [{"fromStep": ["s1"], "toStep": "s1"}]},
        {"steps": {"id": "s1", "stepNumber": 1}},
        {"connections": "s1->s2"},
    ])
    def test_malformed_data_raises(self, data):
        with pytest.raises(LoadError):
            parse_template(data)

    def test_missing_lists_are_empty(self):
        template = parse_template({"processName": "Empty"})
        assert template.steps == [] and template.connections == []


class TestPopulate:
    def test_plain_connections_are_black(self, graph, loader):
        loader.load({
            "steps": [
                {"id": "s1", "stepNumber": 1, "templateId": "tpl-a", "x": 50, "y": 10},
                {"id": "s2", "stepNumber": 2, "templateId": "tpl-b", "x": 50, "y": 110},
            ],
            "connections": [{"fromStep": "s1", "toStep": "s2"}],
        })
        assert [conn.color for conn in graph.connections] == ["black"]
        assert graph.logic_nodes == []

    def test_persisted_positions_and_labels_are_kept(self, graph, loader, gated_data):
        nodes = loader.populate(parse_template(gated_data))
        assert (nodes["s2"].x, nodes["s2"].y) == (250, 10)
        assert nodes["s2"].label == "Step 2\nBeta"

    def test_one_logic_node_per_gated_step(self, graph, loader, gated_data):
        loader.load(gated_data)

        logic_nodes = graph.logic_nodes
        assert len(logic_nodes) == 1
        logic = logic_nodes[0]
        assert logic.id == "logic-for-s3"
        assert logic.condition == "1 AND 2"
        assert logic.label == "1 AND 2"

        edges = {(conn.from_id, conn.to_id, conn.color) for conn in graph.connections}
        assert edges == {
            ("step-1__template-tpl-a", "logic-for-s3", "green"),
            ("step-2__template-tpl-b", "logic-for-s3", "green"),
            ("logic-for-s3", "step-3__template-tpl-c", "green"),
        }

    def test_logic_node_sits_below_first_predecessor(self, graph, loader, gated_data):
        nodes = loader.populate(parse_template(gated_data))
        logic = graph.logic_nodes[0]
        s1 = nodes["s1"]
        assert logic.x == int(s1.center_x) - 70
        assert logic.y == s1.bottom + 40

    def test_reflow_pushes_gated_step_and_below(self, graph, loader, gated_data):
        data = gated_data
        data["steps"].append({"id": "s4", "stepNumber": 4, "templateId": "tpl-a", "x": 250, "y": 300})
        nodes = loader.populate(parse_template(data))

        assert (nodes["s1"].y, nodes["s2"].y) == (10, 10)
        assert nodes["s3"].y == 110 + 200
        assert nodes["s4"].y == 300 + 200

        logic = graph.logic_nodes[0]
        assert logic.y == 120
        assert logic.bottom <= nodes["s3"].y

    def test_connection_points_reflect_reflow(self, graph, loader, gated_data):
        nodes = loader.populate(parse_template(gated_data))
        logic = graph.logic_nodes[0]
        into_step = graph.find_connection(logic, nodes["s3"])
        assert into_step.points == (logic.center_x, logic.bottom, nodes["s3"].center_x, nodes["s3"].y)

    def test_unknown_endpoint_is_skipped(self, graph, loader, gated_data):
        data = gated_data
        data["connections"].append({"fromStep": "s1", "toStep": "ghost"})
        loader.load(data)
        assert all("ghost" not in conn.to_id for conn in graph.connections)
        assert len(graph.connections) == 3

    def test_duplicate_connections_collapse(self, graph, loader, gated_data):
        data = gated_data
        data["connections"].append({"fromStep": "s1", "toStep": "s3"})
        loader.load(data)
        assert len(graph.connections) == 3

    def test_colliding_step_ids_raise_load_error(self, loader):
        with pytest.raises(LoadError):
            loader.load({"steps": [
                {"id": "s1", "stepNumber": 1, "templateId": "tpl-a"},
                {"id": "s2", "stepNumber": 1, "templateId": "tpl-a"},
            ]})

    def test_gated_step_without_predecessors_gets_no_logic_node(self, graph, loader, gated_data):
        data = gated_data
        data["connections"] = []
        loader.load(data)
        assert graph.logic_nodes == []
        assert not any(isinstance(node, LogicNode) for node in graph.nodes)


def test_failed_parse_leaves_graph_empty():
    graph = ProcessGraph(log_func=lambda message: None)
    with pytest.raises(LoadError):
        TemplateLoader(graph, log_func=lambda message: None).load({"steps": [{"id": "s1"}]})
    assert len(graph) == 0
