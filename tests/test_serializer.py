"""Tests for save validation and the payload built from the graph."""

from __future__ import annotations

import json

import pytest

from process_designer.loader import TemplateLoader
from process_designer.model import Connection, ValidationError
from process_designer.serializer import ProcessSerializer


@pytest.fixture
def connected_pair(graph):
    a = graph.add_step(template_id="tpl-a")
    b = graph.add_step(template_id="tpl-b")
    graph.add_connection(Connection(a, b))
    return a, b


class TestValidate:
    def test_name_is_checked_first(self, graph):
        graph.add_step(template_id="tpl-a")
        with pytest.raises(ValidationError) as info:
            ProcessSerializer(graph).validate("", "")
        assert info.value.reason == ValidationError.MISSING_NAME

    def test_steps_to_complete_is_checked_second(self, graph):
        graph.add_step(template_id="tpl-a")
        with pytest.raises(ValidationError) as info:
            ProcessSerializer(graph).validate("Name", "")
        assert info.value.reason == ValidationError.MISSING_STEPS

    def test_disconnected_nodes_are_reported(self, graph, connected_pair):
        loner = graph.add_logic()
        with pytest.raises(ValidationError) as info:
            ProcessSerializer(graph).validate("Name", "Steps")
        assert info.value.reason == ValidationError.DISCONNECTED
        assert info.value.node_ids == [loner.id]

    def test_connected_graph_passes(self, graph, connected_pair):
        ProcessSerializer(graph).validate("Name", "Steps")

    def test_empty_graph_passes(self, graph):
        ProcessSerializer(graph).validate("Name", "Steps")


class TestBuildPayload:
    def test_header(self, graph, connected_pair):
        payload = ProcessSerializer(graph).build_payload("Name", "Steps", "tpl-x")
        assert payload["processName"] == "Name"
        assert payload["stepsToComplete"] == "Steps"
        assert payload["templateId"] == "tpl-x"

    def test_ungated_step_entry(self, graph, connected_pair):
        payload = ProcessSerializer(graph).build_payload("Name", "Steps")
        assert payload["steps"][0] == {
            "id": "step-1__template-tpl-a",
            "x": 50,
            "y": 10,
            "label": "Step 1\nAlpha",
            "type": "step",
            "stepNumber": 1,
            "templateId": "tpl-a",
            "inProgressRequirement": "Previous Step Completed",
            "customLogic": None,
        }

    def test_connection_entries(self, graph, connected_pair):
        payload = ProcessSerializer(graph).build_payload("Name", "Steps")
        assert payload["connections"] == [{
            "fromStep": "step-1__template-tpl-a",
            "toStep": "step-2__template-tpl-b",
            "toTemplateId": "tpl-b",
        }]

    def test_gated_step_carries_condition(self, graph):
        a = graph.add_step(template_id="tpl-a")
        b = graph.add_step(template_id="tpl-b")
        logic = graph.add_logic(condition="1")
        graph.add_connection(Connection(a, logic, "green"))
        graph.add_connection(Connection(logic, b, "green"))

        payload = ProcessSerializer(graph).build_payload("Name", "Steps")
        entries = {entry["id"]: entry for entry in payload["steps"]}

        gated = entries["step-2__template-tpl-b"]
        assert gated["inProgressRequirement"] == "Custom Logic"
        assert gated["customLogic"] == "1"
        assert entries["logic-1"] == {"id": "logic-1", "x": 200, "y": 100, "label": "1",
                                      "type": "logic", "condition": "1"}
        into_logic = [conn for conn in payload["connections"] if conn["toStep"] == "logic-1"]
        assert into_logic[0]["toTemplateId"] is None

    def test_empty_condition_is_sent_as_none(self, graph):
        a = graph.add_step(template_id="tpl-a")
        b = graph.add_step(template_id="tpl-b")
        logic = graph.add_logic()
        graph.add_connection(Connection(a, logic))
        graph.add_connection(Connection(logic, b))
        payload = ProcessSerializer(graph).build_payload("Name", "Steps")
        gated = [entry for entry in payload["steps"] if entry["id"] == b.id][0]
        assert gated["inProgressRequirement"] == "Custom Logic"
        assert gated["customLogic"] is None

    def test_validation_error_blocks_payload(self, graph):
        graph.add_step(template_id="tpl-a")
        with pytest.raises(ValidationError):
            ProcessSerializer(graph).build_payload("Name", "Steps")

    def test_to_json(self, graph, connected_pair):
        payload = ProcessSerializer(graph).build_payload("Name", "Steps")
        assert json.loads(ProcessSerializer.to_json(payload)) == payload


def test_loaded_template_round_trips(graph, gated_data):
    TemplateLoader(graph, log_func=lambda message: None).load(gated_data)
    payload = ProcessSerializer(graph).build_payload("Gated", "All of it.")

    entries = {entry["id"]: entry for entry in payload["steps"]}
    assert entries["logic-for-s3"]["condition"] == "1 AND 2"
    gated = entries["step-3__template-tpl-c"]
    assert gated["inProgressRequirement"] == "Custom Logic"
    assert gated["customLogic"] == "1 AND 2"
    assert gated["y"] == 310
    assert {(conn["fromStep"], conn["toStep"]) for conn in payload["connections"]} == {
        ("step-1__template-tpl-a", "logic-for-s3"),
        ("step-2__template-tpl-b", "logic-for-s3"),
        ("logic-for-s3", "step-3__template-tpl-c"),
    }
