"""Tests for the in-memory backend and the catalog summaries."""

from __future__ import annotations

import pytest

from process_designer.backend import InMemoryProcessBackend, LoggingNotificationSink, TemplateSummary


class TestTemplateSummary:
    def test_from_record_tolerates_missing_fields(self):
        summary = TemplateSummary.from_record({"id": "t1", "name": None})
        assert summary == TemplateSummary("t1", "", "")

    def test_clone_replaces_fields(self):
        original = TemplateSummary("t1", "Name", "Old")
        changed = original.clone(steps_to_complete="New")
        assert changed == TemplateSummary("t1", "Name", "New")
        assert original.steps_to_complete == "Old"


class TestInMemoryProcessBackend:
    def test_list_templates_returns_copies(self, backend):
        records = backend.list_templates()
        records[0]["name"] = "Changed"
        assert backend.list_templates()[0]["name"] == "Alpha"

    def test_unknown_template_raises(self, backend):
        with pytest.raises(KeyError):
            backend.load_template_for_editing("nope")
        with pytest.raises(KeyError):
            backend.update_steps_to_complete("nope", "text")

    def test_load_sets_template_id(self, backend):
        assert backend.load_template_for_editing("gated")["templateId"] == "gated"

    def test_saved_payload_is_folded_back(self):
        backend = InMemoryProcessBackend()
        template_id = backend.save_process_template({
            "processName": "P",
            "stepsToComplete": "S",
            "templateId": None,
            "steps": [
                {"id": "a", "type": "step", "stepNumber": 1},
                {"id": "b", "type": "step", "stepNumber": 2},
                {"id": "c", "type": "step", "stepNumber": 3,
                 "inProgressRequirement": "Custom Logic", "customLogic": "1 OR 2"},
                {"id": "logic-1", "type": "logic", "condition": "1 OR 2"},
            ],
            "connections": [
                {"fromStep": "a", "toStep": "logic-1"},
                {"fromStep": "b", "toStep": "logic-1"},
                {"fromStep": "logic-1", "toStep": "c"},
                {"fromStep": "a", "toStep": "b"},
            ],
        })

        loaded = backend.load_template_for_editing(template_id)

        assert template_id == "process-1"
        assert [step["id"] for step in loaded["steps"]] == ["a", "b", "c"]
        assert loaded["connections"] == [
            {"fromStep": "a", "toStep": "c"},
            {"fromStep": "b", "toStep": "c"},
            {"fromStep": "a", "toStep": "b"},
        ]
        assert loaded["templateId"] == "process-1"


def test_logging_notification_sink():
    messages = []
    LoggingNotificationSink(messages.append).notify("Error", "Oops", "error")
    assert messages == ["[error] Error: Oops"]
