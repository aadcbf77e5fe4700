"""Shared test fixtures for the process designer."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from process_designer.backend import InMemoryProcessBackend
from process_designer.editor import ProcessEditor
from process_designer.model import ProcessGraph
from process_designer.routing import ConnectionRouter
from process_designer.view import DiagramView, RenderingSurface


class RecordingSurface(RenderingSurface):
    """A surface that keeps its shapes in dictionaries so tests can inspect them."""

    def __init__(self, width=1000, height=600):
        self.width = width
        self.height = height
        self.shapes = {}
        self.arrows = {}
        self.draw_count = 0
        self.batch_draw_count = 0
        self.clear_count = 0

    def clear(self):
        self.shapes.clear()
        self.arrows.clear()
        self.clear_count += 1

    def create_node_shape(self, uid, kind, x, y, width, height, label):
        handle = ("node", uid)
        self.shapes[handle] = {"kind": kind, "x": x, "y": y, "width": width, "height": height,
                               "label": label, "highlight": False}
        return handle

    def move_shape(self, handle, x, y):
        self.shapes[handle]["x"] = x
        self.shapes[handle]["y"] = y

    def set_shape_label(self, handle, label):
        self.shapes[handle]["label"] = label

    def set_shape_highlight(self, handle, active):
        self.shapes[handle]["highlight"] = active

    def create_arrow(self, key, points, style):
        handle = ("arrow", key)
        self.arrows[handle] = {"points": points, "style": style}
        return handle

    def set_arrow_points(self, handle, points):
        self.arrows[handle]["points"] = points

    def set_arrow_style(self, handle, style):
        self.arrows[handle]["style"] = style

    def destroy(self, handle):
        self.shapes.pop(handle, None)
        self.arrows.pop(handle, None)

    def draw(self):
        self.draw_count += 1

    def batch_draw(self):
        self.batch_draw_count += 1

    def size(self):
        return self.width, self.height


TEMPLATES = [
    {"id": "tpl-a", "name": "Alpha", "stepsToComplete": "Do alpha."},
    {"id": "tpl-b", "name": "Beta", "stepsToComplete": "Do beta."},
    {"id": "tpl-c", "name": "Gamma", "stepsToComplete": "Do gamma."},
]


def gated_template():
    """S1 -> S3 and S2 -> S3, where S3 is gated by '1 AND 2'."""
    return {
        "processName": "Gated",
        "stepsToComplete": "All of it.",
        "steps": [
            {"id": "s1", "stepNumber": 1, "templateId": "tpl-a", "label": "Step 1\nAlpha", "x": 50, "y": 10},
            {"id": "s2", "stepNumber": 2, "templateId": "tpl-b", "label": "Step 2\nBeta", "x": 250, "y": 10},
            {"id": "s3", "stepNumber": 3, "templateId": "tpl-c", "label": "Step 3\nGamma", "x": 50, "y": 110,
             "inProgressRequirement": "Custom Logic", "customLogic": "1 AND 2"},
        ],
        "connections": [
            {"fromStep": "s1", "toStep": "s3"},
            {"fromStep": "s2", "toStep": "s3"},
        ],
    }


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def graph():
    """An empty graph that resolves template names from TEMPLATES and logs nowhere."""
    names = {record["id"]: record["name"] for record in TEMPLATES}
    return ProcessGraph(template_name_resolver=lambda template_id: names.get(template_id, ""),
                        log_func=lambda message: None)


@pytest.fixture
def view(surface):
    return DiagramView(surface)


@pytest.fixture
def router(graph, view):
    return ConnectionRouter(graph, view, log_func=lambda message: None)


@pytest.fixture
def backend():
    backend = InMemoryProcessBackend(TEMPLATES)
    backend.add_process("gated", gated_template())
    return backend


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def editor(surface, backend, notifier):
    editor = ProcessEditor(surface, backend, notifier=notifier, enable_logging=False)
    editor.refresh_templates()
    return editor


@pytest.fixture
def gated_data():
    return gated_template()
