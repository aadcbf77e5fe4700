# -*- coding: utf-8 -*-
"""
A demonstration script for the process template designer.

This script creates a `ProcessEditorWindow` over an in-memory backend,
seeded with a small catalog and one saved process, and runs the Qt
application.
"""

import sys

from PyQt5.QtWidgets import QApplication

from process_designer.backend import InMemoryProcessBackend
from process_designer.qt_surface import ProcessEditorWindow

DEMO_TEMPLATES = [
    {"id": "tpl-intake", "name": "Intake", "stepsToComplete": "Collect the request form."},
    {"id": "tpl-review", "name": "Review", "stepsToComplete": "Review the request."},
    {"id": "tpl-approve", "name": "Approve", "stepsToComplete": "Approve or reject."},
    {"id": "tpl-archive", "name": "Archive", "stepsToComplete": "File the outcome."},
]

DEMO_PROCESS_ID = "process-onboarding"

DEMO_PROCESS = {
    "processName": "Onboarding",
    "stepsToComplete": "Intake, review, approval and archiving.",
    "steps": [
        {"id": "s1", "stepNumber": 1, "templateId": "tpl-intake", "label": "Step 1\nIntake", "x": 50, "y": 10},
        {"id": "s2", "stepNumber": 2, "templateId": "tpl-review", "label": "Step 2\nReview", "x": 50, "y": 110},
        {"id": "s3", "stepNumber": 3, "templateId": "tpl-approve", "label": "Step 3\nApprove", "x": 250, "y": 110},
        {"id": "s4", "stepNumber": 4, "templateId": "tpl-archive", "label": "Step 4\nArchive", "x": 50, "y": 210,
         "inProgressRequirement": "Custom Logic", "customLogic": "2 AND 3"},
    ],
    "connections": [
        {"fromStep": "s1", "toStep": "s2"},
        {"fromStep": "s1", "toStep": "s3"},
        {"fromStep": "s2", "toStep": "s4"},
        {"fromStep": "s3", "toStep": "s4"},
    ],
}

def create_demo_backend() -> InMemoryProcessBackend:
    """Builds the in-memory backend used by the demo."""
    backend = InMemoryProcessBackend(DEMO_TEMPLATES)
    backend.add_process(DEMO_PROCESS_ID, DEMO_PROCESS)
    return backend

def main() -> int:
    # A QApplication instance must be created before any QWidget.
    app = QApplication(sys.argv)
    record_id = sys.argv[1] if len(sys.argv) > 1 else DEMO_PROCESS_ID

    main_window = ProcessEditorWindow(create_demo_backend(), record_id=record_id, enable_logging=True)
    return main_window.start()

if __name__ == "__main__":
    sys.exit(main())
