# -*- coding: utf-8 -*-
"""
A process template designer: a directed graph of steps and logic gates,
edited on a canvas and saved through a pluggable backend.

The core (model, layout, routing, loading, serialization and the editor)
does not import any GUI toolkit. The Qt front end lives in
`process_designer.qt_surface`.
"""

from process_designer.conf import __version__
from process_designer.backend import (
    InMemoryProcessBackend, LoggingNotificationSink, NotificationSink, ProcessBackend, TemplateSummary
)
from process_designer.editor import ProcessEditor
from process_designer.model import (
    Connection, DuplicateConnectionError, DuplicateNodeError, LoadError, LogicNode, NodeKind,
    NodeNotFoundError, PersistenceError, ProcessDesignerError, ProcessGraph, StepNode, ValidationError
)
from process_designer.view import ArrowStyle, DiagramView, NullSurface, RenderingSurface
