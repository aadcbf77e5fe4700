# -*- coding: utf-8 -*-
"""
Contracts for the collaborators the editor talks to, plus an in-memory backend.

This module provides the following classes:
- `TemplateSummary`: One entry of the template catalog.
- `ProcessBackend`: Lists, loads and saves process templates.
- `NotificationSink`: Receives success and error messages for the user.
- `LoggingNotificationSink`: A sink that writes messages through a log function.
- `InMemoryProcessBackend`: A dictionary-backed backend for demos and tests.
"""

import copy
import itertools
from typing import Any, Callable, Dict, List, Mapping, Optional

import process_designer.conf as conf

class TemplateSummary:
    """
    One entry of the template catalog.

    Attributes:
        id (str): The template id.
        name (str): The template display name.
        steps_to_complete (str): The template's steps-to-complete text.
    """
    def __init__(self, id: str, name: str = '', steps_to_complete: str = '') -> None:
        self.id = id
        self.name = name
        self.steps_to_complete = steps_to_complete

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'TemplateSummary':
        """Builds a summary from a catalog record returned by the backend."""
        return cls(id=record[conf.Key.TEMPLATE_ID],
                   name=record.get(conf.Key.TEMPLATE_NAME) or '',
                   steps_to_complete=record.get(conf.Key.TEMPLATE_STEPS_TO_COMPLETE) or '')

    def clone(self, **changes: Any) -> 'TemplateSummary':
        """Returns a copy of this summary, with the given fields replaced."""
        fields = {'id': self.id, 'name': self.name, 'steps_to_complete': self.steps_to_complete}
        fields.update(changes)
        return TemplateSummary(**fields)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TemplateSummary):
            return NotImplemented
        return (self.id, self.name, self.steps_to_complete) == (other.id, other.name, other.steps_to_complete)

    def __repr__(self) -> str:
        return f"TemplateSummary(id={self.id!r}, name={self.name!r})"

class ProcessBackend:
    """
    The persistence collaborator behind the editor.

    Implementations raise any exception to signal failure; an exception
    with a `message` attribute has that message shown to the user.
    """
    def list_templates(self) -> List[Mapping[str, Any]]:
        """Returns the catalog records: `{id, name, stepsToComplete}`."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def load_template_for_editing(self, template_id: str) -> Mapping[str, Any]:
        """Returns `{processName, stepsToComplete, templateId, steps, connections}`."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def save_process_template(self, payload: Mapping[str, Any]) -> str:
        """Persists a payload and returns the id of the saved template."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def update_steps_to_complete(self, template_id: str, steps_to_complete: str) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

class NotificationSink:
    """A fire-and-forget channel for user-facing messages."""
    def notify(self, title: str, message: str, variant: str) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

class LoggingNotificationSink(NotificationSink):
    """Writes notifications through a log function."""
    def __init__(self, log_func: Optional[Callable[[str], None]] = None) -> None:
        self.log_func = log_func if log_func else print

    def notify(self, title: str, message: str, variant: str) -> None:
        self.log_func(f"[{variant}] {title}: {message}")

class InMemoryProcessBackend(ProcessBackend):
    """
    A backend that keeps catalog and saved processes in dictionaries.

    Saved payloads are stored as given and converted back to the editing
    format on load: logic nodes are folded into the custom logic of the
    steps they gate, and connections through them become direct
    predecessor connections.

    Attributes:
        templates (Dict[str, Dict[str, Any]]): Catalog records keyed by id.
        processes (Dict[str, Dict[str, Any]]): Saved payloads keyed by id.
        saved_payloads (List[Dict[str, Any]]): Every payload received, in order.
    """
    def __init__(self, templates: Optional[List[Mapping[str, Any]]] = None) -> None:
        self.templates: Dict[str, Dict[str, Any]] = {}
        for record in templates or []:
            self.templates[record[conf.Key.TEMPLATE_ID]] = dict(record)
        self.processes: Dict[str, Dict[str, Any]] = {}
        self.saved_payloads: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

    def list_templates(self) -> List[Mapping[str, Any]]:
        return [copy.deepcopy(record) for record in self.templates.values()]

    def add_process(self, template_id: str, template: Mapping[str, Any]) -> None:
        """Registers a template in the editing format under the given id."""
        self.processes[template_id] = copy.deepcopy(dict(template))

    def load_template_for_editing(self, template_id: str) -> Mapping[str, Any]:
        if template_id not in self.processes:
            raise KeyError(template_id)
        stored = copy.deepcopy(self.processes[template_id])
        if stored.get(conf.Key.STEPS) and any(step.get(conf.Key.TYPE) for step in stored[conf.Key.STEPS]):
            stored = self._to_editing_format(stored)
        stored[conf.Key.TEMPLATE_REF] = template_id
        return stored

    def save_process_template(self, payload: Mapping[str, Any]) -> str:
        payload = copy.deepcopy(dict(payload))
        self.saved_payloads.append(payload)
        template_id = payload.get(conf.Key.TEMPLATE_REF) or f"process-{next(self._ids)}"
        self.processes[template_id] = payload
        return template_id

    def update_steps_to_complete(self, template_id: str, steps_to_complete: str) -> None:
        if template_id not in self.templates:
            raise KeyError(template_id)
        self.templates[template_id][conf.Key.TEMPLATE_STEPS_TO_COMPLETE] = steps_to_complete

    @staticmethod
    def _to_editing_format(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Folds logic nodes of a saved payload back into their gated steps."""
        logic_ids = {step[conf.Key.ID] for step in payload[conf.Key.STEPS]
                     if step.get(conf.Key.TYPE) == conf.Value.TYPE_LOGIC}
        steps = [step for step in payload[conf.Key.STEPS] if step[conf.Key.ID] not in logic_ids]

        feeding: Dict[str, List[str]] = {} # Logic id -> the steps pointing at it
        for conn in payload[conf.Key.CONNECTIONS]:
            if conn[conf.Key.TO_STEP] in logic_ids:
                feeding.setdefault(conn[conf.Key.TO_STEP], []).append(conn[conf.Key.FROM_STEP])

        connections = []
        for conn in payload[conf.Key.CONNECTIONS]:
            from_id, to_id = conn[conf.Key.FROM_STEP], conn[conf.Key.TO_STEP]
            if to_id in logic_ids:
                continue
            sources = feeding.get(from_id, []) if from_id in logic_ids else [from_id]
            for source in sources:
                connections.append({conf.Key.FROM_STEP: source, conf.Key.TO_STEP: to_id})

        return {
            conf.Key.PROCESS_NAME: payload.get(conf.Key.PROCESS_NAME),
            conf.Key.STEPS_TO_COMPLETE: payload.get(conf.Key.STEPS_TO_COMPLETE),
            conf.Key.STEPS: steps,
            conf.Key.CONNECTIONS: connections,
        }
