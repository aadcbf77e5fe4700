# -*- coding: utf-8 -*-
"""
The process template editor.

`ProcessEditor` owns the single live graph and wires the layout, routing,
loading, interaction and serialization pieces together. It is the
boundary where failures stop: every public action catches, logs and
reports its errors through the notification sink instead of raising.
"""

import json
import re
from typing import Any, Callable, List, Optional, Tuple

import process_designer.conf as conf
from process_designer.backend import LoggingNotificationSink, NotificationSink, ProcessBackend, TemplateSummary
from process_designer.controller import InteractionController
from process_designer.layout import center_diagram
from process_designer.loader import TemplateLoader
from process_designer.model import (
    LoadError, LogicNode, PersistenceError, ProcessDesignerError, ProcessGraph,
    StepNode, ValidationError
)
from process_designer.routing import ConnectionRouter
from process_designer.serializer import ProcessSerializer
from process_designer.view import DiagramView

# Step references inside a logic condition, e.g. "1 AND (2 OR 3)".
STEP_REFERENCE_PATTERN = re.compile(r'\b\d+\b')

class ProcessEditor:
    """
    Edits one process template at a time.

    Attributes:
        view (DiagramView): The adapter onto the injected rendering surface.
        backend (ProcessBackend): Lists, loads and saves templates.
        notifier (NotificationSink): Receives user-facing messages.
        graph (ProcessGraph): The live graph.
        router (ConnectionRouter): Routes the live graph's connections.
        controller (InteractionController): Handles selection and gestures.
        templates (List[TemplateSummary]): The editor's own copy of the catalog.
        selected_template_id (Optional[str]): The template new steps execute.
        current_template_id (Optional[str]): The template being edited, once
            loaded or saved.
        process_name (str): The process name entered by the user.
        steps_to_complete (str): The description entered by the user.
    """
    def __init__(self,
                 surface: Any,
                 backend: ProcessBackend,
                 notifier: Optional[NotificationSink] = None,
                 enable_logging: bool = True,
                 log_func: Optional[Callable[[str], None]] = None
                 ) -> None:
        """
        Initializes the ProcessEditor.

        Args:
            surface (RenderingSurface): The canvas to draw on.
            backend (ProcessBackend): The persistence collaborator.
            notifier (NotificationSink, optional): Where user messages go.
                Defaults to a sink writing through `log_message`.
            enable_logging (bool, optional): If True, log messages are
                written. Defaults to True.
            log_func (Callable[[str], None], optional): Where log messages
                are written. Defaults to `print`.
        """
        self.log_enabled = enable_logging
        self._log_func = log_func if log_func else print
        self.view = DiagramView(surface)
        self.backend = backend
        self.notifier = notifier if notifier else LoggingNotificationSink(self.log_message)

        self.templates: List[TemplateSummary] = []
        self.selected_template_id: Optional[str] = None
        self.current_template_id: Optional[str] = None
        self.process_name = ''
        self.steps_to_complete = ''

        self._bind(self._new_graph())

    # --- Plumbing ---

    def log_message(self, message: str) -> None:
        """
        Writes a message through the log function if logging is enabled.

        Args:
            message (str): The message to log.
        """
        if self.log_enabled:
            self._log_func(message)

    def _notify_success(self, message: str) -> None:
        self.notifier.notify(conf.UI.Notify.TITLE_SUCCESS, message, conf.UI.Notify.VARIANT_SUCCESS)

    def _notify_error(self, message: str) -> None:
        self.notifier.notify(conf.UI.Notify.TITLE_ERROR, message, conf.UI.Notify.VARIANT_ERROR)

    def _new_graph(self) -> ProcessGraph:
        return ProcessGraph(template_name_resolver=self.template_name, log_func=self.log_message)

    def _bind(self, graph: ProcessGraph) -> None:
        """Makes `graph` the live graph and rebuilds the helpers bound to it."""
        self.graph = graph
        self.router = ConnectionRouter(graph, self.view, self.log_message)
        self.controller = InteractionController(graph, self.router, self.view, self.log_message)

    def _call_backend(self, error_class: type, func: Callable, *args: Any) -> Any:
        """Calls the backend, converting any failure into `error_class`."""
        try:
            return func(*args)
        except Exception as e:
            message = getattr(e, 'message', None) or str(e)
            raise error_class(conf.UI.Error.BACKEND_FAILURE.format(error=message)) from e

    # --- Template catalog ---

    def find_template(self, template_id: Optional[str]) -> Optional[TemplateSummary]:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def template_name(self, template_id: Optional[str]) -> str:
        """Returns the display name of a template, or '' if it is unknown."""
        template = self.find_template(template_id)
        return template.name if template else ''

    def refresh_templates(self) -> bool:
        """
        Reloads the template catalog from the backend.

        The editor keeps its own clones of the records so local edits never
        touch what the backend returned. On failure the catalog is emptied.

        Returns:
            bool: True if the catalog was loaded.
        """
        try:
            records = self._call_backend(LoadError, self.backend.list_templates)
            self.templates = [TemplateSummary.from_record(record) for record in records]
        except (ProcessDesignerError, KeyError, TypeError) as e:
            self.templates = []
            self.log_message(conf.UI.Log.CATALOG_LOAD_FAILED.format(error=e))
            self._notify_error(conf.UI.Notify.CATALOG_LOAD_FAILED)
            return False
        self.log_message(conf.UI.Log.CATALOG_LOADED.format(count=len(self.templates)))
        return True

    def template_options(self) -> List[Tuple[str, str]]:
        """Returns (label, value) pairs for a template picker."""
        return [(template.name, template.id) for template in self.templates]

    def select_template(self, template_id: Optional[str]) -> None:
        """Sets the template that new steps will execute."""
        self.selected_template_id = template_id
        self.log_message(conf.UI.Log.TEMPLATE_SELECTED.format(template_id=template_id))

    # --- Loading ---

    def load_template(self, template_id: str) -> bool:
        """
        Loads a template for editing, replacing the whole diagram.

        The new graph is built apart from the live one and only swapped in
        once it loaded completely, so a failed load leaves the editor as it was.

        Args:
            template_id (str): The template to load.

        Returns:
            bool: True if the template was loaded.
        """
        self.log_message(conf.UI.Log.TEMPLATE_LOADING.format(template_id=template_id))
        staged = self._new_graph()
        try:
            data = self._call_backend(LoadError, self.backend.load_template_for_editing, template_id)
            template = TemplateLoader(staged, self.log_message).load(data)
        except LoadError as e:
            self.log_message(conf.UI.Log.TEMPLATE_LOAD_FAILED.format(error=e))
            self._notify_error(conf.UI.Notify.LOAD_FAILED)
            return False

        self.controller.clear()
        self.view.reset()
        self._bind(staged)
        self.process_name = template.process_name
        self.steps_to_complete = template.steps_to_complete
        self.current_template_id = template.template_id if template.template_id else template_id

        self.view.sync(self.graph)
        self.router.recompute_all()
        self.view.draw()
        self.center_diagram()
        self.log_message(conf.UI.Log.TEMPLATE_LOADED.format(template_id=self.current_template_id,
                                                            step_count=len(self.graph.steps),
                                                            connection_count=len(self.graph.connections)))
        return True

    # --- Editing ---

    def add_step(self) -> Optional[StepNode]:
        """
        Adds a step for the selected template.

        Returns:
            StepNode or None: The new step, or None if no template is selected.
        """
        if not self.selected_template_id:
            self._notify_error(conf.UI.Notify.TEMPLATE_REQUIRED)
            return None
        node = self.graph.add_step(template_id=self.selected_template_id)
        self.view.show_node(node)
        self.view.draw()
        return node

    def add_logic(self) -> LogicNode:
        """Adds an empty logic node in the logic column."""
        node = self.graph.add_logic()
        self.view.show_node(node)
        self.view.draw()
        return node

    def delete_selected(self) -> bool:
        """Deletes the selected connection, or else the selected node."""
        return self.controller.delete_selected()

    def center_diagram(self) -> Tuple[int, int]:
        """Centers the diagram on the canvas and redraws."""
        width, height = self.view.canvas_size()
        offset = center_diagram(self.graph, self.router, width, height, conf.CENTER_PADDING, self.log_message)
        self.view.draw()
        return offset

    # --- Surface events ---

    def on_node_click(self, uid: int) -> None:
        node = self.graph.find_by_uid(uid)
        if node is not None:
            self.controller.click_node(node)

    def on_node_double_click(self, uid: int) -> Optional[LogicNode]:
        """Returns the logic node to edit, if the double-clicked node is one."""
        node = self.graph.find_by_uid(uid)
        return node if isinstance(node, LogicNode) else None

    def on_connection_click(self, key: int) -> None:
        connection = self.view.connection_for_key(key)
        if connection is not None:
            self.controller.click_connection(connection)

    def on_drag_move(self, uid: int, x: float, y: float) -> Optional[Tuple[int, int]]:
        """Snaps a dragged node and returns the committed position."""
        node = self.graph.find_by_uid(uid)
        if node is None:
            return None
        return self.controller.drag_move(node, x, y)

    # --- Logic conditions ---

    def logic_edit_context(self, node: LogicNode) -> Tuple[List[int], str]:
        """
        Returns what a logic editor needs: the step numbers feeding the node
        and its current condition.
        """
        allowed = [conn.from_node.step_number for conn in self.graph.incoming(node)
                   if isinstance(conn.from_node, StepNode)]
        return allowed, node.condition or ''

    def edit_logic_condition(self, node: LogicNode, text: str) -> bool:
        """
        Sets the condition of a logic node.

        Only the numbers of steps connected into the node may appear in the
        condition.

        Args:
            node (LogicNode): The node to edit.
            text (str): The condition as entered by the user.

        Returns:
            bool: True if the condition was accepted.
        """
        condition = (text or '').strip()
        allowed, _ = self.logic_edit_context(node)
        allowed_refs = {str(number) for number in allowed}
        invalid = [ref for ref in STEP_REFERENCE_PATTERN.findall(condition) if ref not in allowed_refs]
        if invalid:
            error = ValidationError(conf.UI.Error.INVALID_LOGIC_STEPS.format(steps=', '.join(invalid)),
                                    ValidationError.INVALID_STEPS)
            self.log_message(str(error))
            self._notify_error(conf.UI.Notify.INVALID_LOGIC_STEPS.format(steps=', '.join(invalid)))
            return False

        node.condition = condition
        node.label = conf.Format.LOGIC_EDITED_LABEL.format(condition=condition)
        self.view.show_node(node)
        self.view.draw()
        self.log_message(conf.UI.Log.LOGIC_CONDITION_UPDATED.format(node_id=node.id, condition=condition))
        return True

    # --- Steps to complete of a catalog template ---

    @property
    def can_edit_steps(self) -> bool:
        """True when the selection is a step, whose template text can be edited."""
        node = self.controller.selected_node
        return isinstance(node, StepNode) and node.template_id is not None

    def edit_steps_for_selected(self) -> Optional[Tuple[str, str]]:
        """Returns (template id, current text) for the selected step's template."""
        if not self.can_edit_steps:
            return None
        template_id = self.controller.selected_node.template_id
        template = self.find_template(template_id)
        return template_id, template.steps_to_complete if template else ''

    def save_steps_to_complete(self, template_id: str, text: str) -> bool:
        """
        Updates the steps-to-complete text of a catalog template.

        Returns:
            bool: True if the backend accepted the update.
        """
        self.log_message(conf.UI.Log.STEPS_UPDATING.format(template_id=template_id))
        try:
            self._call_backend(PersistenceError, self.backend.update_steps_to_complete, template_id, text)
        except PersistenceError as e:
            self.log_message(conf.UI.Log.STEPS_UPDATE_FAILED.format(error=e))
            self._notify_error(conf.UI.Notify.STEPS_UPDATE_FAILED)
            return False

        self.templates = [template.clone(steps_to_complete=text) if template.id == template_id else template
                          for template in self.templates]
        self._notify_success(conf.UI.Notify.STEPS_UPDATED)
        return True

    # --- Saving ---

    def build_payload(self) -> dict:
        """
        Validates the diagram and returns the save payload.

        Raises:
            ValidationError: If the process cannot be saved as it is.
        """
        return ProcessSerializer(self.graph).build_payload(self.process_name, self.steps_to_complete, self.current_template_id)

    def _validation_message(self, error: ValidationError) -> str:
        if error.reason == ValidationError.MISSING_NAME:
            return conf.UI.Notify.MISSING_PROCESS_NAME
        if error.reason == ValidationError.MISSING_STEPS:
            return conf.UI.Notify.MISSING_STEPS_TO_COMPLETE
        if error.reason == ValidationError.DISCONNECTED:
            return conf.UI.Notify.DISCONNECTED_STEPS
        return error.message

    def save_process(self) -> Optional[str]:
        """
        Validates and saves the diagram.

        On success the returned template id becomes the current template.
        On failure nothing in the editor changes, so the user can retry.

        Returns:
            str or None: The saved template id, or None if the save failed.
        """
        try:
            payload = self.build_payload()
        except ValidationError as e:
            self.log_message(conf.UI.Log.SAVE_VALIDATION_FAILED.format(error=e))
            self._notify_error(self._validation_message(e))
            return None

        self.log_message(conf.UI.Log.SENDING_PAYLOAD.format(payload=ProcessSerializer.to_json(payload)))
        try:
            template_id = self._call_backend(PersistenceError, self.backend.save_process_template, payload)
        except PersistenceError as e:
            self.log_message(conf.UI.Log.SAVE_FAILED.format(error=e))
            cause = e.__cause__
            self._notify_error(getattr(cause, 'message', None) or conf.UI.Notify.SAVE_FAILED)
            return None

        self.current_template_id = template_id
        self.log_message(conf.UI.Log.SAVE_SUCCEEDED.format(template_id=template_id))
        self._notify_success(conf.UI.Notify.PROCESS_SAVED)
        return template_id

    # --- Debugging ---

    def dump_diagram(self) -> str:
        """Returns (and logs) a JSON dump of the nodes and connections."""
        steps = [
            {
                conf.Key.ID: node.id,
                conf.Key.LABEL: node.label or '',
                conf.Key.X: node.x,
                conf.Key.Y: node.y,
                conf.Key.STEP_TEMPLATE_ID: getattr(node, 'template_id', None),
            }
            for node in self.graph.nodes
        ]
        connections = [{conf.Key.DUMP_FROM: conn.from_id, conf.Key.DUMP_TO: conn.to_id}
                       for conn in self.graph.connections]
        dump = json.dumps({conf.Key.STEPS: steps, conf.Key.CONNECTIONS: connections}, indent=2)
        self.log_message(conf.UI.Log.DIAGRAM_DUMP.format(dump=dump))
        return dump
