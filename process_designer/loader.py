# -*- coding: utf-8 -*-
"""
Builds a process graph from a template loaded for editing.

Loading happens in two stages. `parse_template` checks the raw data and
turns it into records, raising `LoadError` before anything is built.
`TemplateLoader.populate` then creates the nodes and connections, placing a
logic node in front of every step gated by custom logic.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import process_designer.conf as conf
from process_designer.model import Connection, DuplicateNodeError, LoadError, LogicNode, Node, ProcessGraph
from process_designer.routing import calculate_endpoints

class StepRecord:
    """
    One persisted step, as returned by the template loader collaborator.

    Attributes:
        ref_id (str): The id connections use to refer to this step.
        step_number (int): The persisted step number.
        template_id (Optional[str]): The template the step executes.
        label (Optional[str]): The persisted display text.
        requirement (Optional[str]): The in-progress requirement.
        custom_logic (Optional[str]): The gating expression, if any.
        x (Optional[int]): The persisted x-coordinate, if any.
        y (Optional[int]): The persisted y-coordinate, if any.
    """
    def __init__(self,
                 ref_id: str,
                 step_number: int,
                 template_id: Optional[str] = None,
                 label: Optional[str] = None,
                 requirement: Optional[str] = None,
                 custom_logic: Optional[str] = None,
                 x: Optional[int] = None,
                 y: Optional[int] = None
                 ) -> None:
        self.ref_id = ref_id
        self.step_number = step_number
        self.template_id = template_id
        self.label = label
        self.requirement = requirement
        self.custom_logic = custom_logic
        self.x = x
        self.y = y

    @property
    def is_gated(self) -> bool:
        """True if the step only starts once its custom logic is satisfied."""
        return self.requirement == conf.Value.REQUIREMENT_CUSTOM_LOGIC and bool(self.custom_logic)

class LoadedTemplate:
    """
    A template as loaded for editing, before it is turned into a graph.

    Attributes:
        process_name (str): The process name.
        steps_to_complete (str): The steps-to-complete description.
        template_id (Optional[str]): The backend id of the template.
        steps (List[StepRecord]): The persisted steps, in order.
        connections (List[Tuple[str, str]]): (fromStep, toStep) pairs.
    """
    def __init__(self,
                 process_name: str,
                 steps_to_complete: str,
                 template_id: Optional[str],
                 steps: List[StepRecord],
                 connections: List[Tuple[str, str]]
                 ) -> None:
        self.process_name = process_name
        self.steps_to_complete = steps_to_complete
        self.template_id = template_id
        self.steps = steps
        self.connections = connections

def _optional_int(value: Any, field: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=f"{field}={value!r} is not a number"))

def parse_template(data: Mapping[str, Any]) -> LoadedTemplate:
    """
    Checks raw template data and converts it into records.

    Args:
        data (Mapping[str, Any]): The template as returned by the backend.

    Returns:
        LoadedTemplate: The parsed template.

    Raises:
        LoadError: If the data is not a mapping, its step or connection
            lists are not lists, or an entry is missing or mistypes a
            required field.
    """
    if not isinstance(data, Mapping):
        raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail="template is not an object"))

    raw_steps = data.get(conf.Key.STEPS) or []
    raw_connections = data.get(conf.Key.CONNECTIONS) or []
    for field, value in ((conf.Key.STEPS, raw_steps), (conf.Key.CONNECTIONS, raw_connections)):
        if not isinstance(value, list):
            raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=f"{field} is not a list"))

    steps: List[StepRecord] = []
    for raw in raw_steps:
        if not isinstance(raw, Mapping) or raw.get(conf.Key.ID) is None:
            raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=f"step without id: {raw!r}"))
        step_number = _optional_int(raw.get(conf.Key.STEP_NUMBER), conf.Key.STEP_NUMBER)
        if step_number is None or step_number < 1:
            raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=f"step '{raw[conf.Key.ID]}' has no valid step number"))
        steps.append(StepRecord(
            ref_id=str(raw[conf.Key.ID]),
            step_number=step_number,
            template_id=raw.get(conf.Key.STEP_TEMPLATE_ID),
            label=raw.get(conf.Key.LABEL),
            requirement=raw.get(conf.Key.IN_PROGRESS_REQUIREMENT),
            custom_logic=raw.get(conf.Key.CUSTOM_LOGIC),
            x=_optional_int(raw.get(conf.Key.X), conf.Key.X),
            y=_optional_int(raw.get(conf.Key.Y), conf.Key.Y),
        ))

    connections: List[Tuple[str, str]] = []
    for raw in raw_connections:
        if not isinstance(raw, Mapping) or conf.Key.FROM_STEP not in raw or conf.Key.TO_STEP not in raw:
            raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=f"connection without endpoints: {raw!r}"))
        if not isinstance(raw[conf.Key.FROM_STEP], str) or not isinstance(raw[conf.Key.TO_STEP], str):
            raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=f"connection endpoints are not ids: {raw!r}"))
        connections.append((raw[conf.Key.FROM_STEP], raw[conf.Key.TO_STEP]))

    return LoadedTemplate(
        process_name=data.get(conf.Key.PROCESS_NAME) or '',
        steps_to_complete=data.get(conf.Key.STEPS_TO_COMPLETE) or '',
        template_id=data.get(conf.Key.TEMPLATE_REF),
        steps=steps,
        connections=connections,
    )

class TemplateLoader:
    """
    Populates a graph from a parsed template, inserting logic nodes.

    Attributes:
        graph (ProcessGraph): The graph to populate. Expected to be empty.
        log_func (Callable[[str], None]): A function for logging messages.
    """
    def __init__(self, graph: ProcessGraph, log_func: Optional[Callable[[str], None]] = None) -> None:
        self.graph = graph
        self.log_func = log_func if log_func else print

    def load(self, data: Mapping[str, Any]) -> LoadedTemplate:
        """
        Parses raw template data and populates the graph with it.

        Raises:
            LoadError: If the data is malformed or yields colliding node ids.
        """
        template = parse_template(data)
        self.populate(template)
        return template

    def populate(self, template: LoadedTemplate) -> Dict[str, Node]:
        """
        Creates nodes and connections for a parsed template.

        Connections whose endpoints are unknown are skipped. A connection
        into a gated step is routed through a logic node shared by all the
        step's predecessors.

        Args:
            template (LoadedTemplate): The parsed template.

        Returns:
            Dict[str, Node]: The created step nodes, keyed by persisted id.
        """
        step_map: Dict[str, Node] = {}
        records: Dict[str, StepRecord] = {}
        for record in template.steps:
            try:
                node = self.graph.add_step(record.step_number, record.template_id, record.x, record.y, record.label)
            except DuplicateNodeError as e:
                raise LoadError(conf.UI.Error.MALFORMED_TEMPLATE.format(detail=str(e))) from e
            step_map[record.ref_id] = node
            records[record.ref_id] = record

        logic_nodes: Dict[str, LogicNode] = {} # Target step id -> its logic node

        for from_ref, to_ref in template.connections:
            from_node = step_map.get(from_ref)
            to_node = step_map.get(to_ref)
            if from_node is None or to_node is None:
                self.log_func(conf.UI.Log.CONNECTION_SKIPPED.format(from_id=from_ref, to_id=to_ref))
                continue

            target = records[to_ref]
            if not target.is_gated:
                self._connect(from_node, to_node, conf.CONNECTION_COLOR_DEFAULT)
                continue

            logic_node = logic_nodes.get(to_ref)
            if logic_node is None:
                logic_node = self._insert_logic(from_node, to_node, to_ref, target.custom_logic)
                logic_nodes[to_ref] = logic_node
                self._connect(logic_node, to_node, conf.CONNECTION_COLOR_LOGIC)
            self._connect(from_node, logic_node, conf.CONNECTION_COLOR_LOGIC)

        # Nodes may have moved during reflow after their edges were created.
        for connection in self.graph.connections:
            connection.points = calculate_endpoints(connection.from_node, connection.to_node)
        return step_map

    def _insert_logic(self, from_node: Node, to_node: Node, to_ref: str, condition: str) -> LogicNode:
        """
        Creates the logic node for a gated step and makes room for it.

        The diamond goes centered below the first predecessor seen. Every
        other node at or below the gated step is then pushed down once.
        """
        logic_x = int(from_node.center_x) - conf.LOGIC_INSERT_OFFSET_X
        logic_y = from_node.bottom + conf.LOGIC_INSERT_GAP_Y
        logic_node = self.graph.add_logic(
            node_id=conf.Format.LOGIC_FOR_ID.format(target_id=to_ref),
            x=logic_x,
            y=logic_y,
            label=condition,
            condition=condition,
        )

        threshold = to_node.y
        shifted = 0
        for node in self.graph.nodes:
            if node is not logic_node and node.y >= threshold:
                node.translate(0, conf.LOGIC_REFLOW_SHIFT_Y)
                shifted += 1
        self.log_func(conf.UI.Log.LOGIC_INSERTED.format(node_id=logic_node.id, target_id=to_ref, count=shifted, shift=conf.LOGIC_REFLOW_SHIFT_Y))
        return logic_node

    def _connect(self, from_node: Node, to_node: Node, color: str) -> None:
        if self.graph.find_connection(from_node, to_node) is not None:
            return
        self.graph.add_connection(Connection(from_node, to_node, color))
