# -*- coding: utf-8 -*-
"""
Validation and serialization of the live graph into a save payload.
"""

import json
from typing import Any, Dict, List, Optional

import process_designer.conf as conf
from process_designer.model import LogicNode, Node, ProcessGraph, StepNode, ValidationError

class ProcessSerializer:
    """
    Converts a process graph into the payload the template saver expects.

    Attributes:
        graph (ProcessGraph): The graph to serialize.
    """
    def __init__(self, graph: ProcessGraph) -> None:
        self.graph = graph

    def validate(self, process_name: str, steps_to_complete: str) -> None:
        """
        Checks that the process can be saved, stopping at the first problem.

        Raises:
            ValidationError: If the name or description is missing, or any
                node has no connection.
        """
        if not process_name:
            raise ValidationError(conf.UI.Error.MISSING_PROCESS_NAME, ValidationError.MISSING_NAME)
        if not steps_to_complete:
            raise ValidationError(conf.UI.Error.MISSING_STEPS_TO_COMPLETE, ValidationError.MISSING_STEPS)

        disconnected = [node.id for node in self.graph.nodes if not self.graph.is_connected(node)]
        if disconnected:
            raise ValidationError(conf.UI.Error.DISCONNECTED_NODES.format(node_ids=', '.join(disconnected)),
                                  ValidationError.DISCONNECTED,
                                  disconnected)

    def gating_conditions(self) -> Dict[int, str]:
        """Maps the uid of every node a logic node points at to that logic node's condition."""
        conditions: Dict[int, str] = {}
        for connection in self.graph.connections:
            if isinstance(connection.from_node, LogicNode):
                conditions[connection.to_node.uid] = connection.from_node.condition or ''
        return conditions

    def _serialize_node(self, node: Node, conditions: Dict[int, str]) -> Dict[str, Any]:
        entry = {
            conf.Key.ID: node.id,
            conf.Key.X: node.x,
            conf.Key.Y: node.y,
            conf.Key.LABEL: node.label or '',
        }
        if isinstance(node, LogicNode):
            entry[conf.Key.TYPE] = conf.Value.TYPE_LOGIC
            entry[conf.Key.CONDITION] = node.condition or ''
            return entry

        gated = node.uid in conditions
        entry[conf.Key.TYPE] = conf.Value.TYPE_STEP
        entry[conf.Key.STEP_NUMBER] = node.step_number
        entry[conf.Key.STEP_TEMPLATE_ID] = node.template_id
        entry[conf.Key.IN_PROGRESS_REQUIREMENT] = (conf.Value.REQUIREMENT_CUSTOM_LOGIC if gated
                                                   else conf.Value.REQUIREMENT_PREVIOUS_STEP)
        entry[conf.Key.CUSTOM_LOGIC] = (conditions[node.uid] or None) if gated else None
        return entry

    def build_payload(self, process_name: str, steps_to_complete: str, template_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Validates the graph and builds the save payload.

        Args:
            process_name (str): The process name.
            steps_to_complete (str): The steps-to-complete description.
            template_id (str, optional): The current template reference, if
                the process was saved or loaded before.

        Returns:
            Dict[str, Any]: The payload, with `steps` and `connections` lists.

        Raises:
            ValidationError: If the process cannot be saved as it is.
        """
        self.validate(process_name, steps_to_complete)

        conditions = self.gating_conditions()
        steps: List[Dict[str, Any]] = [self._serialize_node(node, conditions) for node in self.graph.nodes]
        connections = [
            {
                conf.Key.FROM_STEP: connection.from_id,
                conf.Key.TO_STEP: connection.to_id,
                conf.Key.TO_TEMPLATE_ID: connection.to_node.template_id if isinstance(connection.to_node, StepNode) else None,
            }
            for connection in self.graph.connections
        ]

        return {
            conf.Key.PROCESS_NAME: process_name,
            conf.Key.STEPS_TO_COMPLETE: steps_to_complete,
            conf.Key.TEMPLATE_REF: template_id,
            conf.Key.STEPS: steps,
            conf.Key.CONNECTIONS: connections,
        }

    @staticmethod
    def to_json(payload: Dict[str, Any]) -> str:
        """Renders a payload as the JSON text sent to the backend."""
        return json.dumps(payload)
