# -*- coding: utf-8 -*-
"""
The in-memory graph model of a process template.

This module provides the following classes:
- `NodeKind`: The kinds of vertices a process graph can hold.
- `Node`: A positioned vertex with a fixed size determined by its kind.
- `StepNode`: An ordered action in the process, bound to a template.
- `LogicNode`: A conditional gate between predecessors and a gated step.
- `Connection`: A directed edge between two nodes.
- `ProcessGraph`: The graph itself, enforcing numbering and cascade rules.

Nodes and connections are plain data. Nothing here knows how they are
drawn; the view layer maps them to drawable handles through `Node.uid`.
"""

import itertools
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

import process_designer.conf as conf

class NodeKind(Enum):
    """Defines the kind of a node, either a step or a logic gate."""
    STEP = 'step'
    LOGIC = 'logic'

class ProcessDesignerError(Exception):
    """Base class for every error raised by the process designer."""
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

class ValidationError(ProcessDesignerError):
    """
    Raised when the diagram, or a value entered for it, is incomplete or invalid.

    Attributes:
        reason (str): A short machine-readable code (e.g. 'disconnected').
        node_ids (List[str]): The ids of the nodes at fault, if any.
    """
    MISSING_NAME = 'missing_name'
    MISSING_STEPS = 'missing_steps'
    DISCONNECTED = 'disconnected'
    INVALID_STEPS = 'invalid_steps'

    def __init__(self, message: str, reason: str, node_ids: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.node_ids = list(node_ids or [])

class LoadError(ProcessDesignerError):
    """Raised when a template cannot be fetched or parsed."""
    pass

class PersistenceError(ProcessDesignerError):
    """Raised when the backend rejects a save or update."""
    pass

class DuplicateNodeError(ProcessDesignerError):
    """Raised when a node id would collide with an existing node."""
    pass

class DuplicateConnectionError(ProcessDesignerError):
    """Raised when an edge already exists for the same ordered pair of nodes."""
    pass

class NodeNotFoundError(ProcessDesignerError):
    """Raised when an operation refers to a node that is not in the graph."""
    pass

# Source of stable node identities, independent of the (renumberable) ids.
_uid_sequence = itertools.count(1)

class Node:
    """
    A positioned vertex of the process graph.

    Subclasses fix `kind`, `width` and `height` and derive `id`.

    Attributes:
        uid (int): A stable identity that survives renumbering.
        x (int): The x-coordinate of the top-left corner.
        y (int): The y-coordinate of the top-left corner.
        label (str): The display text.
    """
    kind: NodeKind
    width: int
    height: int

    def __init__(self, x: int, y: int, label: str = '') -> None:
        self.uid = next(_uid_sequence)
        self.x = int(x)
        self.y = int(y)
        self.label = label

    @property
    def id(self) -> str:
        """The node's reference id, as persisted in templates."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    @property
    def is_step(self) -> bool:
        return self.kind == NodeKind.STEP

    @property
    def is_logic(self) -> bool:
        return self.kind == NodeKind.LOGIC

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def right(self) -> int:
        return self.x + self.width

    def move_to(self, x: int, y: int) -> None:
        """Sets the top-left corner of the node."""
        self.x = int(x)
        self.y = int(y)

    def translate(self, dx: int, dy: int) -> None:
        """Moves the node by the given offset."""
        self.move_to(self.x + dx, self.y + dy)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, x={self.x}, y={self.y})"

class StepNode(Node):
    """
    A step of the process, bound to an external template entity.

    Attributes:
        step_number (int): The position of the step in the process (1-based).
        template_id (str): The template the step executes.
    """
    kind = NodeKind.STEP
    width = conf.STEP_WIDTH
    height = conf.STEP_HEIGHT

    def __init__(self, step_number: int, template_id: Optional[str], x: int, y: int, label: str = '') -> None:
        super().__init__(x, y, label)
        self.step_number = step_number
        self.template_id = template_id

    @property
    def id(self) -> str:
        return conf.Format.STEP_ID.format(step_number=self.step_number, template_id=self.template_id)

    def renumber(self, step_number: int, template_name: str = '') -> None:
        """Assigns a new step number and regenerates the display label."""
        self.step_number = step_number
        self.label = conf.Format.STEP_LABEL.format(step_number=step_number, template_name=template_name)

class LogicNode(Node):
    """
    A conditional gate. Its condition references upstream step numbers.

    Attributes:
        condition (str): The logic expression, e.g. "1 AND 2".
        number (Optional[int]): The n of a `logic-{n}` id, None for
            nodes inserted in front of a specific step.
    """
    kind = NodeKind.LOGIC
    width = conf.LOGIC_WIDTH
    height = conf.LOGIC_HEIGHT

    def __init__(self, node_id: str, x: int, y: int, label: str = '', condition: str = '', number: Optional[int] = None) -> None:
        super().__init__(x, y, label)
        self._id = node_id
        self.condition = condition
        self.number = number

    @property
    def id(self) -> str:
        return self._id

class Connection:
    """
    A directed edge between two nodes.

    The edge holds the node objects themselves, so its ids follow any
    renumbering of the endpoints.

    Attributes:
        from_node (Node): The upstream node.
        to_node (Node): The downstream node.
        color (str): `conf.CONNECTION_COLOR_DEFAULT` or `conf.CONNECTION_COLOR_LOGIC`.
        points (Tuple[float, float, float, float]): The last computed
            endpoint geometry (x1, y1, x2, y2), set by the router.
    """
    def __init__(self, from_node: Node, to_node: Node, color: str = conf.CONNECTION_COLOR_DEFAULT) -> None:
        self.from_node = from_node
        self.to_node = to_node
        self.color = color
        self.points: Tuple[float, float, float, float] = (0, 0, 0, 0)

    @property
    def from_id(self) -> str:
        return self.from_node.id

    @property
    def to_id(self) -> str:
        return self.to_node.id

    def touches(self, node: Node) -> bool:
        """Returns True if the node is either endpoint of this edge."""
        return self.from_node is node or self.to_node is node

    def __repr__(self) -> str:
        return f"Connection({self.from_id!r} -> {self.to_id!r}, {self.color})"

def _smallest_unused(used: Iterator[int]) -> int:
    """Returns the smallest positive integer not in `used`."""
    taken = set(used)
    number = 1
    while number in taken:
        number += 1
    return number

class ProcessGraph:
    """
    The live process graph: ordered nodes plus directed connections.

    Invariants kept by this class:
    - Step numbers are dense (1..k) after any removal.
    - Node ids are unique.
    - At most one connection per ordered pair of nodes.
    - Connections only reference nodes that are in the graph.

    Attributes:
        template_name_resolver (Callable[[Optional[str]], str]): Maps a
            template id to the name shown in step labels.
        log_func (Callable[[str], None]): A function for logging messages.
    """
    def __init__(self,
                 template_name_resolver: Optional[Callable[[Optional[str]], str]] = None,
                 log_func: Optional[Callable[[str], None]] = None
                 ) -> None:
        self._nodes: List[Node] = []
        self._connections: List[Connection] = []
        self.template_name_resolver = template_name_resolver if template_name_resolver else (lambda template_id: '')
        self.log_func = log_func if log_func else print

    # --- Accessors ---

    @property
    def nodes(self) -> List[Node]:
        """All nodes, in insertion order."""
        return list(self._nodes)

    @property
    def steps(self) -> List[StepNode]:
        return [node for node in self._nodes if isinstance(node, StepNode)]

    @property
    def logic_nodes(self) -> List[LogicNode]:
        return [node for node in self._nodes if isinstance(node, LogicNode)]

    @property
    def connections(self) -> List[Connection]:
        return list(self._connections)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: Node) -> bool:
        return any(existing is node for existing in self._nodes)

    def find_node(self, node_id: str) -> Optional[Node]:
        """Returns the node with the given id, or None."""
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def find_by_uid(self, uid: int) -> Optional[Node]:
        """Returns the node with the given stable uid, or None."""
        for node in self._nodes:
            if node.uid == uid:
                return node
        return None

    def find_connection(self, from_node: Node, to_node: Node) -> Optional[Connection]:
        """Returns the edge from `from_node` to `to_node`, ignoring the reverse direction."""
        for conn in self._connections:
            if conn.from_node is from_node and conn.to_node is to_node:
                return conn
        return None

    def incoming(self, node: Node) -> List[Connection]:
        return [conn for conn in self._connections if conn.to_node is node]

    def outgoing(self, node: Node) -> List[Connection]:
        return [conn for conn in self._connections if conn.from_node is node]

    def incident(self, node: Node) -> List[Connection]:
        return [conn for conn in self._connections if conn.touches(node)]

    def is_connected(self, node: Node) -> bool:
        """Returns True if at least one connection touches the node."""
        return any(conn.touches(node) for conn in self._connections)

    # --- Node mutations ---

    def _insert(self, node: Node) -> Node:
        if self.find_node(node.id) is not None:
            raise DuplicateNodeError(conf.UI.Error.DUPLICATE_NODE_ID.format(node_id=node.id))
        self._nodes.append(node)
        return node

    def next_step_number(self) -> int:
        """The smallest positive step number not used by any step, filling gaps."""
        return _smallest_unused(step.step_number for step in self.steps)

    def next_logic_number(self) -> int:
        """The smallest positive n not used by any `logic-{n}` node."""
        return _smallest_unused(node.number for node in self.logic_nodes if node.number is not None)

    def add_step(self,
                 step_number: Optional[int] = None,
                 template_id: Optional[str] = None,
                 x: Optional[int] = None,
                 y: Optional[int] = None,
                 label: Optional[str] = None
                 ) -> StepNode:
        """
        Adds a step node to the graph.

        Without an explicit number the step takes the smallest free one, so
        numbers left free by a deletion are reused. Missing coordinates fall
        back to a single vertical column.

        Args:
            step_number (int, optional): The step number. Defaults to the
                smallest unused number.
            template_id (str, optional): The template the step executes.
            x (int, optional): Top-left x. Defaults to `conf.STEP_DEFAULT_X`.
            y (int, optional): Top-left y. Defaults to the column slot of the step.
            label (str, optional): Display text. Defaults to "Step {n}" plus
                the template name.

        Returns:
            StepNode: The created node.

        Raises:
            DuplicateNodeError: If the derived id is already in use.
        """
        free_number = self.next_step_number()
        number = step_number if step_number is not None else free_number
        if x is None:
            x = conf.STEP_DEFAULT_X
        if y is None:
            y = conf.STEP_DEFAULT_Y + (number - 1) * conf.STEP_DEFAULT_SPACING_Y
        if label is None:
            label = conf.Format.STEP_LABEL.format(step_number=number, template_name=self.template_name_resolver(template_id))

        node = self._insert(StepNode(number, template_id, x, y, label))
        self.log_func(conf.UI.Log.STEP_ADDED.format(node_id=node.id, x=node.x, y=node.y))
        return node

    def add_logic(self,
                  node_id: Optional[str] = None,
                  x: Optional[int] = None,
                  y: Optional[int] = None,
                  label: Optional[str] = None,
                  condition: str = ''
                  ) -> LogicNode:
        """
        Adds a logic node to the graph.

        Args:
            node_id (str, optional): An explicit id, e.g. `logic-for-{step}`.
                Defaults to `logic-{n}` with the smallest free n.
            x (int, optional): Top-left x. Defaults to `conf.LOGIC_DEFAULT_X`.
            y (int, optional): Top-left y. Defaults to the column slot of n.
            label (str, optional): Display text. Defaults to the condition,
                or "Logic {n}" when there is none.
            condition (str, optional): The logic expression. Defaults to ''.

        Returns:
            LogicNode: The created node.

        Raises:
            DuplicateNodeError: If the id is already in use.
        """
        number = None
        slot = self.next_logic_number()
        if node_id is None:
            number = slot
            node_id = conf.Format.LOGIC_ID.format(number=number)
        if x is None:
            x = conf.LOGIC_DEFAULT_X
        if y is None:
            y = conf.LOGIC_DEFAULT_Y + (slot - 1) * conf.LOGIC_DEFAULT_SPACING_Y
        if not label:
            label = condition or conf.Format.LOGIC_LABEL.format(number=slot)

        node = self._insert(LogicNode(node_id, x, y, label, condition, number))
        self.log_func(conf.UI.Log.LOGIC_ADDED.format(node_id=node.id, x=node.x, y=node.y))
        return node

    def remove_node(self, node: Node) -> List[Connection]:
        """
        Removes a node and every connection touching it.

        If the node was a step, the remaining steps are renumbered.

        Args:
            node (Node): The node to remove.

        Returns:
            List[Connection]: The connections removed along with the node.

        Raises:
            NodeNotFoundError: If the node is not part of this graph.
        """
        if node not in self:
            raise NodeNotFoundError(conf.UI.Error.NODE_NOT_FOUND.format(node_id=node.id))

        # Edges first, so no connection ever points at a removed node.
        removed = self.incident(node)
        self._connections = [conn for conn in self._connections if not conn.touches(node)]
        self._nodes = [existing for existing in self._nodes if existing is not node]
        self.log_func(conf.UI.Log.NODE_REMOVED.format(node_id=node.id, edge_count=len(removed)))

        if node.is_step:
            self.renumber_steps()
        return removed

    def renumber_steps(self) -> None:
        """Reassigns step numbers 1..k in list order and regenerates labels."""
        steps = self.steps
        for index, step in enumerate(steps, start=1):
            step.renumber(index, self.template_name_resolver(step.template_id))
        self.log_func(conf.UI.Log.STEPS_RENUMBERED.format(count=len(steps)))

    # --- Connection mutations ---

    def add_connection(self, connection: Connection) -> Connection:
        """
        Adds an edge to the graph.

        Raises:
            NodeNotFoundError: If either endpoint is not in the graph.
            DuplicateConnectionError: If the same ordered pair is already connected.
        """
        for endpoint in (connection.from_node, connection.to_node):
            if endpoint not in self:
                raise NodeNotFoundError(conf.UI.Error.NODE_NOT_FOUND.format(node_id=endpoint.id))
        if self.find_connection(connection.from_node, connection.to_node) is not None:
            raise DuplicateConnectionError(conf.UI.Error.DUPLICATE_CONNECTION.format(from_id=connection.from_id, to_id=connection.to_id))
        self._connections.append(connection)
        return connection

    def remove_connection(self, connection: Connection) -> bool:
        """
        Removes exactly one edge. No node is touched.

        Returns:
            bool: True if the edge was part of the graph, False otherwise.
        """
        for index, existing in enumerate(self._connections):
            if existing is connection:
                del self._connections[index]
                self.log_func(conf.UI.Log.CONNECTION_REMOVED.format(from_id=connection.from_id, to_id=connection.to_id))
                return True
        return False

    def clear(self) -> None:
        """Discards every node and connection."""
        self._connections = []
        self._nodes = []
