# -*- coding: utf-8 -*-
"""
Connection routing: endpoint geometry for the arrows between nodes.
"""

from typing import Callable, Optional, Tuple

import process_designer.conf as conf
from process_designer.model import Connection, Node, ProcessGraph
from process_designer.view import DiagramView

def calculate_endpoints(from_node: Node, to_node: Node) -> Tuple[float, float, float, float]:
    """
    Calculates the straight line drawn for a connection.

    The line attaches at the horizontal centers of both nodes. When the
    downstream node sits lower on the canvas, it runs from the bottom of the
    upstream node to the top of the downstream one; otherwise it runs from
    the top of the upstream node to the bottom of the downstream one, so the
    arrow always follows the visual flow.

    Args:
        from_node (Node): The upstream node.
        to_node (Node): The downstream node.

    Returns:
        Tuple[float, float, float, float]: The points (x1, y1, x2, y2).
    """
    from_x = from_node.center_x
    to_x = to_node.center_x

    if to_node.y > from_node.y:
        # Downwards: bottom of from -> top of to
        from_y = from_node.bottom
        to_y = to_node.y
    else:
        # Upwards or level: top of from -> bottom of to
        from_y = from_node.y
        to_y = to_node.bottom

    return (from_x, from_y, to_x, to_y)

class ConnectionRouter:
    """
    Creates connections and keeps their geometry in step with node positions.

    Attributes:
        graph (ProcessGraph): The graph whose connections are routed.
        view (DiagramView): Receives the computed geometry for drawing.
        log_func (Callable[[str], None]): A function for logging messages.
    """
    def __init__(self, graph: ProcessGraph, view: DiagramView, log_func: Optional[Callable[[str], None]] = None) -> None:
        self.graph = graph
        self.view = view
        self.log_func = log_func if log_func else print

    def add_connection(self, from_node: Node, to_node: Node, color: str = conf.CONNECTION_COLOR_DEFAULT) -> Connection:
        """
        Connects two nodes and draws the arrow.

        If the nodes are already connected in this direction, the existing
        connection is returned unchanged.

        Args:
            from_node (Node): The upstream node.
            to_node (Node): The downstream node.
            color (str, optional): The connection color. Defaults to black.

        Returns:
            Connection: The new (or existing) connection.
        """
        existing = self.graph.find_connection(from_node, to_node)
        if existing is not None:
            self.log_func(conf.UI.Log.CONNECTION_EXISTS.format(from_id=from_node.id, to_id=to_node.id))
            return existing

        connection = self.graph.add_connection(Connection(from_node, to_node, color))
        connection.points = calculate_endpoints(from_node, to_node)
        self.view.show_connection(connection)
        self.log_func(conf.UI.Log.CONNECTION_ADDED.format(from_id=from_node.id, to_id=to_node.id, color=color))
        return connection

    def update_geometry(self, connection: Connection) -> None:
        """Recomputes one connection's points and pushes them to the view."""
        connection.points = calculate_endpoints(connection.from_node, connection.to_node)
        self.view.show_connection(connection)

    def recompute_all(self) -> None:
        """Recomputes the geometry of every connection in the graph."""
        for connection in self.graph.connections:
            self.update_geometry(connection)

    def recompute_for_node(self, node: Node) -> None:
        """Recomputes only the connections touching the given node."""
        for connection in self.graph.incident(node):
            self.update_geometry(connection)
