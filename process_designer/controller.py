# -*- coding: utf-8 -*-
"""
The interaction controller: selection, click-to-connect, delete and drag.
"""

from enum import Enum
from typing import Callable, Optional, Tuple

import process_designer.conf as conf
from process_designer.layout import snap
from process_designer.model import Connection, Node, ProcessGraph
from process_designer.routing import ConnectionRouter
from process_designer.view import ArrowStyle, DiagramView

class SelectionState(Enum):
    """The states of the node selection state machine."""
    IDLE = 0
    ONE_SELECTED = 1

class InteractionController:
    """
    Turns user gestures on the canvas into graph mutations.

    At most one node or one connection is selected at any time, never both.
    Clicking a second node while one is selected connects them instead of
    moving the selection.

    Attributes:
        graph (ProcessGraph): The live graph.
        router (ConnectionRouter): Creates and reroutes connections.
        view (DiagramView): Reflects highlights, styles and removals.
        selected_node (Optional[Node]): The selected node, if any.
        selected_connection (Optional[Connection]): The selected connection, if any.
        log_func (Callable[[str], None]): A function for logging messages.
    """
    def __init__(self,
                 graph: ProcessGraph,
                 router: ConnectionRouter,
                 view: DiagramView,
                 log_func: Optional[Callable[[str], None]] = None
                 ) -> None:
        self.graph = graph
        self.router = router
        self.view = view
        self.log_func = log_func if log_func else print
        self.selected_node: Optional[Node] = None
        self.selected_connection: Optional[Connection] = None

    @property
    def state(self) -> SelectionState:
        return SelectionState.ONE_SELECTED if self.selected_node is not None else SelectionState.IDLE

    def _deselect_node(self) -> None:
        if self.selected_node is not None:
            self.view.highlight_node(self.selected_node, False)
            self.log_func(conf.UI.Log.NODE_DESELECTED.format(node_id=self.selected_node.id))
            self.selected_node = None

    def _deselect_connection(self) -> None:
        if self.selected_connection is not None:
            connection = self.selected_connection
            self.view.set_connection_style(connection, ArrowStyle.normal(connection.color))
            self.log_func(conf.UI.Log.CONNECTION_DESELECTED.format(from_id=connection.from_id, to_id=connection.to_id))
            self.selected_connection = None

    def clear(self) -> None:
        """Drops any selection without touching the graph."""
        self._deselect_connection()
        self._deselect_node()

    def click_node(self, node: Node) -> Optional[Connection]:
        """
        Handles a click on a node.

        - Nothing selected: the node becomes selected and highlighted.
        - The same node selected: it is deselected.
        - Another node selected: a connection from the selected node to this
          one is created unless it already exists, and the selection clears.

        Args:
            node (Node): The clicked node.

        Returns:
            Optional[Connection]: The connection created by this click, if any.
        """
        self._deselect_connection()

        if self.selected_node is None:
            self.selected_node = node
            self.view.highlight_node(node, True)
            self.log_func(conf.UI.Log.NODE_SELECTED.format(node_id=node.id))
            self.view.draw()
            return None

        if self.selected_node is node:
            self._deselect_node()
            self.view.draw()
            return None

        first = self.selected_node
        created = None
        # Only the first -> second direction counts; a reverse edge is allowed.
        if self.graph.find_connection(first, node) is None:
            created = self.router.add_connection(first, node, conf.CONNECTION_COLOR_DEFAULT)
        else:
            self.log_func(conf.UI.Log.CONNECTION_EXISTS.format(from_id=first.id, to_id=node.id))

        self._deselect_node()
        self.view.draw()
        return created

    def click_connection(self, connection: Connection) -> None:
        """
        Toggles the selection of a connection.

        Selecting a connection clears any node selection and restores the
        style of a previously selected connection.
        """
        self._deselect_node()

        if self.selected_connection is connection:
            self._deselect_connection()
        else:
            self._deselect_connection()
            self.selected_connection = connection
            self.view.set_connection_style(connection, ArrowStyle.selected())
            self.log_func(conf.UI.Log.CONNECTION_SELECTED.format(from_id=connection.from_id, to_id=connection.to_id))
        self.view.draw()

    def delete_selected(self) -> bool:
        """
        Deletes the current selection.

        A selected connection is removed on its own. Otherwise a selected
        node is removed along with its connections, and the remaining steps
        are renumbered. With nothing selected this does nothing.

        Returns:
            bool: True if something was deleted.
        """
        if self.selected_connection is not None:
            connection = self.selected_connection
            self.selected_connection = None
            self.graph.remove_connection(connection)
            self.view.hide_connection(connection)
            self.view.draw()
            return True

        if self.selected_node is not None:
            node = self.selected_node
            self.selected_node = None
            for connection in self.graph.remove_node(node):
                self.view.hide_connection(connection)
            self.view.hide_node(node)
            # Renumbering changes labels of the remaining steps.
            self.view.sync(self.graph)
            self.view.draw()
            return True

        self.log_func(conf.UI.Log.NOTHING_TO_DELETE)
        return False

    def drag_move(self, node: Node, x: float, y: float) -> Tuple[int, int]:
        """
        Handles one drag-move tick of a node.

        Args:
            node (Node): The dragged node.
            x (float): The raw x-coordinate of the drag.
            y (float): The raw y-coordinate of the drag.

        Returns:
            Tuple[int, int]: The committed (snapped) position.
        """
        snapped_x, snapped_y = snap(x, y)
        node.move_to(snapped_x, snapped_y)
        self.view.show_node(node)
        self.router.recompute_for_node(node)
        self.view.batch_draw()
        return snapped_x, snapped_y
