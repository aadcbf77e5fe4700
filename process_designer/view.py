# -*- coding: utf-8 -*-
"""
The seam between the graph model and whatever draws it.

This module provides the following classes:
- `ArrowStyle`: Stroke settings for a drawn connection.
- `RenderingSurface`: The drawing capability the editor is given at construction.
- `NullSurface`: A surface that draws nothing, for headless use.
- `DiagramView`: Maps model objects to surface handles by stable uid.
"""

from typing import Any, Dict, Optional, Tuple

import process_designer.conf as conf
from process_designer.model import Connection, Node, NodeKind, ProcessGraph

Points = Tuple[float, float, float, float]

class ArrowStyle:
    """
    Stroke settings for a drawn connection.

    Attributes:
        color (str): The stroke and arrow-head color.
        width (int): The stroke width.
        dash (Tuple[int, ...]): The dash pattern; empty for a solid line.
    """
    def __init__(self, color: str, width: int = conf.CONNECTION_WIDTH_NORMAL, dash: Tuple[int, ...] = ()) -> None:
        self.color = color
        self.width = width
        self.dash = tuple(dash)

    @classmethod
    def normal(cls, color: str) -> 'ArrowStyle':
        return cls(color, conf.CONNECTION_WIDTH_NORMAL)

    @classmethod
    def selected(cls) -> 'ArrowStyle':
        return cls(conf.CONNECTION_COLOR_SELECTED, conf.CONNECTION_WIDTH_SELECTED, conf.CONNECTION_DASH_SELECTED)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ArrowStyle):
            return NotImplemented
        return (self.color, self.width, self.dash) == (other.color, other.width, other.dash)

    def __repr__(self) -> str:
        return f"ArrowStyle({self.color!r}, {self.width}, {self.dash})"

class RenderingSurface:
    """
    A 2-D canvas the editor drives but does not implement.

    Handles returned by `create_node_shape` and `create_arrow` are opaque to
    the core; they are only ever passed back to the surface.
    """
    REQUIRED_METHODS = ('clear', 'create_node_shape', 'move_shape', 'set_shape_label',
                        'set_shape_highlight', 'create_arrow', 'set_arrow_points',
                        'set_arrow_style', 'destroy', 'draw', 'batch_draw', 'size')

    def clear(self) -> None:
        """Removes every shape."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def create_node_shape(self, uid: int, kind: NodeKind, x: int, y: int, width: int, height: int, label: str) -> Any:
        """Creates a draggable node shape and returns its handle."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def move_shape(self, handle: Any, x: int, y: int) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def set_shape_label(self, handle: Any, label: str) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def set_shape_highlight(self, handle: Any, active: bool) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def create_arrow(self, key: int, points: Points, style: ArrowStyle) -> Any:
        """Creates a clickable arrow and returns its handle."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def set_arrow_points(self, handle: Any, points: Points) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def set_arrow_style(self, handle: Any, style: ArrowStyle) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def destroy(self, handle: Any) -> None:
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def draw(self) -> None:
        """Redraws immediately."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def batch_draw(self) -> None:
        """Requests a redraw, coalescing with other pending requests."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

    def size(self) -> Tuple[int, int]:
        """Returns the canvas (width, height)."""
        raise NotImplementedError(conf.UI.Error.NOT_IMPLEMENTED_ERROR_SUBCLASS)

class NullSurface(RenderingSurface):
    """A surface that keeps no shapes. Used when the editor runs headless."""
    def __init__(self, width: int = conf.DEFAULT_CANVAS_WIDTH, height: int = conf.DEFAULT_CANVAS_HEIGHT) -> None:
        self._size = (width, height)

    def clear(self) -> None:
        pass

    def create_node_shape(self, uid, kind, x, y, width, height, label):
        return uid

    def move_shape(self, handle, x, y):
        pass

    def set_shape_label(self, handle, label):
        pass

    def set_shape_highlight(self, handle, active):
        pass

    def create_arrow(self, key, points, style):
        return key

    def set_arrow_points(self, handle, points):
        pass

    def set_arrow_style(self, handle, style):
        pass

    def destroy(self, handle):
        pass

    def draw(self):
        pass

    def batch_draw(self):
        pass

    def size(self):
        return self._size

class DiagramView:
    """
    Keeps a rendering surface in step with the graph model.

    Shapes are looked up by `Node.uid` and connections by `id()` of the
    model object, so nothing in the model depends on drawable identity.

    Attributes:
        surface (RenderingSurface): The surface shapes are drawn on.
    """
    def __init__(self, surface: Any) -> None:
        # Use duck-typing so any object with the right methods can act as a surface.
        for method in RenderingSurface.REQUIRED_METHODS:
            if not callable(getattr(surface, method, None)):
                raise ValueError(conf.UI.Error.SURFACE_INVALID.format(method=method))
        self.surface = surface
        self._node_handles: Dict[int, Any] = {}
        self._connection_handles: Dict[int, Any] = {}
        self._connections: Dict[int, Connection] = {}

    def node_handle(self, node: Node) -> Optional[Any]:
        return self._node_handles.get(node.uid)

    def connection_handle(self, connection: Connection) -> Optional[Any]:
        return self._connection_handles.get(id(connection))

    def connection_for_key(self, key: int) -> Optional[Connection]:
        """Returns the connection drawn under the key passed to `create_arrow`."""
        return self._connections.get(key)

    def show_node(self, node: Node) -> None:
        """Creates the node's shape, or moves and relabels it if it exists."""
        handle = self._node_handles.get(node.uid)
        if handle is None:
            self._node_handles[node.uid] = self.surface.create_node_shape(
                node.uid, node.kind, node.x, node.y, node.width, node.height, node.label)
        else:
            self.surface.move_shape(handle, node.x, node.y)
            self.surface.set_shape_label(handle, node.label)

    def show_connection(self, connection: Connection, style: Optional[ArrowStyle] = None) -> None:
        """Creates the connection's arrow, or updates its points if it exists."""
        key = id(connection)
        handle = self._connection_handles.get(key)
        if handle is None:
            style = style if style else ArrowStyle.normal(connection.color)
            self._connection_handles[key] = self.surface.create_arrow(key, connection.points, style)
            self._connections[key] = connection
        else:
            self.surface.set_arrow_points(handle, connection.points)
            if style:
                self.surface.set_arrow_style(handle, style)

    def set_connection_style(self, connection: Connection, style: ArrowStyle) -> None:
        handle = self._connection_handles.get(id(connection))
        if handle is not None:
            self.surface.set_arrow_style(handle, style)

    def highlight_node(self, node: Node, active: bool) -> None:
        handle = self._node_handles.get(node.uid)
        if handle is not None:
            self.surface.set_shape_highlight(handle, active)

    def hide_node(self, node: Node) -> None:
        handle = self._node_handles.pop(node.uid, None)
        if handle is not None:
            self.surface.destroy(handle)

    def hide_connection(self, connection: Connection) -> None:
        key = id(connection)
        handle = self._connection_handles.pop(key, None)
        self._connections.pop(key, None)
        if handle is not None:
            self.surface.destroy(handle)

    def sync(self, graph: ProcessGraph) -> None:
        """
        Reconciles the surface with the whole graph.

        Shapes of removed nodes and connections are destroyed, missing ones
        are created, and the rest are moved and relabelled in place.
        """
        live_uids = {node.uid for node in graph.nodes}
        for uid in [uid for uid in self._node_handles if uid not in live_uids]:
            self.surface.destroy(self._node_handles.pop(uid))

        live_keys = {id(conn) for conn in graph.connections}
        for key in [key for key in self._connection_handles if key not in live_keys]:
            self.surface.destroy(self._connection_handles.pop(key))
            self._connections.pop(key, None)

        for node in graph.nodes:
            self.show_node(node)
        for conn in graph.connections:
            self.show_connection(conn)

    def reset(self) -> None:
        """Forgets every handle and clears the surface."""
        self._node_handles.clear()
        self._connection_handles.clear()
        self._connections.clear()
        self.surface.clear()

    def draw(self) -> None:
        self.surface.draw()

    def batch_draw(self) -> None:
        self.surface.batch_draw()

    def canvas_size(self) -> Tuple[int, int]:
        return self.surface.size()
