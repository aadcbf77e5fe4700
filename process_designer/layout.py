# -*- coding: utf-8 -*-
"""
Layout helpers: grid snapping, diagram bounds, and centering on the canvas.
"""

import math
from typing import Callable, Iterable, Optional, Tuple

import process_designer.conf as conf
from process_designer.model import Node, ProcessGraph
from process_designer.routing import ConnectionRouter

class Bounds:
    """
    An axis-aligned box around a set of nodes.

    Attributes:
        min_x (int): The left edge.
        min_y (int): The top edge.
        width (int): The horizontal extent.
        height (int): The vertical extent.
    """
    def __init__(self, min_x: int, min_y: int, width: int, height: int) -> None:
        self.min_x = min_x
        self.min_y = min_y
        self.width = width
        self.height = height

    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.min_x, self.min_y, self.width, self.height)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self) -> str:
        return f"Bounds(min_x={self.min_x}, min_y={self.min_y}, width={self.width}, height={self.height})"

def snap(x: float, y: float) -> Tuple[int, int]:
    """
    Snaps a position to the nearest grid point.

    Args:
        x (float): The raw x-coordinate.
        y (float): The raw y-coordinate.

    Returns:
        Tuple[int, int]: The coordinates rounded to multiples of
        `conf.GRID_SIZE`, with exact halves rounded up.
    """
    snapped_x = math.floor(x / conf.GRID_SIZE + 0.5) * conf.GRID_SIZE
    snapped_y = math.floor(y / conf.GRID_SIZE + 0.5) * conf.GRID_SIZE
    return int(snapped_x), int(snapped_y)

def compute_bounds(nodes: Iterable[Node]) -> Bounds:
    """
    Calculates the smallest box containing every node's rectangle.

    Returns:
        Bounds: The enclosing box, or a zero-area box at the origin if
        there are no nodes.
    """
    nodes = list(nodes)
    if not nodes:
        return Bounds(0, 0, 0, 0)

    min_x = min(node.x for node in nodes)
    min_y = min(node.y for node in nodes)
    max_x = max(node.right for node in nodes)
    max_y = max(node.bottom for node in nodes)
    return Bounds(min_x, min_y, max_x - min_x, max_y - min_y)

def center_diagram(graph: ProcessGraph,
                   router: ConnectionRouter,
                   canvas_width: int,
                   canvas_height: int,
                   padding: int = conf.CENTER_PADDING,
                   log_func: Optional[Callable[[str], None]] = None
                   ) -> Tuple[int, int]:
    """
    Shifts every node so the diagram sits centered on the canvas.

    The target top-left never comes closer than `padding` to the canvas
    edge, so a diagram larger than the canvas is pinned to the top-left
    padding instead. Offsets are integers, which makes a second call with
    no mutation in between a no-op.

    Args:
        graph (ProcessGraph): The graph to move.
        router (ConnectionRouter): Recomputes connection geometry afterwards.
        canvas_width (int): The width of the canvas.
        canvas_height (int): The height of the canvas.
        padding (int, optional): The minimum gap to the canvas edge.
        log_func (Callable[[str], None], optional): A function for logging.

    Returns:
        Tuple[int, int]: The (dx, dy) offset that was applied.
    """
    bounds = compute_bounds(graph.nodes)
    if bounds.is_empty():
        return 0, 0

    target_x = max(padding, (int(canvas_width) - bounds.width) // 2)
    target_y = max(padding, (int(canvas_height) - bounds.height) // 2)
    dx = target_x - bounds.min_x
    dy = target_y - bounds.min_y

    if dx or dy:
        for node in graph.nodes:
            node.translate(dx, dy)
            router.view.show_node(node)
    router.recompute_all()

    if log_func:
        log_func(conf.UI.Log.DIAGRAM_CENTERED.format(dx=dx, dy=dy))
    return dx, dy
