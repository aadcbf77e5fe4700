# -*- coding: utf-8 -*-
"""
A Qt5 rendering surface and editor window for the process designer.

This module provides the following classes:
- `NodeShape`: A draggable step box or logic diamond with a text label.
- `ArrowShape`: A clickable straight arrow between two nodes.
- `DiagramScene`: A QGraphicsScene with a grid background that reports
  clicks and drags of its shapes.
- `QtRenderingSurface`: The `RenderingSurface` implementation over a `DiagramScene`.
- `StatusBarNotificationSink`: Shows notifications in a window's status bar.
- `ProcessEditorWindow`: A QMainWindow hosting the editor and its controls.
"""

import html
import math
from typing import Any, Callable, Optional, Tuple

from PyQt5.QtCore import QPointF, QRectF, QLineF, Qt, pyqtSignal
from PyQt5.QtGui import (
    QBrush, QColor, QFont, QKeyEvent, QPainter, QPainterPath, QPainterPathStroker, QPen, QPolygonF
)
from PyQt5.QtWidgets import (
    QApplication, QComboBox, QGraphicsItem, QGraphicsPathItem, QGraphicsScene, QGraphicsSceneMouseEvent,
    QGraphicsTextItem, QGraphicsView, QInputDialog, QLineEdit, QMainWindow, QStatusBar, QWidget
)

import process_designer.conf as conf
from process_designer.backend import NotificationSink, ProcessBackend
from process_designer.editor import ProcessEditor
from process_designer.model import NodeKind
from process_designer.view import ArrowStyle, RenderingSurface

class NodeShape(QGraphicsPathItem):
    """
    A draggable node: a rounded box for steps, a diamond for logic nodes.

    Position changes made by the user are sent to the scene's drag handler,
    which returns the committed (snapped) position.

    Attributes:
        uid (int): The uid of the model node this shape draws.
        kind (NodeKind): The kind of the model node.
        text_item (QGraphicsTextItem): The label.
    """
    def __init__(self, uid: int, kind: NodeKind, width: int, height: int, label: str) -> None:
        super().__init__()
        self.setFlag(QGraphicsItem.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.ItemSendsGeometryChanges, True) # Must be true for itemChange to be called
        self.setZValue(conf.Z_VALUE_NODE)
        self.uid = uid
        self.kind = kind
        self._width = width
        self._height = height
        self._syncing = False # True while the position is being set from the model
        self._press_pos: Optional[QPointF] = None

        path = QPainterPath()
        if kind == NodeKind.LOGIC:
            # Diamond inscribed in the square bounds, corners on the edge midpoints.
            path.addPolygon(QPolygonF([QPointF(width / 2, 0), QPointF(width, height / 2),
                                       QPointF(width / 2, height), QPointF(0, height / 2),
                                       QPointF(width / 2, 0)]))
        else:
            path.addRoundedRect(QRectF(0, 0, width, height), conf.STEP_CORNER_RADIUS, conf.STEP_CORNER_RADIUS)
        self.setPath(path)

        self.text_item = QGraphicsTextItem(self)
        font = QFont()
        font.setPointSize(conf.FONT_SIZE_NODE_LABEL)
        self.text_item.setFont(font)
        self.text_item.setZValue(conf.Z_VALUE_TEXT)
        self.set_label(label)
        self.set_highlight(False)

    def set_label(self, label: str) -> None:
        """Sets the label text and positions it for the node's kind."""
        self.text_item.setPlainText(label)
        if self.kind == NodeKind.LOGIC:
            self.text_item.setDefaultTextColor(QColor(conf.LOGIC_TEXT_COLOR))
            self.text_item.setTextWidth(self._width)
            self.text_item.setHtml(f"<div align='center'>{html.escape(label).replace(chr(10), '<br/>')}</div>")
            text_height = self.text_item.boundingRect().height()
            self.text_item.setPos(0, (self._height - text_height) / 2)
        else:
            self.text_item.setDefaultTextColor(QColor(conf.STEP_TEXT_COLOR))
            self.text_item.setPos(conf.STEP_LABEL_INSET, conf.STEP_LABEL_INSET)

    def set_highlight(self, active: bool) -> None:
        """Switches between the normal and the selected colors."""
        if self.kind == NodeKind.LOGIC:
            fill = conf.LOGIC_ACTIVE_FILL_COLOR if active else conf.LOGIC_FILL_COLOR
            border = conf.LOGIC_ACTIVE_BORDER_COLOR if active else conf.LOGIC_BORDER_COLOR
        else:
            fill = conf.STEP_ACTIVE_FILL_COLOR if active else conf.STEP_FILL_COLOR
            border = conf.STEP_ACTIVE_BORDER_COLOR if active else conf.STEP_BORDER_COLOR
        self.setBrush(QBrush(QColor(fill)))
        self.setPen(QPen(QColor(border), conf.NODE_BORDER_WIDTH))

    def sync_pos(self, x: int, y: int) -> None:
        """Moves the shape to the model position without reporting a drag."""
        if self._syncing or (self.pos().x() == x and self.pos().y() == y):
            return
        self._syncing = True
        try:
            self.setPos(x, y)
        finally:
            self._syncing = False

    def itemChange(self, change: QGraphicsItem.GraphicsItemChange, value: Any) -> Any:
        """
        Routes user drags through the scene's drag handler for snapping.

        Args:
            change (QGraphicsItem.GraphicsItemChange): The type of change.
            value (Any): The new value associated with the change.

        Returns:
            The committed position for position changes, else the base result.
        """
        if change == QGraphicsItem.ItemPositionChange and not self._syncing and self.scene():
            handler = getattr(self.scene(), 'drag_handler', None)
            if handler:
                self._syncing = True
                try:
                    committed = handler(self.uid, value.x(), value.y())
                finally:
                    self._syncing = False
                if committed is not None:
                    return QPointF(*committed)
        return super().itemChange(change, value)

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        self._press_pos = self.pos()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        """Reports a click if the node was released where it was pressed."""
        super().mouseReleaseEvent(event)
        if event.button() == Qt.LeftButton and self._press_pos == self.pos() and self.scene():
            self.scene().nodeClicked.emit(self.uid)
        self._press_pos = None

    def mouseDoubleClickEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if self.scene():
            self.scene().nodeDoubleClicked.emit(self.uid)
        super().mouseDoubleClickEvent(event)

class ArrowShape(QGraphicsPathItem):
    """
    A straight arrow from (x1, y1) to (x2, y2) with a filled head.

    Attributes:
        key (int): The key the view registered the connection under.
        style (ArrowStyle): The current stroke settings.
    """
    def __init__(self, key: int, points: Tuple[float, float, float, float], style: ArrowStyle) -> None:
        super().__init__()
        self.setZValue(conf.Z_VALUE_CONNECTION)
        self.key = key
        self.points = points
        self.style = style
        self.apply_style(style)
        self.set_points(points)

    def set_points(self, points: Tuple[float, float, float, float]) -> None:
        """Rebuilds the line and arrow head for new endpoints."""
        self.points = points
        x1, y1, x2, y2 = points
        path = QPainterPath(QPointF(x1, y1))
        path.lineTo(x2, y2)

        angle = math.atan2(y2 - y1, x2 - x1)
        back_x = x2 - conf.ARROW_POINTER_LENGTH * math.cos(angle)
        back_y = y2 - conf.ARROW_POINTER_LENGTH * math.sin(angle)
        half_width = conf.ARROW_POINTER_WIDTH / 2
        head = QPolygonF([
            QPointF(x2, y2),
            QPointF(back_x + half_width * math.sin(angle), back_y - half_width * math.cos(angle)),
            QPointF(back_x - half_width * math.sin(angle), back_y + half_width * math.cos(angle)),
            QPointF(x2, y2),
        ])
        path.addPolygon(head)
        self.setPath(path)

    def apply_style(self, style: ArrowStyle) -> None:
        self.style = style
        pen = QPen(QColor(style.color), style.width)
        if style.dash:
            # Qt dash patterns are in units of the pen width.
            pen.setDashPattern([length / style.width for length in style.dash])
        self.setPen(pen)
        self.setBrush(QBrush(QColor(style.color)))

    def shape(self) -> QPainterPath:
        """
        Returns a wider path than the drawn one to make the arrow easy to click.

        Returns:
            QPainterPath: The shape of the arrow for hit testing.
        """
        stroker = QPainterPathStroker()
        stroker.setWidth(conf.CONNECTION_CLICKABLE_WIDTH)
        return stroker.createStroke(self.path())

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if event.button() == Qt.LeftButton and self.scene():
            self.scene().connectionClicked.emit(self.key)
            event.accept()
            return
        super().mousePressEvent(event)

class DiagramScene(QGraphicsScene):
    """
    A QGraphicsScene for node and arrow shapes, drawn over a grid.

    Attributes:
        drag_handler (Callable[[int, float, float], Optional[Tuple[int, int]]]):
            Called with (uid, x, y) for every drag step of a node; returns
            the committed position.
    """
    nodeClicked = pyqtSignal(int)
    nodeDoubleClicked = pyqtSignal(int)
    connectionClicked = pyqtSignal(object) # Arrow keys are Python ints that may exceed 32 bits
    deleteRequested = pyqtSignal()

    def __init__(self, width: int = conf.DEFAULT_CANVAS_WIDTH, height: int = conf.DEFAULT_CANVAS_HEIGHT, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setBackgroundBrush(QBrush(Qt.white))
        self.setSceneRect(0, 0, width, height)
        self.drag_handler: Optional[Callable[[int, float, float], Optional[Tuple[int, int]]]] = None

    def drawBackground(self, painter: QPainter, rect: QRectF) -> None:
        """
        Draws a grid in the background of the scene.

        Args:
            painter (QPainter): The painter to use for drawing.
            rect (QRectF): The rectangle defining the area to be redrawn.
        """
        super().drawBackground(painter, rect)

        left = int(rect.left()) - (int(rect.left()) % conf.GRID_SIZE)
        top = int(rect.top()) - (int(rect.top()) % conf.GRID_SIZE)

        lines = []
        for x in range(left, int(rect.right()), conf.GRID_SIZE):
            lines.append(QLineF(x, rect.top(), x, rect.bottom()))
        for y in range(top, int(rect.bottom()), conf.GRID_SIZE):
            lines.append(QLineF(rect.left(), y, rect.right(), y))

        painter.setPen(QPen(QColor(conf.GRID_LINE_COLOR), conf.GRID_LINE_WIDTH))
        painter.drawLines(lines)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Requests deletion of the selection on the Delete key."""
        if event.key() in (Qt.Key_Delete, Qt.Key_Backspace):
            self.deleteRequested.emit()
        super().keyPressEvent(event)

class QtRenderingSurface(RenderingSurface):
    """
    Draws the diagram on a `DiagramScene`.

    Attributes:
        scene (DiagramScene): The scene shapes are added to.
    """
    def __init__(self, scene: DiagramScene) -> None:
        self.scene = scene

    def clear(self) -> None:
        for item in list(self.scene.items()):
            if item.parentItem() is None:
                self.scene.removeItem(item)

    def create_node_shape(self, uid, kind, x, y, width, height, label):
        shape = NodeShape(uid, kind, width, height, label)
        shape.sync_pos(x, y)
        self.scene.addItem(shape)
        return shape

    def move_shape(self, handle, x, y):
        handle.sync_pos(x, y)

    def set_shape_label(self, handle, label):
        handle.set_label(label)

    def set_shape_highlight(self, handle, active):
        handle.set_highlight(active)

    def create_arrow(self, key, points, style):
        arrow = ArrowShape(key, points, style)
        self.scene.addItem(arrow)
        return arrow

    def set_arrow_points(self, handle, points):
        handle.set_points(points)

    def set_arrow_style(self, handle, style):
        handle.apply_style(style)

    def destroy(self, handle):
        if handle.scene() is self.scene:
            self.scene.removeItem(handle)

    def draw(self):
        self.scene.update()

    def batch_draw(self):
        # Qt coalesces update requests until the event loop runs.
        self.scene.update()

    def size(self):
        rect = self.scene.sceneRect()
        return int(rect.width()), int(rect.height())

class StatusBarNotificationSink(NotificationSink):
    """Shows notifications as status bar messages."""
    def __init__(self, status_bar: QStatusBar) -> None:
        self.status_bar = status_bar

    def notify(self, title: str, message: str, variant: str) -> None:
        self.status_bar.showMessage(f"{title}: {message}", conf.STATUS_BAR_TIMEOUT_MS)

class ProcessEditorWindow(QMainWindow):
    """
    The main application window for the process designer.

    Provides a template picker, the process name and description fields,
    the editing actions, and the canvas.
    """
    def __init__(self, backend: ProcessBackend, record_id: Optional[str] = None, enable_logging: bool = True) -> None:
        """
        Initializes the ProcessEditorWindow.

        Args:
            backend (ProcessBackend): The persistence collaborator.
            record_id (str, optional): A template to load for editing on start.
            enable_logging (bool, optional): If True, enables printing log
                messages to the console. Defaults to True.
        """
        super().__init__()
        self.setWindowTitle(conf.UI.MAIN_WINDOW_TITLE)
        self.setGeometry(conf.MAIN_WINDOW_DEFAULT_X, conf.MAIN_WINDOW_DEFAULT_Y, conf.MAIN_WINDOW_DEFAULT_WIDTH, conf.MAIN_WINDOW_DEFAULT_HEIGHT)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.scene = DiagramScene(parent=self)
        self.view = QGraphicsView(self.scene, self)
        self.view.setRenderHint(QPainter.Antialiasing)
        self.setCentralWidget(self.view)

        self.editor = ProcessEditor(QtRenderingSurface(self.scene), backend,
                                    notifier=StatusBarNotificationSink(self.status_bar),
                                    enable_logging=enable_logging)

        self.scene.drag_handler = self.editor.on_drag_move
        self.scene.nodeClicked.connect(self.editor.on_node_click)
        self.scene.nodeDoubleClicked.connect(self.edit_logic)
        self.scene.connectionClicked.connect(self.editor.on_connection_click)
        self.scene.deleteRequested.connect(self.editor.delete_selected)

        self._create_toolbar()
        self.refresh_templates()

        if record_id:
            self.load_template(record_id)

    def _create_toolbar(self) -> None:
        """Creates the toolbar with the template picker, fields and actions."""
        toolbar = self.addToolBar(conf.UI.Menu.TOOLBAR_ACTIONS)
        toolbar.setMovable(False)

        self.template_combo = QComboBox(self)
        self.template_combo.currentIndexChanged.connect(self._on_template_changed)
        toolbar.addWidget(self.template_combo)

        self.name_edit = QLineEdit(self)
        self.name_edit.setPlaceholderText(conf.UI.Menu.PROCESS_NAME_PLACEHOLDER)
        self.name_edit.textChanged.connect(self._on_name_changed)
        toolbar.addWidget(self.name_edit)

        self.steps_edit = QLineEdit(self)
        self.steps_edit.setPlaceholderText(conf.UI.Menu.STEPS_TO_COMPLETE_PLACEHOLDER)
        self.steps_edit.textChanged.connect(self._on_steps_changed)
        toolbar.addWidget(self.steps_edit)

        toolbar.addSeparator()
        toolbar.addAction(conf.UI.Menu.ADD_STEP, self.editor.add_step)
        toolbar.addAction(conf.UI.Menu.ADD_LOGIC, self.editor.add_logic)
        toolbar.addAction(conf.UI.Menu.DELETE_SELECTED, self.editor.delete_selected)
        toolbar.addAction(conf.UI.Menu.CENTER_DIAGRAM, self.editor.center_diagram)
        toolbar.addAction(conf.UI.Menu.EDIT_STEPS, self.edit_steps_to_complete)
        toolbar.addAction(conf.UI.Menu.PRINT_DIAGRAM, self.editor.dump_diagram)
        toolbar.addAction(conf.UI.Menu.SAVE_PROCESS, self.editor.save_process)

    def refresh_templates(self) -> None:
        """Reloads the catalog into the template picker."""
        self.editor.refresh_templates()
        self.template_combo.blockSignals(True)
        self.template_combo.clear()
        self.template_combo.addItem(conf.UI.Menu.TEMPLATE_PLACEHOLDER, None)
        for label, value in self.editor.template_options():
            self.template_combo.addItem(label, value)
        self.template_combo.blockSignals(False)

    def load_template(self, template_id: str) -> None:
        """Loads a template and mirrors its name and description into the fields."""
        if self.editor.load_template(template_id):
            self.name_edit.setText(self.editor.process_name)
            self.steps_edit.setText(self.editor.steps_to_complete)

    def _on_template_changed(self, index: int) -> None:
        self.editor.select_template(self.template_combo.itemData(index))

    def _on_name_changed(self, text: str) -> None:
        self.editor.process_name = text

    def _on_steps_changed(self, text: str) -> None:
        self.editor.steps_to_complete = text

    def edit_logic(self, uid: int) -> None:
        """Prompts for a new condition when a logic node is double-clicked."""
        node = self.editor.on_node_double_click(uid)
        if node is None:
            return
        allowed, condition = self.editor.logic_edit_context(node)
        text, ok = QInputDialog.getText(self, conf.UI.Dialog.EDIT_LOGIC_TITLE,
                                        conf.UI.Dialog.EDIT_LOGIC_LABEL.format(allowed=', '.join(str(n) for n in allowed)),
                                        QLineEdit.Normal, condition)
        if ok:
            self.editor.edit_logic_condition(node, text)

    def edit_steps_to_complete(self) -> None:
        """Prompts for the steps-to-complete text of the selected step's template."""
        context = self.editor.edit_steps_for_selected()
        if context is None:
            return
        template_id, current = context
        text, ok = QInputDialog.getMultiLineText(self, conf.UI.Dialog.EDIT_STEPS_TITLE,
                                                 conf.UI.Dialog.EDIT_STEPS_LABEL, current)
        if ok:
            self.editor.save_steps_to_complete(template_id, text)

    def start(self) -> int:
        """
        Shows the window and starts the Qt application event loop.

        Returns:
            int: The exit status from the application.
        """
        app = QApplication.instance()
        if not app:
            raise RuntimeError(conf.UI.Error.QAPP_INSTANCE_REQUIRED)

        self.show()
        return app.exec_()
