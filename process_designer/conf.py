# -*- coding: utf-8 -*-
"""
Configuration file for the process template designer.

This file contains all the constants used throughout the application,
including geometry, colors, payload keys, and UI strings. Colors are kept
as plain strings so the headless core never has to import a GUI toolkit;
the Qt surface converts them when it draws.
"""

# --- Version ---
__version__ = '0.1.0'

# --- Grid & Canvas ---
GRID_SIZE = 20
GRID_LINE_COLOR = '#eeeeee'
GRID_LINE_WIDTH = 1
DEFAULT_CANVAS_WIDTH = 1000
DEFAULT_CANVAS_HEIGHT = 600
CENTER_PADDING = 24 # Minimum gap between the centered diagram and the canvas edge

# --- Node Dimensions ---
STEP_WIDTH = 140
STEP_HEIGHT = 70
LOGIC_WIDTH = 140
LOGIC_HEIGHT = 140 # Diamond bounds are square

# --- Default Placement ---
# New steps stack vertically in a single column.
STEP_DEFAULT_X = 50
STEP_DEFAULT_Y = 10
STEP_DEFAULT_SPACING_Y = 100
# New logic nodes stack in a second column to the right of the steps.
LOGIC_DEFAULT_X = 200
LOGIC_DEFAULT_Y = 100
LOGIC_DEFAULT_SPACING_Y = 80

# --- Logic Insertion ---
LOGIC_INSERT_OFFSET_X = LOGIC_WIDTH // 2 # Centers the diamond under its predecessor
LOGIC_INSERT_GAP_Y = 40 # Vertical gap between the predecessor's bottom edge and the diamond
LOGIC_REFLOW_SHIFT_Y = 200 # Diamond height (140) plus padding

# --- Node Colors ---
STEP_FILL_COLOR = '#0070d2'
STEP_BORDER_COLOR = 'black'
STEP_ACTIVE_FILL_COLOR = '#28a745'
STEP_ACTIVE_BORDER_COLOR = 'darkgreen'
STEP_TEXT_COLOR = 'white'
STEP_CORNER_RADIUS = 8
STEP_LABEL_INSET = 10
LOGIC_FILL_COLOR = '#ffa500'
LOGIC_BORDER_COLOR = 'black'
LOGIC_ACTIVE_FILL_COLOR = 'green'
LOGIC_ACTIVE_BORDER_COLOR = 'darkgreen'
LOGIC_TEXT_COLOR = 'black'
NODE_BORDER_WIDTH = 2
FONT_SIZE_NODE_LABEL = 14

# --- Connections ---
CONNECTION_COLOR_DEFAULT = 'black' # Unconditional flow
CONNECTION_COLOR_LOGIC = 'green' # Flow mediated by a logic node
CONNECTION_COLOR_SELECTED = 'red'
CONNECTION_WIDTH_NORMAL = 2
CONNECTION_WIDTH_SELECTED = 4
CONNECTION_DASH_SELECTED = (10, 5)
CONNECTION_CLICKABLE_WIDTH = 10 # Width of the clickable area around an arrow
ARROW_POINTER_LENGTH = 10
ARROW_POINTER_WIDTH = 10

# --- Z-Values (Layering) ---
Z_VALUE_CONNECTION = 1
Z_VALUE_NODE = 2
Z_VALUE_TEXT = 3

# --- Main Window ---
MAIN_WINDOW_DEFAULT_X = 100
MAIN_WINDOW_DEFAULT_Y = 100
MAIN_WINDOW_DEFAULT_WIDTH = 1200
MAIN_WINDOW_DEFAULT_HEIGHT = 800
STATUS_BAR_TIMEOUT_MS = 5000

class Key:
    """Symbolic constants for dictionary keys exchanged with the template backend."""
    # Template catalog entries
    TEMPLATE_ID = "id"
    TEMPLATE_NAME = "name"
    TEMPLATE_STEPS_TO_COMPLETE = "stepsToComplete"
    # Template and payload header
    PROCESS_NAME = "processName"
    STEPS_TO_COMPLETE = "stepsToComplete"
    TEMPLATE_REF = "templateId"
    STEPS = "steps"
    CONNECTIONS = "connections"
    # Node entries
    ID = "id"
    X = "x"
    Y = "y"
    LABEL = "label"
    TYPE = "type"
    STEP_NUMBER = "stepNumber"
    STEP_TEMPLATE_ID = "templateId"
    IN_PROGRESS_REQUIREMENT = "inProgressRequirement"
    CUSTOM_LOGIC = "customLogic"
    CONDITION = "condition"
    # Connection entries
    FROM_STEP = "fromStep"
    TO_STEP = "toStep"
    TO_TEMPLATE_ID = "toTemplateId"
    # Diagram dump
    DUMP_FROM = "from"
    DUMP_TO = "to"

class Value:
    """Literal values that appear in persisted templates."""
    TYPE_STEP = "step"
    TYPE_LOGIC = "logic"
    REQUIREMENT_CUSTOM_LOGIC = "Custom Logic"
    REQUIREMENT_PREVIOUS_STEP = "Previous Step Completed"

class Format:
    """Format strings for derived node ids and labels."""
    STEP_ID = "step-{step_number}__template-{template_id}"
    LOGIC_ID = "logic-{number}"
    LOGIC_FOR_ID = "logic-for-{target_id}"
    STEP_LABEL = "Step {step_number}\n{template_name}"
    LOGIC_LABEL = "Logic {number}"
    LOGIC_EDITED_LABEL = "Logic\n{condition}"

class UI:
    """A container for all UI-related strings, organized by context."""
    MAIN_WINDOW_TITLE = "Process Template Designer"

    class Menu:
        """Strings used in toolbars and context menus."""
        TOOLBAR_ACTIONS = "Actions"
        ADD_STEP = "Add Step"
        ADD_LOGIC = "Add Logic"
        DELETE_SELECTED = "Delete Selected"
        CENTER_DIAGRAM = "Center Diagram"
        SAVE_PROCESS = "Save Process"
        EDIT_STEPS = "Edit Steps to Complete"
        PRINT_DIAGRAM = "Print Diagram"
        TEMPLATE_PLACEHOLDER = "Select a template"
        PROCESS_NAME_PLACEHOLDER = "Process name"
        STEPS_TO_COMPLETE_PLACEHOLDER = "Steps to complete"

    class Dialog:
        """Strings used in input dialogs."""
        EDIT_LOGIC_TITLE = "Edit Logic"
        EDIT_LOGIC_LABEL = "Condition (allowed steps: {allowed}):"
        EDIT_STEPS_TITLE = "Steps to Complete"
        EDIT_STEPS_LABEL = "Enter the steps to complete:"

    class Notify:
        """Titles, variants and messages sent to the notification sink."""
        TITLE_SUCCESS = "Success"
        TITLE_ERROR = "Error"
        VARIANT_SUCCESS = "success"
        VARIANT_ERROR = "error"
        MISSING_PROCESS_NAME = "Please enter a process name."
        MISSING_STEPS_TO_COMPLETE = "Please enter steps to complete."
        DISCONNECTED_STEPS = "You must connect all steps"
        INVALID_LOGIC_STEPS = "Invalid step(s) used: {steps}"
        PROCESS_SAVED = "Process saved successfully."
        SAVE_FAILED = "Save failed"
        LOAD_FAILED = "Failed to load process for editing."
        TEMPLATE_REQUIRED = "Please select a template before adding a step."
        STEPS_UPDATED = "Steps to Complete updated."
        STEPS_UPDATE_FAILED = "Save failed."
        CATALOG_LOAD_FAILED = "Failed to load templates."

    class Log:
        """Strings used for logging messages to the console."""
        STEP_ADDED = "Added step '{node_id}' at ({x}, {y})."
        LOGIC_ADDED = "Added logic node '{node_id}' at ({x}, {y})."
        NODE_REMOVED = "Removed node '{node_id}' and {edge_count} connection(s)."
        STEPS_RENUMBERED = "Renumbered {count} step(s)."
        CONNECTION_ADDED = "Connection added from '{from_id}' to '{to_id}' ({color})."
        CONNECTION_REMOVED = "Connection removed from '{from_id}' to '{to_id}'."
        CONNECTION_EXISTS = "Connection from '{from_id}' to '{to_id}' already exists."
        NODE_SELECTED = "Selected node '{node_id}'."
        NODE_DESELECTED = "Deselected node '{node_id}'."
        CONNECTION_SELECTED = "Selected connection '{from_id}' -> '{to_id}'."
        CONNECTION_DESELECTED = "Deselected connection '{from_id}' -> '{to_id}'."
        NOTHING_TO_DELETE = "Nothing selected to delete."
        DIAGRAM_CENTERED = "Diagram centered with offset ({dx}, {dy})."
        TEMPLATE_LOADING = "Loading template '{template_id}' for editing..."
        TEMPLATE_LOADED = "Loaded template '{template_id}': {step_count} step(s), {connection_count} connection(s)."
        TEMPLATE_LOAD_FAILED = "Failed to load template data: {error}"
        CONNECTION_SKIPPED = "Skipping connection '{from_id}' -> '{to_id}': unknown node."
        LOGIC_INSERTED = "Inserted logic node '{node_id}' before '{target_id}', shifted {count} node(s) down by {shift}."
        CATALOG_LOADED = "Loaded {count} template(s) from the catalog."
        CATALOG_LOAD_FAILED = "Failed to load templates: {error}"
        TEMPLATE_SELECTED = "Template '{template_id}' selected for new steps."
        SAVE_VALIDATION_FAILED = "Save aborted: {error}"
        SENDING_PAYLOAD = "Sending payload: {payload}"
        SAVE_SUCCEEDED = "Process saved as template '{template_id}'."
        SAVE_FAILED = "Error saving process: {error}"
        LOGIC_CONDITION_UPDATED = "Logic node '{node_id}' condition set to '{condition}'."
        STEPS_UPDATING = "Updating steps to complete for template '{template_id}'."
        STEPS_UPDATE_FAILED = "Error saving steps to complete: {error}"
        DIAGRAM_DUMP = "Diagram: {dump}"

    class Error:
        """Messages carried by raised exceptions."""
        DUPLICATE_NODE_ID = "A node with id '{node_id}' already exists."
        NODE_NOT_FOUND = "No node with id '{node_id}' in the diagram."
        DUPLICATE_CONNECTION = "A connection from '{from_id}' to '{to_id}' already exists."
        MISSING_PROCESS_NAME = "A process name is required."
        MISSING_STEPS_TO_COMPLETE = "A steps to complete description is required."
        DISCONNECTED_NODES = "Every node must be connected; disconnected: {node_ids}"
        INVALID_LOGIC_STEPS = "Condition references step(s) not feeding this logic node: {steps}"
        MALFORMED_TEMPLATE = "Malformed template data: {detail}"
        BACKEND_FAILURE = "Backend call failed: {error}"
        SURFACE_INVALID = "A rendering surface must implement '{method}'."
        NOT_IMPLEMENTED_ERROR_SUBCLASS = "Subclasses must implement this method."
        QAPP_INSTANCE_REQUIRED = "A QApplication instance must be created before calling start()."
