# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
WAI-ARIA Authoring Practices widget catalogue.

Each entry lists the roles, attributes and keys a widget needs, plus the
focus behaviour the APG describes for it. The tables here are pure data;
the checks that consume them live in widget_validator.py.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

APG_BASE_URL = "https://www.w3.org/WAI/ARIA/apg/patterns"


@dataclass(frozen=True)
class WidgetPatternDefinition:
    """Requirements of one APG widget pattern."""

    id: str
    name: str
    description: str
    url: str
    required_roles: Tuple[str, ...] = ()
    recommended_roles: Tuple[str, ...] = ()
    required_attributes: Tuple[str, ...] = ()
    recommended_attributes: Tuple[str, ...] = ()
    required_keys: Tuple[str, ...] = ()
    recommended_keys: Tuple[str, ...] = ()
    focus_requirements: Tuple[str, ...] = field(default=())

    def to_documentation(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "requiredRoles": list(self.required_roles),
            "recommendedRoles": list(self.recommended_roles),
            "requiredAttributes": list(self.required_attributes),
            "recommendedAttributes": list(self.recommended_attributes),
            "requiredKeys": list(self.required_keys),
            "recommendedKeys": list(self.recommended_keys),
            "focusRequirements": list(self.focus_requirements),
        }


def _apg(slug: str) -> str:
    return f"{APG_BASE_URL}/{slug}/"


ARROW_KEYS = ("ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight")
DIALOG_FOCUS = (
    "Focus moves to element inside dialog on open",
    "Focus trapped within dialog",
    "Escape closes dialog",
    "Focus returns to trigger on close",
)

_DEFINITIONS = (
    WidgetPatternDefinition(
        id="accordion",
        name="Accordion",
        description="A vertically stacked set of interactive headings that each reveal a section of content",
        url=_apg("accordion"),
        recommended_roles=("region",),
        required_attributes=("aria-expanded", "aria-controls"),
        recommended_attributes=("aria-labelledby",),
        required_keys=("Enter", "Space"),
        recommended_keys=("ArrowDown", "ArrowUp", "Home", "End"),
        focus_requirements=("Headers must be focusable (button or tabindex)",),
    ),
    WidgetPatternDefinition(
        id="alertdialog",
        name="Alert Dialog",
        description="A modal dialog that interrupts the workflow to communicate an important message",
        url=_apg("alertdialog"),
        required_roles=("alertdialog",),
        required_attributes=("aria-labelledby", "aria-describedby"),
        recommended_attributes=("aria-modal",),
        required_keys=("Tab", "Escape"),
        focus_requirements=DIALOG_FOCUS,
    ),
    WidgetPatternDefinition(
        id="button",
        name="Button",
        description="A widget that enables users to trigger an action or event",
        url=_apg("button"),
        recommended_roles=("button",),
        recommended_attributes=("aria-pressed", "aria-expanded"),
        required_keys=("Enter", "Space"),
        focus_requirements=("Must be focusable",),
    ),
    WidgetPatternDefinition(
        id="checkbox",
        name="Checkbox",
        description="A checkable input with checked, unchecked and optionally mixed states",
        url=_apg("checkbox"),
        required_roles=("checkbox",),
        required_attributes=("aria-checked",),
        recommended_attributes=("aria-labelledby",),
        required_keys=("Space",),
        focus_requirements=("Must be focusable",),
    ),
    WidgetPatternDefinition(
        id="combobox",
        name="Combobox",
        description="An input widget with an associated popup that helps set its value",
        url=_apg("combobox"),
        required_roles=("combobox", "listbox"),
        recommended_roles=("option",),
        required_attributes=("aria-controls", "aria-expanded"),
        recommended_attributes=("aria-activedescendant", "aria-autocomplete", "aria-haspopup"),
        required_keys=("ArrowDown", "ArrowUp", "Enter", "Escape"),
        recommended_keys=("Home", "End", "PageDown", "PageUp"),
        focus_requirements=(
            "DOM focus stays on the combobox input",
            "aria-activedescendant tracks the active option",
            "Escape closes the popup and keeps focus on the input",
        ),
    ),
    WidgetPatternDefinition(
        id="dialog",
        name="Dialog (Modal)",
        description="A window overlaid on the primary content that renders the content underneath inert",
        url=_apg("dialog-modal"),
        required_roles=("dialog",),
        required_attributes=("aria-labelledby",),
        recommended_attributes=("aria-modal", "aria-describedby"),
        required_keys=("Tab", "Escape"),
        focus_requirements=DIALOG_FOCUS,
    ),
    WidgetPatternDefinition(
        id="disclosure",
        name="Disclosure",
        description="A button that controls the visibility of a section of content",
        url=_apg("disclosure"),
        recommended_roles=("button",),
        required_attributes=("aria-expanded", "aria-controls"),
        required_keys=("Enter", "Space"),
        focus_requirements=("Trigger must be focusable",),
    ),
    WidgetPatternDefinition(
        id="grid",
        name="Grid",
        description="A container that enables navigation of its cells with directional keys",
        url=_apg("grid"),
        required_roles=("grid", "row", "gridcell"),
        recommended_roles=("rowheader", "columnheader"),
        recommended_attributes=("aria-rowcount", "aria-colcount", "aria-rowindex", "aria-colindex"),
        required_keys=ARROW_KEYS,
        recommended_keys=("Home", "End", "PageDown", "PageUp", "Enter"),
        focus_requirements=(
            "Only one cell is in the tab sequence",
            "Arrow keys move focus between cells",
            "Focus is visible on the active cell",
        ),
    ),
    WidgetPatternDefinition(
        id="listbox",
        name="Listbox",
        description="A list of options from which the user may select one or more items",
        url=_apg("listbox"),
        required_roles=("listbox", "option"),
        required_attributes=("aria-selected",),
        recommended_attributes=("aria-multiselectable", "aria-activedescendant"),
        required_keys=("ArrowDown", "ArrowUp"),
        recommended_keys=("Home", "End", "PageDown", "PageUp", "Space"),
        focus_requirements=(
            "Focus moves to the selected option or the first option",
            "Arrow keys move focus between options",
        ),
    ),
    WidgetPatternDefinition(
        id="menu",
        name="Menu",
        description="A widget offering a list of actions or functions",
        url=_apg("menu"),
        required_roles=("menu", "menuitem"),
        recommended_roles=("menuitemcheckbox", "menuitemradio"),
        recommended_attributes=("aria-haspopup", "aria-expanded", "aria-checked"),
        required_keys=("ArrowDown", "ArrowUp", "Enter", "Escape"),
        recommended_keys=("ArrowRight", "ArrowLeft", "Home", "End"),
        focus_requirements=(
            "Focus moves to the first item when the menu opens",
            "Escape closes the menu and returns focus to the trigger",
        ),
    ),
    WidgetPatternDefinition(
        id="menubutton",
        name="Menu Button",
        description="A button that opens a menu",
        url=_apg("menubutton"),
        required_roles=("menu", "menuitem"),
        recommended_roles=("button",),
        required_attributes=("aria-haspopup", "aria-expanded"),
        recommended_attributes=("aria-controls",),
        required_keys=("Enter", "Space", "ArrowDown", "Escape"),
        recommended_keys=("ArrowUp",),
        focus_requirements=(
            "Opening the menu moves focus to a menu item",
            "Closing the menu returns focus to the button",
        ),
    ),
    WidgetPatternDefinition(
        id="radiogroup",
        name="Radio Group",
        description="A set of checkable buttons where only one can be checked at a time",
        url=_apg("radio"),
        required_roles=("radiogroup", "radio"),
        required_attributes=("aria-checked",),
        recommended_attributes=("aria-labelledby",),
        required_keys=ARROW_KEYS,
        recommended_keys=("Space",),
        focus_requirements=(
            "Focus moves to the checked radio button",
            "Arrow keys move focus and check the next radio button",
        ),
    ),
    WidgetPatternDefinition(
        id="slider",
        name="Slider",
        description="An input where the user selects a value from within a given range",
        url=_apg("slider"),
        required_roles=("slider",),
        required_attributes=("aria-valuenow", "aria-valuemin", "aria-valuemax"),
        recommended_attributes=("aria-valuetext", "aria-label", "aria-labelledby"),
        required_keys=("ArrowRight", "ArrowLeft", "ArrowUp", "ArrowDown"),
        recommended_keys=("Home", "End", "PageUp", "PageDown"),
        focus_requirements=("Thumb must be focusable",),
    ),
    WidgetPatternDefinition(
        id="spinbutton",
        name="Spinbutton",
        description="An input restricting its value to a set or range of discrete values",
        url=_apg("spinbutton"),
        required_roles=("spinbutton",),
        required_attributes=("aria-valuenow", "aria-valuemin", "aria-valuemax"),
        recommended_attributes=("aria-valuetext",),
        required_keys=("ArrowUp", "ArrowDown"),
        recommended_keys=("Home", "End", "PageUp", "PageDown"),
        focus_requirements=("Focus stays on the text field",),
    ),
    WidgetPatternDefinition(
        id="switch",
        name="Switch",
        description="An input representing an on or off value",
        url=_apg("switch"),
        required_roles=("switch",),
        required_attributes=("aria-checked",),
        recommended_attributes=("aria-labelledby",),
        required_keys=("Space",),
        recommended_keys=("Enter",),
        focus_requirements=("Must be focusable",),
    ),
    WidgetPatternDefinition(
        id="tabs",
        name="Tabs",
        description="A set of layered sections of content known as tab panels",
        url=_apg("tabs"),
        required_roles=("tablist", "tab", "tabpanel"),
        required_attributes=("aria-selected", "aria-controls"),
        recommended_attributes=("aria-labelledby",),
        required_keys=("ArrowRight", "ArrowLeft"),
        recommended_keys=("Home", "End", "ArrowDown", "ArrowUp"),
        focus_requirements=(
            "Only the active tab is in the tab sequence",
            "Arrow keys move focus between tabs",
        ),
    ),
    WidgetPatternDefinition(
        id="toolbar",
        name="Toolbar",
        description="A container grouping a set of controls",
        url=_apg("toolbar"),
        required_roles=("toolbar",),
        recommended_roles=("button", "separator"),
        recommended_attributes=("aria-label", "aria-labelledby", "aria-controls"),
        required_keys=("ArrowRight", "ArrowLeft"),
        recommended_keys=("Home", "End", "Tab"),
        focus_requirements=(
            "Only one control is in the tab sequence",
            "Arrow keys move focus between controls",
        ),
    ),
    WidgetPatternDefinition(
        id="tooltip",
        name="Tooltip",
        description="A popup that displays information related to an element on focus or hover",
        url=_apg("tooltip"),
        required_roles=("tooltip",),
        required_attributes=("aria-describedby",),
        required_keys=("Escape",),
        focus_requirements=("Tooltip appears on focus", "Escape dismisses tooltip"),
    ),
    WidgetPatternDefinition(
        id="treeview",
        name="Tree View",
        description="A hierarchical list whose items may have nested child items",
        url=_apg("treeview"),
        required_roles=("tree", "treeitem"),
        recommended_roles=("group",),
        required_attributes=("aria-expanded",),
        recommended_attributes=("aria-selected", "aria-level", "aria-setsize", "aria-posinset"),
        required_keys=ARROW_KEYS + ("Enter",),
        recommended_keys=("Home", "End", "Space"),
        focus_requirements=(
            "One item focusable at a time",
            "Arrow down/up move between visible items",
            "Arrow right expands or moves to first child",
            "Arrow left collapses or moves to parent",
        ),
    ),
)

WIDGET_PATTERNS: Dict[str, WidgetPatternDefinition] = {d.id: d for d in _DEFINITIONS}

ROLE_TO_PATTERN = {
    "dialog": "dialog",
    "alertdialog": "alertdialog",
    "menu": "menu",
    "menubar": "menu",
    "menuitem": "menu",
    "menuitemcheckbox": "menu",
    "menuitemradio": "menu",
    "tablist": "tabs",
    "tab": "tabs",
    "tabpanel": "tabs",
    "listbox": "listbox",
    "option": "listbox",
    "combobox": "combobox",
    "tree": "treeview",
    "treeitem": "treeview",
    "grid": "grid",
    "gridcell": "grid",
    "row": "grid",
    "slider": "slider",
    "spinbutton": "spinbutton",
    "checkbox": "checkbox",
    "switch": "switch",
    "radiogroup": "radiogroup",
    "radio": "radiogroup",
    "toolbar": "toolbar",
    "tooltip": "tooltip",
}

# ARIAAnalyzer widgetPatterns types
WIDGET_TYPE_TO_PATTERN = {
    "tabs": "tabs",
    "dialog": "dialog",
    "alertdialog": "alertdialog",
    "menu": "menu",
    "listbox": "listbox",
    "combobox": "combobox",
    "tree": "treeview",
    "grid": "grid",
}

KEY_NORMALIZATION = {
    " ": "Space",
    "Spacebar": "Space",
    "Esc": "Escape",
    "Up": "ArrowUp",
    "Down": "ArrowDown",
    "Left": "ArrowLeft",
    "Right": "ArrowRight",
}

# Legacy keyCode values
KEY_CODE_NAMES = {
    9: "Tab",
    13: "Enter",
    27: "Escape",
    32: "Space",
    33: "PageUp",
    34: "PageDown",
    35: "End",
    36: "Home",
    37: "ArrowLeft",
    38: "ArrowUp",
    39: "ArrowRight",
    40: "ArrowDown",
}


def normalize_key(key: Any) -> Any:
    """Canonical key name used when comparing detected keys with the catalogue."""
    if isinstance(key, bool):
        return key
    if isinstance(key, float) and key.is_integer():
        key = int(key)
    if isinstance(key, int):
        return KEY_CODE_NAMES.get(key, key)
    return KEY_NORMALIZATION.get(key, key)


def pattern_for_role(role: Any) -> Optional[str]:
    return ROLE_TO_PATTERN.get(role) if isinstance(role, str) else None


def pattern_for_widget_type(widget_type: Any) -> Optional[str]:
    return WIDGET_TYPE_TO_PATTERN.get(widget_type) if isinstance(widget_type, str) else None
