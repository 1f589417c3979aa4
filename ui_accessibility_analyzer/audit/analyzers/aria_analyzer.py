# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""
ARIA usage analysis.

Detects ``aria-*`` attribute writes, removals and reads, ARIA IDL property
assignment (``el.ariaLabel = ...``) and ``role`` changes; validates roles and
per-role required attributes against the WAI-ARIA 1.2 tables below; and
recognizes tab, dialog, menu, live-region and labeling compositions.
"""

import re
from typing import Any, Dict, Optional

from ui_accessibility_analyzer.audit.base_analyzer import (
    BaseAnalyzer,
    CancellationToken,
    TraversalContext,
    count_into,
    element_reference,
    location_of,
    safe_check,
    walk,
)
from ui_accessibility_analyzer.tree.action_tree import ActionNode, ActionTree
from ui_accessibility_analyzer.tree.node_views import AssignView, CallView, literal_value
from ui_accessibility_analyzer.utils.logging_helper import setup_logger

logger = setup_logger(__name__)

VALID_ROLES = frozenset(
    [
        # Widget roles
        "button", "checkbox", "gridcell", "link", "menuitem", "menuitemcheckbox",
        "menuitemradio", "option", "progressbar", "radio", "scrollbar", "searchbox",
        "separator", "slider", "spinbutton", "switch", "tab", "tabpanel", "textbox",
        "treeitem",
        # Composite roles
        "combobox", "grid", "listbox", "menu", "menubar", "radiogroup", "tablist",
        "tree", "treegrid",
        # Document structure roles
        "application", "article", "blockquote", "caption", "cell", "columnheader",
        "definition", "deletion", "directory", "document", "emphasis", "feed",
        "figure", "generic", "group", "heading", "img", "insertion", "list",
        "listitem", "math", "meter", "none", "note", "paragraph", "presentation",
        "row", "rowgroup", "rowheader", "strong", "subscript", "superscript",
        "table", "term", "time", "toolbar", "tooltip",
        # Landmark roles
        "banner", "complementary", "contentinfo", "form", "main", "navigation",
        "region", "search",
        # Live region roles
        "alert", "log", "marquee", "status", "timer",
        # Window roles
        "alertdialog", "dialog",
    ]
)

INTERACTIVE_ROLES = frozenset(
    [
        "button", "checkbox", "gridcell", "link", "menuitem", "menuitemcheckbox",
        "menuitemradio", "option", "radio", "scrollbar", "searchbox", "slider",
        "spinbutton", "switch", "tab", "textbox", "treeitem", "combobox", "grid",
        "listbox", "menu", "menubar", "radiogroup", "tablist", "tree", "treegrid",
        "application",
    ]
)

REQUIRED_ATTRIBUTES = {
    "checkbox": ["aria-checked"],
    "combobox": ["aria-controls", "aria-expanded"],
    "meter": ["aria-valuenow"],
    "menuitemcheckbox": ["aria-checked"],
    "menuitemradio": ["aria-checked"],
    "option": ["aria-selected"],
    "radio": ["aria-checked"],
    "scrollbar": ["aria-controls", "aria-valuenow", "aria-valuemin", "aria-valuemax", "aria-orientation"],
    "slider": ["aria-valuenow", "aria-valuemin", "aria-valuemax"],
    "spinbutton": ["aria-valuenow", "aria-valuemin", "aria-valuemax"],
    "switch": ["aria-checked"],
    "tab": ["aria-selected"],
    "heading": ["aria-level"],
    "separator": ["aria-valuenow", "aria-valuemin", "aria-valuemax"],
    "tabpanel": ["aria-labelledby"],
    "rowheader": ["aria-sort"],
    "columnheader": ["aria-sort"],
}

ARIA_STATES = frozenset(
    [
        "aria-busy", "aria-checked", "aria-current", "aria-disabled", "aria-expanded",
        "aria-grabbed", "aria-hidden", "aria-invalid", "aria-pressed", "aria-selected",
    ]
)

ARIA_PROPERTIES = frozenset(
    [
        "aria-activedescendant", "aria-atomic", "aria-autocomplete", "aria-colcount",
        "aria-colindex", "aria-colspan", "aria-controls", "aria-describedby",
        "aria-details", "aria-dropeffect", "aria-errormessage", "aria-flowto",
        "aria-haspopup", "aria-keyshortcuts", "aria-label", "aria-labelledby",
        "aria-level", "aria-live", "aria-modal", "aria-multiline",
        "aria-multiselectable", "aria-orientation", "aria-owns", "aria-placeholder",
        "aria-posinset", "aria-readonly", "aria-relevant", "aria-required",
        "aria-roledescription", "aria-rowcount", "aria-rowindex", "aria-rowspan",
        "aria-setsize", "aria-sort", "aria-valuemax", "aria-valuemin",
        "aria-valuenow", "aria-valuetext",
    ]
)

LIVE_ROLES = ("alert", "status", "log", "marquee", "timer")
MENU_CONTAINER_ROLES = ("menu", "menubar")
MENU_ITEM_ROLES = ("menuitem", "menuitemcheckbox", "menuitemradio")

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


def camel_to_kebab(name: str) -> str:
    """ariaLabel -> aria-label"""
    return _CAMEL_BOUNDARY.sub(r"\1-\2", name).lower()


def empty_aria_results() -> Dict[str, Any]:
    return {
        "ariaAttributes": [],
        "roleChanges": [],
        "ariaPropertyAccess": [],
        "widgetPatterns": [],
        "liveRegions": [],
        "labelPatterns": [],
        "issues": [],
        "stats": {
            "totalAriaChanges": 0,
            "roleChanges": 0,
            "ariaPropertyAccess": 0,
            "byAttribute": {},
            "byElement": {},
            "byRole": {},
        },
    }


def _role_entry(change_type: str, role: Any, element_ref: str, node: ActionNode, context: TraversalContext) -> Dict:
    if change_type == "removeAttribute":
        is_valid, is_interactive, required = True, False, []
    else:
        is_valid = role in VALID_ROLES
        is_interactive = role in INTERACTIVE_ROLES
        required = list(REQUIRED_ATTRIBUTES.get(role, [])) if isinstance(role, str) else []
    return {
        "type": change_type,
        "role": role,
        "elementRef": element_ref,
        "isValid": is_valid,
        "isInteractive": is_interactive,
        "requiredAttributes": required,
        "inEventHandler": context.in_event_handler,
        "eventType": context.event_type,
        "location": location_of(node),
        "actionId": node.id,
    }


def _attribute_entry(change_type: str, attribute: str, value: Any, element_ref: str,
                     node: ActionNode, context: TraversalContext, **extra) -> Dict:
    entry = {
        "type": change_type,
        "attribute": attribute,
        "value": value,
        "elementRef": element_ref,
        "inEventHandler": context.in_event_handler,
        "eventType": context.event_type,
        "isState": attribute in ARIA_STATES,
        "isProperty": attribute in ARIA_PROPERTIES,
        "location": location_of(node),
        "actionId": node.id,
    }
    entry.update(extra)
    return entry


class ARIAAnalyzer(BaseAnalyzer):
    """Analyzes ARIA attribute and role usage."""

    name = "ARIAAnalyzer"
    default_options = {
        "detectPatterns": True,
        "detectIssues": True,
        "validateRoles": True,
    }

    def analyze(
        self,
        tree: Optional[ActionTree],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a tree for ARIA attributes, roles and widget compositions.

        Args:
            tree: The tree to analyze (None yields empty results)
            cancel_token: Optional token checked between nodes

        Returns:
            Dict with attributes, roles, patterns, issues and stats
        """
        results = empty_aria_results()
        for node, context in walk(tree, cancel_token):
            self._check_attribute_call(node, context, results)
            self._check_role_call(node, context, results)
            self._check_property_assignment(node, context, results)

        if self.options["detectPatterns"]:
            self._detect_tab_pattern(results)
            self._detect_dialog_pattern(results)
            self._detect_menu_pattern(results)
            self._detect_live_regions(results)
            self._detect_label_pattern(results)

        self._compute_stats(results)

        if self.options["detectIssues"]:
            self._detect_issues(results)

        logger.debug(
            f"ARIAAnalyzer found {len(results['ariaAttributes'])} attributes, "
            f"{len(results['roleChanges'])} role changes"
        )
        return results

    @safe_check
    def _check_attribute_call(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None:
            return
        args = call.arguments
        attr_name = literal_value(args[0]) if args else None
        if not isinstance(attr_name, str) or not attr_name.startswith("aria-"):
            return
        element_ref = element_reference(call.callee_node)

        if call.callee.endswith("setAttribute") and len(args) >= 2:
            results["ariaAttributes"].append(
                _attribute_entry("setAttribute", attr_name, args[1].get("value"), element_ref, node, context)
            )
        elif call.callee.endswith("removeAttribute"):
            results["ariaAttributes"].append(
                _attribute_entry("removeAttribute", attr_name, None, element_ref, node, context)
            )
        elif call.callee.endswith("getAttribute"):
            results["ariaPropertyAccess"].append(
                {
                    "type": "getAttribute",
                    "attribute": attr_name,
                    "elementRef": element_ref,
                    "inEventHandler": context.in_event_handler,
                    "location": location_of(node),
                    "actionId": node.id,
                }
            )

    @safe_check
    def _check_role_call(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        call = CallView.of(node)
        if call is None:
            return
        args = call.arguments
        if not args or literal_value(args[0]) != "role":
            return

        if call.callee.endswith("setAttribute") and len(args) >= 2:
            results["roleChanges"].append(
                _role_entry("setAttribute", args[1].get("value"), element_reference(call.callee_node), node, context)
            )
        elif call.callee.endswith("removeAttribute"):
            results["roleChanges"].append(
                _role_entry("removeAttribute", None, element_reference(call.callee_node), node, context)
            )

    @safe_check
    def _check_property_assignment(self, node: ActionNode, context: TraversalContext, results: Dict) -> None:
        assign = AssignView.of(node)
        if assign is None or assign.target is None:
            return
        target = assign.target
        prop = target.property_name
        element_ref = element_reference(target.object_node)
        value = assign.right.get("value") if assign.right is not None else None

        if prop.startswith("aria"):
            results["ariaAttributes"].append(
                _attribute_entry(
                    "propertyAssignment", camel_to_kebab(prop), value, element_ref, node, context,
                    property=prop,
                )
            )

        if prop == "role":
            results["roleChanges"].append(_role_entry("propertyAssignment", value, element_ref, node, context))

    @staticmethod
    def _roles(results: Dict, *names: str):
        return [r for r in results["roleChanges"] if r["role"] in names]

    @staticmethod
    def _attributes(results: Dict, *names: str):
        return [a for a in results["ariaAttributes"] if a["attribute"] in names]

    def _detect_tab_pattern(self, results: Dict) -> None:
        tabs = self._roles(results, "tab")
        tablist = self._roles(results, "tablist")
        tabpanels = self._roles(results, "tabpanel")
        if not (tabs or tablist or tabpanels):
            return
        results["widgetPatterns"].append(
            {
                "type": "tabs",
                "description": "Tab widget pattern detected",
                "components": {"tabs": len(tabs), "tablist": len(tablist), "tabpanels": len(tabpanels)},
                "hasTablist": bool(tablist),
                "isComplete": bool(tablist and tabs and tabpanels),
            }
        )

    def _detect_dialog_pattern(self, results: Dict) -> None:
        dialogs = self._roles(results, "dialog", "alertdialog")
        if not dialogs:
            return
        modal = self._attributes(results, "aria-modal")
        labelledby = self._attributes(results, "aria-labelledby")
        results["widgetPatterns"].append(
            {
                "type": "dialog",
                "description": "Dialog widget pattern detected",
                "components": {
                    "dialogs": len(dialogs),
                    "alertDialogs": len([d for d in dialogs if d["role"] == "alertdialog"]),
                },
                "hasModal": any(a["value"] == "true" for a in modal),
                "hasLabel": bool(labelledby),
            }
        )

    def _detect_menu_pattern(self, results: Dict) -> None:
        menus = self._roles(results, *MENU_CONTAINER_ROLES)
        items = self._roles(results, *MENU_ITEM_ROLES)
        if not (menus or items):
            return
        results["widgetPatterns"].append(
            {
                "type": "menu",
                "description": "Menu widget pattern detected",
                "components": {"menus": len(menus), "menuitems": len(items)},
                "hasMenuContainer": bool(menus),
                "isComplete": bool(menus and items),
            }
        )

    def _detect_live_regions(self, results: Dict) -> None:
        live_attributes = self._attributes(results, "aria-live")
        live_roles = self._roles(results, *LIVE_ROLES)
        if not (live_attributes or live_roles):
            return
        results["liveRegions"].append(
            {
                "type": "liveRegion",
                "description": "Live region pattern detected",
                "liveAttributes": len(live_attributes),
                "liveRoles": len(live_roles),
                "politeness": [a["value"] for a in live_attributes],
                "hasAtomic": bool(self._attributes(results, "aria-atomic")),
                "hasRelevant": bool(self._attributes(results, "aria-relevant")),
            }
        )

    def _detect_label_pattern(self, results: Dict) -> None:
        labels = self._attributes(results, "aria-label")
        labelledby = self._attributes(results, "aria-labelledby")
        describedby = self._attributes(results, "aria-describedby")
        if not (labels or labelledby or describedby):
            return
        results["labelPatterns"].append(
            {
                "type": "labeling",
                "description": "ARIA labeling pattern detected",
                "ariaLabel": len(labels),
                "ariaLabelledby": len(labelledby),
                "ariaDescribedby": len(describedby),
            }
        )

    def _detect_issues(self, results: Dict) -> None:
        issues = results["issues"]
        roles = results["roleChanges"]
        attributes = results["ariaAttributes"]

        if self.options["validateRoles"]:
            for role in roles:
                if role["role"] and not role["isValid"]:
                    issues.append(
                        {
                            "type": "invalid-role",
                            "severity": "error",
                            "message": f'Invalid ARIA role "{role["role"]}" on "{role["elementRef"]}"',
                            "elementRef": role["elementRef"],
                            "location": role["location"],
                            "actionId": role["actionId"],
                            "suggestion": "Use a valid ARIA role from the WAI-ARIA specification",
                        }
                    )

        for change in attributes:
            if change["attribute"] == "aria-hidden" and change["value"] == "true":
                issues.append(
                    {
                        "type": "aria-hidden-true",
                        "severity": "info",
                        "message": f'aria-hidden="true" set on "{change["elementRef"]}" - ensure no focusable descendants',
                        "elementRef": change["elementRef"],
                        "location": change["location"],
                        "actionId": change["actionId"],
                        "suggestion": 'Focusable elements inside aria-hidden="true" containers cannot be reached by assistive technology',
                    }
                )

        for role in roles:
            if role["isInteractive"] and not role["inEventHandler"]:
                issues.append(
                    {
                        "type": "interactive-role-static",
                        "severity": "warning",
                        "message": f'Interactive role="{role["role"]}" on "{role["elementRef"]}" set outside event handler',
                        "elementRef": role["elementRef"],
                        "location": role["location"],
                        "actionId": role["actionId"],
                        "suggestion": "Ensure interactive ARIA roles have appropriate keyboard event handlers",
                    }
                )

        for change in attributes:
            if change["attribute"] == "aria-expanded" and not change["inEventHandler"]:
                issues.append(
                    {
                        "type": "aria-expanded-static",
                        "severity": "info",
                        "message": f'aria-expanded on "{change["elementRef"]}" - ensure controlled content visibility matches',
                        "elementRef": change["elementRef"],
                        "location": change["location"],
                        "actionId": change["actionId"],
                        "suggestion": "aria-expanded should be toggled with corresponding content visibility changes",
                    }
                )

        labelled = {
            a["elementRef"] for a in attributes
            if a["attribute"] in ("aria-labelledby", "aria-label")
        }
        for dialog in roles:
            if dialog["role"] in ("dialog", "alertdialog") and dialog["elementRef"] not in labelled:
                issues.append(
                    {
                        "type": "dialog-missing-label",
                        "severity": "warning",
                        "message": f'Dialog "{dialog["elementRef"]}" may be missing aria-labelledby or aria-label',
                        "elementRef": dialog["elementRef"],
                        "location": dialog["location"],
                        "actionId": dialog["actionId"],
                        "suggestion": "Dialogs should have an accessible name via aria-labelledby or aria-label",
                    }
                )

        for role in roles:
            if not role["requiredAttributes"]:
                continue
            present = {a["attribute"] for a in attributes if a["elementRef"] == role["elementRef"]}
            for required in role["requiredAttributes"]:
                if required not in present:
                    issues.append(
                        {
                            "type": "missing-required-aria",
                            "severity": "warning",
                            "message": f'Role "{role["role"]}" on "{role["elementRef"]}" may be missing required attribute {required}',
                            "elementRef": role["elementRef"],
                            "attribute": required,
                            "location": role["location"],
                            "actionId": role["actionId"],
                            "suggestion": f"Add {required} attribute for complete ARIA widget implementation",
                        }
                    )

        for region in attributes:
            if region["attribute"] == "aria-live" and region["value"] == "assertive":
                issues.append(
                    {
                        "type": "assertive-live-region",
                        "severity": "info",
                        "message": f'aria-live="assertive" on "{region["elementRef"]}" - use sparingly for critical updates only',
                        "elementRef": region["elementRef"],
                        "location": region["location"],
                        "actionId": region["actionId"],
                        "suggestion": 'Prefer aria-live="polite" unless the announcement is time-sensitive or critical',
                    }
                )

    @staticmethod
    def _compute_stats(results: Dict) -> None:
        stats = results["stats"]
        stats["totalAriaChanges"] = len(results["ariaAttributes"])
        stats["roleChanges"] = len(results["roleChanges"])
        stats["ariaPropertyAccess"] = len(results["ariaPropertyAccess"])
        for attr in results["ariaAttributes"]:
            count_into(stats["byAttribute"], attr["attribute"])
            count_into(stats["byElement"], attr["elementRef"])
        for role in results["roleChanges"]:
            count_into(stats["byElement"], role["elementRef"])
            if role["role"]:
                count_into(stats["byRole"], role["role"])
