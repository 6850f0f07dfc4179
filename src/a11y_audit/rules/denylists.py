"""Named vocabularies used by heuristic rules.

Kept as plain constants so they can be inspected, tested and extended
without touching rule logic.
"""

import re

# Link text that does not describe the destination (compared case-insensitively)
GENERIC_LINK_TEXT = frozenset({
    "click here",
    "read more",
    "here",
    "more",
    "learn more",
    "link",
})

# Words that make alt text redundant ("image of a pizza")
REDUNDANT_ALT_WORDS = ("image", "picture")

# Page titles that do not identify the page
GENERIC_TITLES = frozenset({"", "untitled", "home", "page", "document", "index", "undefined", "null"})

# Class name fragments suggesting a container shows status messages
STATUS_CLASS_HINTS = ("notification", "toast", "alert", "status", "message", "success", "error", "invalid")

# Class fragments marking validation error containers
ERROR_CLASS_HINTS = ("error", "invalid")

# Class fragments marking colour-coded badges
BADGE_CLASS_HINTS = ("badge",)

# Event handler bodies that change context
CONTEXT_CHANGE_PATTERN = re.compile(r"window\.location|document\.location|href|navigate|submit", re.I)

# In-page targets commonly used by skip links
SKIP_LINK_TARGETS = frozenset({"#main", "#content", "#main-content"})

# Primary language tag, optionally followed by a region/script subtag
LANG_PATTERN = re.compile(r"^[a-z]{2,3}(-[A-Za-z]{2,4})?$")

# Price figures replaced before comparing component names across pages
PRICE_PATTERN = re.compile(r"[$€£]\s?\d+(?:[.,]\d+)*|\d+(?:[.,]\d+)*\s?[$€£]")
PRICE_PLACEHOLDER = "$X"

# Input types and the autocomplete tokens that identify their purpose
AUTOCOMPLETE_BY_TYPE = {
    "email": ("email",),
    "tel": ("tel", "tel-national", "tel-local"),
    "password": ("current-password", "new-password"),
}

# Text inputs whose name reveals they collect personal data
AUTOCOMPLETE_BY_NAME = {
    "name": ("name", "given-name", "family-name", "nickname"),
    "email": ("email",),
    "phone": ("tel",),
    "address": ("street-address", "address-line1", "address-line2"),
    "zip": ("postal-code",),
    "postal": ("postal-code",),
    "city": ("address-level2",),
}

LIVE_REGION_ROLES = frozenset({"alert", "status", "log", "marquee", "timer"})
ARIA_LIVE_VALUES = frozenset({"off", "polite", "assertive"})

VALID_ROLES = frozenset({
    "alert", "alertdialog", "application", "article", "banner", "blockquote", "button",
    "caption", "cell", "checkbox", "code", "columnheader", "combobox", "comment",
    "complementary", "contentinfo", "definition", "deletion", "dialog", "directory",
    "document", "emphasis", "feed", "figure", "form", "generic", "grid", "gridcell",
    "group", "heading", "img", "insertion", "link", "list", "listbox", "listitem", "log",
    "main", "mark", "marquee", "math", "menu", "menubar", "menuitem", "menuitemcheckbox",
    "menuitemradio", "meter", "navigation", "none", "note", "option", "paragraph",
    "presentation", "progressbar", "radio", "radiogroup", "region", "row", "rowgroup",
    "rowheader", "scrollbar", "search", "searchbox", "separator", "slider", "spinbutton",
    "status", "strong", "subscript", "suggestion", "superscript", "switch", "tab", "table",
    "tablist", "tabpanel", "term", "textbox", "time", "timer", "toolbar", "tooltip", "tree",
    "treegrid", "treeitem",
})

VALID_ARIA_ATTRIBUTES = frozenset({
    "aria-activedescendant", "aria-atomic", "aria-autocomplete", "aria-braillelabel",
    "aria-brailleroledescription", "aria-busy", "aria-checked", "aria-colcount",
    "aria-colindex", "aria-colindextext", "aria-colspan", "aria-controls", "aria-current",
    "aria-describedby", "aria-description", "aria-details", "aria-disabled",
    "aria-dropeffect", "aria-errormessage", "aria-expanded", "aria-flowto", "aria-grabbed",
    "aria-haspopup", "aria-hidden", "aria-invalid", "aria-keyshortcuts", "aria-label",
    "aria-labelledby", "aria-level", "aria-live", "aria-modal", "aria-multiline",
    "aria-multiselectable", "aria-orientation", "aria-owns", "aria-placeholder",
    "aria-posinset", "aria-pressed", "aria-readonly", "aria-relevant", "aria-required",
    "aria-roledescription", "aria-rowcount", "aria-rowindex", "aria-rowindextext",
    "aria-rowspan", "aria-selected", "aria-setsize", "aria-sort", "aria-valuemax",
    "aria-valuemin", "aria-valuenow", "aria-valuetext",
})

# State attributes and the exact values they accept
STATE_ATTRIBUTE_VALUES = {
    "aria-checked": frozenset({"true", "false", "mixed"}),
    "aria-pressed": frozenset({"true", "false", "mixed"}),
    "aria-expanded": frozenset({"true", "false"}),
    "aria-selected": frozenset({"true", "false"}),
}
