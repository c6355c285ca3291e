"""
Domain models of the expression editor.

Contains the document tree (Expression, Block, Component), cursor addresses,
markup templates and color generators.
"""

from mathedit.core.domain.address import (
    START,
    Address,
    Gap,
    OnElement,
    address_from_value,
)
from mathedit.core.domain.colors import (
    COLOR_PALETTE,
    ColorGenerator,
    CyclicColorGenerator,
    RandomColorGenerator,
    color_for,
)
from mathedit.core.domain.templates import ComponentKind, Template, TemplateFamily
from mathedit.core.domain.tree import (
    PLACEHOLDER_GLYPH,
    Block,
    Component,
    Expression,
    TreeInvariantViolation,
    placeholder_markup,
)

__all__ = [
    # Address module
    "START",
    "Address",
    "Gap",
    "OnElement",
    "address_from_value",
    # Colors module
    "COLOR_PALETTE",
    "ColorGenerator",
    "CyclicColorGenerator",
    "RandomColorGenerator",
    "color_for",
    # Templates module
    "ComponentKind",
    "Template",
    "TemplateFamily",
    # Tree module
    "PLACEHOLDER_GLYPH",
    "Block",
    "Component",
    "Expression",
    "TreeInvariantViolation",
    "placeholder_markup",
]
