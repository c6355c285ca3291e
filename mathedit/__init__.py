"""
mathedit — structured-document core of an incremental equation editor.

- mathedit.core     : document tree, addresses, templates, palette contracts
- mathedit.palette  : palette registry (symbols, functions, template families)
- mathedit.cursor   : cursor state machine and caret serialization
- mathedit.editor   : editor session (host object, history, rendering)
"""

__version__ = "0.1.0"
