"""
Test suite for mathedit

Contains:
- tests/unit/          : Unit tests for individual modules (tree, cursor, caret, palette, session)
"""
