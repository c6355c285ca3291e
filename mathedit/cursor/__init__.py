"""Cursor — state machine курсора и display-сериализация с caret.

- Вставка/удаление/навигация по дереву выражения
- Адресация Gap/OnElement
- Временная caret-правка дерева (apply/undo)
"""

from .caret import DEFAULT_CARET_GLYPH, CaretTransaction, render_with_caret
from .state_machine import Cursor, CursorInvariantViolation, CursorState

__all__ = [
    "Cursor",
    "CursorState",
    "CursorInvariantViolation",
    "CaretTransaction",
    "render_with_caret",
    "DEFAULT_CARET_GLYPH",
]
