"""
Caret Serialization — markup с видимым caret в адресе курсора

Display-вариант markup строится временной правкой живого дерева:
1. apply: caret-лист вставляется в адрес курсора; текущий блок (если курсор
   внутри компонента) оборачивается рамкой FRAME в своём слоте
2. to_markup()
3. undo: caret удаляется, в слот возвращается исходный блок

apply/undo — явная пара (CaretTransaction), undo выполняется и при исключении.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. После вызова to_markup() без caret побайтно совпадает с результатом до вызова
2. Все parent-ссылки дерева не меняются (рамка не переназначает block.parent)
3. Адрес курсора не меняется
"""

from typing import Final, Optional

from mathedit.core.domain.tree import Block, Component
from mathedit.cursor.state_machine import Cursor, CursorInvariantViolation


DEFAULT_CARET_GLYPH: Final[str] = "|"


class CaretTransaction:
    """
    Временная вставка caret + рамки вокруг текущего блока.

    Использование:
        with CaretTransaction(cursor) as tx:
            markup = cursor.expression.to_markup()
    """

    def __init__(self, cursor: Cursor, glyph: str = DEFAULT_CARET_GLYPH):
        self.cursor = cursor
        self.glyph = glyph
        self._caret: Optional[Component] = None
        self._frame: Optional[Component] = None
        self._block: Optional[Block] = None
        self._slot: Optional[int] = None

    @property
    def applied(self) -> bool:
        return self._caret is not None

    def apply(self) -> None:
        if self.applied:
            raise CursorInvariantViolation("caret transaction already applied")

        cursor = self.cursor
        caret = Component.text(self.glyph)

        if cursor.block is None:
            cursor.expression.add(caret, cursor.position.right)
        else:
            self._block = cursor.block
            self._slot = cursor.component.block_index(cursor.block)
            self._frame = Component.frame(around=cursor.block)
            cursor.component.swap_slot(self._slot, self._frame)
            cursor.block.add_child(caret, cursor.child.right)

        self._caret = caret

    def undo(self) -> None:
        if not self.applied:
            raise CursorInvariantViolation("caret transaction is not applied")

        cursor = self.cursor
        if self._block is None:
            removed = cursor.expression.remove(cursor.position.right)
        else:
            removed = self._block.remove_child(cursor.child.right)
            restored = cursor.component.swap_slot(self._slot, self._block)
            if restored is not self._frame:
                raise CursorInvariantViolation("caret frame slot was modified during rendering")

        if removed is not self._caret:
            raise CursorInvariantViolation("caret was moved during rendering")

        self._caret = None
        self._frame = None
        self._block = None
        self._slot = None

    def __enter__(self) -> "CaretTransaction":
        self.apply()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.applied:
            self.undo()
        return False


def render_with_caret(cursor: Cursor, glyph: str = DEFAULT_CARET_GLYPH) -> str:
    """Markup выражения с caret в адресе курсора и рамкой вокруг текущего блока."""
    with CaretTransaction(cursor, glyph):
        return cursor.expression.to_markup()
