"""Cursor State Machine — единственная точка вставки в дереве выражения.

Состояние курсора:
- expression — корень документа
- component  — Component, внутри которого курсор (None на верхнем уровне)
- block      — Block, внутри которого курсор (None на верхнем уровне)
- position   — адрес в последовательности top-level компонентов
- child      — адрес в children текущего блока

Состояния = {верхний уровень | внутри компонента} × {адрес}:
- верхний уровень: block is None, position = Gap(k)
- внутри компонента: position = OnElement(k) (k — индекс top-level предка), child = Gap(j)

Начальное состояние: верхний уровень, Gap(0).

Политики:
- Листья (TEXT/SYMBOL) никогда не становятся контейнером курсора: навигация их перешагивает
- Удаляются только листья и пустые компоненты, непустой контейнер нельзя удалить за один шаг
- Операции на границах документа — no-op (возвращают False), исключений нет
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from mathedit.core.domain.address import START, Address, Gap, OnElement
from mathedit.core.domain.templates import ComponentKind
from mathedit.core.domain.tree import Block, Component, Expression

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class CursorInvariantViolation(Exception):
    """
    Адрес курсора не согласован с деревом.

    Признак того, что дерево менялось в обход Cursor (ошибка программиста).
    """
    pass


# =============================================================================
# STATE SNAPSHOT
# =============================================================================


@dataclass(frozen=True)
class CursorState:
    """Снимок адреса курсора (component/block сравниваются по identity)."""

    component: Optional[Component]
    block: Optional[Block]
    position: Address
    child: Address

    @property
    def at_top_level(self) -> bool:
        return self.block is None


def _is_leaf(node: Union[str, Component]) -> bool:
    return isinstance(node, str) or node.is_leaf


# =============================================================================
# CURSOR
# =============================================================================


class Cursor:
    """Cursor State Machine поверх Expression.

    Операции:
    - insert_text(text)        — вставка листового TEXT, курсор за ним
    - insert_component(node)   — вставка; в нелистовой компонент курсор входит (первый блок)
    - delete_backward()        — backspace (см. политику в docstring метода)
    - seek_left()/seek_right() — навигация без мутаций
    - to_markup()              — markup выражения (read-only)

    Все операции синхронные и завершаются до следующего события ввода.
    """

    def __init__(self, expression: Optional[Expression] = None):
        self.expression = expression if expression is not None else Expression()
        self.component: Optional[Component] = None
        self.block: Optional[Block] = None
        self.position: Address = START
        self.child: Address = START

    def reset(self, expression: Optional[Expression] = None) -> None:
        """Возврат в начальное состояние (опционально — с новым выражением)."""
        if expression is not None:
            self.expression = expression
        self._exit_to_top_level(START)

    def snapshot(self) -> CursorState:
        return CursorState(
            component=self.component,
            block=self.block,
            position=self.position,
            child=self.child,
        )

    @property
    def at_top_level(self) -> bool:
        return self.block is None

    # =========================================================================
    # Insertion
    # =========================================================================

    def insert_text(self, text: str) -> None:
        """Вставка текста как листового TEXT компонента; курсор встаёт за ним."""
        self.insert_component(Component.text(text))

    def insert_component(self, node: Component) -> None:
        """
        Вставка компонента в текущий адрес.

        - Лист (TEXT/SYMBOL): курсор перешагивает его и остаётся в том же контейнере
        - Контейнер: курсор входит в первый блок, child = Gap(0)
        """
        self._check_invariants()
        if node.kind == ComponentKind.FRAME:
            raise CursorInvariantViolation("frame components are reserved for caret rendering")

        if self.block is None:
            index = self.position.right
            self.expression.add(node, index)
            if node.is_leaf:
                self.position = Gap(index + 1)
            else:
                self.position = OnElement(index)
                self._enter_first_block(node)
        else:
            index = self.child.right
            self.block.add_child(node, index)
            if node.is_leaf:
                self.child = Gap(index + 1)
            else:
                self._enter_first_block(node)

        logger.debug("inserted %r, cursor at %s", node, self.snapshot())

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_backward(self) -> bool:
        """
        Backspace.

        Порядок проверок:
        1. Начало документа → no-op
        2. Верхний уровень: лист слева удаляется; контейнер слева — курсор входит
           в его последний блок (ничего не удаляется)
        3. Текущий компонент пуст → удаляется целиком, курсор встаёт в образовавшийся промежуток
        4. Начало блока → переход в предыдущий блок компонента; в первом блоке — no-op
        5. Иначе удаляется child слева от курсора

        Returns:
            False если операция была no-op
        """
        self._check_invariants()

        # 1. Начало документа
        if not self.expression.components or self.position == START:
            logger.debug("delete_backward: document start, no-op")
            return False

        # 2. Верхний уровень
        if self.block is None:
            index = self.position.left
            target = self.expression.components[index]
            if target.is_leaf:
                self._detach(target)
                self.position = Gap(index)
            else:
                self.position = OnElement(index)
                self._enter_last_block(target)
            return True

        # 3. Пустой компонент удаляется целиком
        if self.component.is_empty():
            self._delete_current_component()
            return True

        # 4. Начало блока
        if self.child == START:
            block_index = self.component.block_index(self.block)
            if block_index == 0:
                logger.debug("delete_backward: start of first block of %r, no-op", self.component)
                return False
            self.block = self.component.blocks[block_index - 1]
            self.child = Gap(len(self.block.children))
            return True

        # 5. Удаление child слева
        self.block.remove_child(self.child.left)
        self.child = self.child.step_left()
        return True

    def _delete_current_component(self) -> None:
        component = self.component
        parent_block = component.parent
        index = self._detach(component)
        if parent_block is None:
            self._exit_to_top_level(Gap(index))
        else:
            self.block = parent_block
            self.component = parent_block.parent
            self.child = Gap(index)

    def _detach(self, component: Component) -> int:
        """Удаление компонента из его контейнера; возвращает индекс, где он был."""
        if component.parent is None:
            index = self.expression.index_of(component)
            self.expression.remove(index)
        else:
            index = component.parent.index_of(component)
            component.parent.remove_child(index)
        return index

    # =========================================================================
    # Navigation
    # =========================================================================

    def seek_right(self) -> bool:
        """
        Шаг вправо.

        - Верхний уровень: лист перешагивается, в контейнер — вход в первый блок
        - Конец блока: следующий блок компонента или выход на уровень выше
        - Внутри блока: лист перешагивается, в контейнер — вход в первый блок

        Returns:
            False в конце документа (no-op)
        """
        self._check_invariants()

        if self.block is None:
            index = self.position.right
            if index >= len(self.expression.components):
                logger.debug("seek_right: document end, no-op")
                return False
            target = self.expression.components[index]
            if target.is_leaf:
                self.position = Gap(index + 1)
            else:
                self.position = OnElement(index)
                self._enter_first_block(target)
            return True

        if self.child.right >= len(self.block.children):
            block_index = self.component.block_index(self.block)
            if block_index == len(self.component.blocks) - 1:
                self._ascend_right()
            else:
                self.block = self.component.blocks[block_index + 1]
                self.child = START
            return True

        target = self.block.children[self.child.right]
        if _is_leaf(target):
            self.child = self.child.step_right()
        else:
            self._enter_first_block(target)
        return True

    def seek_left(self) -> bool:
        """
        Шаг влево (симметрично seek_right).

        Returns:
            False в начале документа (no-op)
        """
        self._check_invariants()

        if self.block is None:
            if self.position == START:
                logger.debug("seek_left: document start, no-op")
                return False
            index = self.position.left
            target = self.expression.components[index]
            if target.is_leaf:
                self.position = Gap(index)
            else:
                self.position = OnElement(index)
                self._enter_last_block(target)
            return True

        if self.child == START:
            block_index = self.component.block_index(self.block)
            if block_index == 0:
                self._ascend_left()
            else:
                self.block = self.component.blocks[block_index - 1]
                self.child = Gap(len(self.block.children))
            return True

        target = self.block.children[self.child.left]
        if _is_leaf(target):
            self.child = self.child.step_left()
        else:
            self._enter_last_block(target)
        return True

    def _ascend_right(self) -> None:
        """Выход из текущего компонента за его правую границу."""
        component = self.component
        if component.parent is None:
            self._exit_to_top_level(self.position.half_step_right())
        else:
            self.block = component.parent
            self.child = Gap(self.block.index_of(component) + 1)
            self.component = self.block.parent

    def _ascend_left(self) -> None:
        """Выход из текущего компонента за его левую границу."""
        component = self.component
        if component.parent is None:
            self._exit_to_top_level(self.position.half_step_left())
        else:
            self.block = component.parent
            self.child = Gap(self.block.index_of(component))
            self.component = self.block.parent

    # =========================================================================
    # Transitions
    # =========================================================================

    def _enter_first_block(self, component: Component) -> None:
        self.component = component
        self.block = component.blocks[0]
        self.child = START

    def _enter_last_block(self, component: Component) -> None:
        self.component = component
        self.block = component.blocks[-1]
        self.child = Gap(len(self.block.children))

    def _exit_to_top_level(self, position: Gap) -> None:
        self.component = None
        self.block = None
        self.child = START
        self.position = position

    def _check_invariants(self) -> None:
        """Fail fast если адрес курсора не согласован с деревом."""
        components = self.expression.components

        if self.block is None:
            if self.component is not None:
                raise CursorInvariantViolation("top-level cursor must not reference a component")
            if not isinstance(self.position, Gap) or self.position.index > len(components):
                raise CursorInvariantViolation(
                    f"top-level position {self.position} out of range for {len(components)} components"
                )
            return

        if self.component is None:
            raise CursorInvariantViolation("cursor inside a block must reference its component")
        if not any(block is self.block for block in self.component.blocks):
            raise CursorInvariantViolation(f"{self.block!r} does not belong to {self.component!r}")
        if not isinstance(self.child, Gap) or self.child.index > len(self.block.children):
            raise CursorInvariantViolation(
                f"child address {self.child} out of range for {len(self.block.children)} children"
            )

        # position указывает на top-level предка текущего компонента
        top = self.component
        while top.parent is not None:
            top = top.parent.parent
        if (
            not isinstance(self.position, OnElement)
            or self.position.index >= len(components)
            or components[self.position.index] is not top
        ):
            raise CursorInvariantViolation(
                f"position {self.position} does not point at the top-level ancestor {top!r}"
            )

    # =========================================================================
    # Markup
    # =========================================================================

    def to_markup(self) -> str:
        """Markup выражения без caret."""
        return self.expression.to_markup()
