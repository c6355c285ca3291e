"""
Document Tree — дерево редактируемого выражения

Структура:
- Expression — корень, упорядоченная последовательность top-level Component
- Component  — типизированный узел с фиксированным числом Block (арность)
- Block      — упорядоченная последовательность children: строка или Component

Связи вверх (единственный способ подняться по дереву):
- Block.parent     — Component, которому принадлежит блок (задаётся при создании)
- Component.parent — Block, в котором лежит компонент (None для top-level)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Количество блоков Component не меняется после создания
2. block.parent is component для каждого block in component.blocks
3. component.parent is block для каждого component in block.children
4. is_empty() ⇔ у всех блоков нет children
5. Пустой Block рендерится как цветной placeholder, а не пустая строка
6. to_markup() — чистая функция содержимого дерева (без side effects)
7. to_markup() не ограничен глубиной вложенности (свёртка по явному стеку)

Дерево не проверяет границы позиций: за корректность индексов отвечает Cursor.
"""

from typing import Final, Iterator, List, Optional, Sequence, Union

from mathedit.core.domain.colors import color_for
from mathedit.core.domain.templates import ComponentKind, Template


# Глиф внутри пустого блока (HTML entity punctuation space, рендерер разбирает его как есть)
PLACEHOLDER_GLYPH: Final[str] = "&#8200;"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class TreeInvariantViolation(Exception):
    """
    Нарушение структурного инварианта дерева.

    Ошибка программиста (контракт Cursor/Tree обойдён), а не runtime-состояние:
    арность не совпадает, узел не найден у своего parent и т.п.
    """
    pass


def placeholder_markup(color: Optional[str]) -> str:
    """Markup пустого блока: \\color{<color>}{\\boxed{&#8200;}}."""
    return "\\color{" + str(color) + "}{\\boxed{" + PLACEHOLDER_GLYPH + "}}"


# =============================================================================
# BLOCK
# =============================================================================


class Block:
    """
    Слот содержимого Component.

    children: строки (литеральный текст) и вложенные Component.
    """

    def __init__(self, parent: "Component"):
        self.children: List[Union[str, "Component"]] = []
        self.parent = parent

    def add_child(self, node: Union[str, "Component"], position: Optional[int] = None) -> None:
        """
        Вставка node в позицию position (по умолчанию — в конец).

        Для Component выставляется обратная ссылка node.parent = self.
        """
        if position is None:
            position = len(self.children)
        if isinstance(node, Component):
            node.parent = self
        self.children.insert(position, node)

    def remove_child(self, position: Optional[int] = None) -> Union[str, "Component"]:
        """Удаление child в позиции position (по умолчанию — последний)."""
        if position is None:
            position = len(self.children) - 1
        return self.children.pop(position)

    def index_of(self, node: "Component") -> int:
        """Индекс node среди children (по identity)."""
        for i, child in enumerate(self.children):
            if child is node:
                return i
        raise TreeInvariantViolation(f"{node!r} is not a child of {self!r}")

    def is_empty(self) -> bool:
        return len(self.children) == 0

    def to_markup(self) -> str:
        return fold_markup(self)

    def __repr__(self) -> str:
        return f"Block(children={len(self.children)})"


# =============================================================================
# COMPONENT
# =============================================================================


class Component:
    """
    Узел дерева с фиксированной арностью.

    Варианты (ComponentKind):
    - TEXT     — 1 блок с одной строкой (единица, создаваемая нажатием клавиши)
    - SYMBOL   — 0 блоков, литеральный markup
    - TEMPLATE — 1..3 блока, markup по Template
    - MATRIX   — rows×cols блоков, row-major
    - FRAME    — 1 блок, временная рамка вокруг текущего блока (только для caret)

    Создание — через classmethod-конструкторы (text, symbol, from_template, matrix, frame).
    """

    def __init__(
        self,
        kind: ComponentKind,
        block_count: int,
        *,
        template: Optional[Template] = None,
        latex: Optional[str] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        color: Optional[str] = None,
        parent: Optional[Block] = None,
    ):
        self.kind = kind
        self.template = template
        self.latex = latex
        self.rows = rows
        self.cols = cols
        self.color = color
        self.parent = parent
        self.blocks: List[Block] = [Block(self) for _ in range(block_count)]
        self._check_arity()

    # -------------------------------------------------------------------------
    # Конструкторы вариантов
    # -------------------------------------------------------------------------

    @classmethod
    def text(cls, content: str) -> "Component":
        """Листовой текстовый компонент (один символ или короткий фрагмент)."""
        if not content:
            raise TreeInvariantViolation("text component requires non-empty content")
        component = cls(ComponentKind.TEXT, 1)
        component.blocks[0].add_child(content)
        return component

    @classmethod
    def symbol(cls, latex: str) -> "Component":
        """Листовой символ с фиксированным markup (например, '\\alpha')."""
        if not latex:
            raise TreeInvariantViolation("symbol component requires latex")
        return cls(ComponentKind.SYMBOL, 0, latex=latex)

    @classmethod
    def from_template(cls, template: Template, color: Optional[str] = None) -> "Component":
        """Шаблонный компонент; без color — первый цвет палитры."""
        if color is None:
            color = color_for(0)
        return cls(ComponentKind.TEMPLATE, template.arity, template=template, color=color)

    @classmethod
    def matrix(cls, rows: int, cols: int, color: Optional[str] = None) -> "Component":
        if rows < 1 or cols < 1:
            raise TreeInvariantViolation(f"matrix dimensions must be positive, got {rows}x{cols}")
        if color is None:
            color = color_for(0)
        return cls(ComponentKind.MATRIX, rows * cols, rows=rows, cols=cols, color=color)

    @classmethod
    def frame(cls, around: Block) -> "Component":
        """
        Рамка вокруг существующего блока.

        around.parent не меняется: рамка только занимает слот блока у владельца
        на время сериализации caret. Цвет не назначается.
        """
        component = cls(ComponentKind.FRAME, 1)
        component.blocks[0] = around
        return component

    def _check_arity(self) -> None:
        if self.kind == ComponentKind.SYMBOL:
            expected = 0
        elif self.kind in (ComponentKind.TEXT, ComponentKind.FRAME):
            expected = 1
        elif self.kind == ComponentKind.TEMPLATE:
            if self.template is None:
                raise TreeInvariantViolation("template component requires a Template")
            expected = self.template.arity
        elif self.kind == ComponentKind.MATRIX:
            if self.rows is None or self.cols is None:
                raise TreeInvariantViolation("matrix component requires rows and cols")
            expected = self.rows * self.cols
        else:
            raise TreeInvariantViolation(f"unknown component kind: {self.kind}")

        if len(self.blocks) != expected:
            raise TreeInvariantViolation(
                f"{self.kind.value} component expects {expected} blocks, got {len(self.blocks)}"
            )

    # -------------------------------------------------------------------------
    # Структура
    # -------------------------------------------------------------------------

    @property
    def is_leaf(self) -> bool:
        return self.kind.is_leaf

    def is_empty(self) -> bool:
        """True если все блоки компонента пусты."""
        for block in self.blocks:
            if block.children:
                return False
        return True

    def block_index(self, block: Block) -> int:
        """Индекс блока в self.blocks (по identity)."""
        for i, b in enumerate(self.blocks):
            if b is block:
                return i
        raise TreeInvariantViolation(f"{block!r} does not belong to {self!r}")

    def swap_slot(self, index: int, replacement: Union[Block, "Component"]) -> Union[Block, "Component"]:
        """
        Замена содержимого слота index без изменения арности.

        Используется только парой apply/undo CaretTransaction
        (блок ↔ рамка вокруг этого блока). Возвращает прежнее содержимое слота.
        """
        previous = self.blocks[index]
        self.blocks[index] = replacement
        return previous

    # -------------------------------------------------------------------------
    # Markup
    # -------------------------------------------------------------------------

    def to_markup(self) -> str:
        return fold_markup(self)

    def _combine_markup(self, parts: Sequence[str]) -> str:
        """Markup компонента из уже отрендеренных блоков (по одному на слот)."""
        if self.kind == ComponentKind.TEXT:
            return parts[0]
        elif self.kind == ComponentKind.SYMBOL:
            return self.latex + " "
        elif self.kind == ComponentKind.FRAME:
            return "\\boxed{" + parts[0] + "}"
        elif self.kind == ComponentKind.MATRIX:
            return self._matrix_markup(parts)
        else:
            return self.template.render(parts)

    def _matrix_markup(self, parts: Sequence[str]) -> str:
        """
        \\begin{matrix} a & b \\\\ c & d \\end{matrix}

        Ячейка (i, j) — блок i*cols+j. После последнего столбца строки
        разделитель не ставится, после последней строки — перевод строки не ставится.
        """
        output = "\\begin{matrix}"
        for i in range(self.rows):
            for j in range(self.cols):
                output += parts[i * self.cols + j]
                if j == self.cols - 1:
                    if i != self.rows - 1:
                        output += " \\\\ "
                else:
                    output += " & "
        output += "\\end{matrix}"
        return output

    def __repr__(self) -> str:
        if self.kind == ComponentKind.TEXT:
            return f"Component(text={self.blocks[0].children!r})"
        if self.kind == ComponentKind.SYMBOL:
            return f"Component(symbol={self.latex!r})"
        name = self.template.name if self.template is not None else self.kind.value
        return f"Component({name}, blocks={len(self.blocks)})"


# =============================================================================
# EXPRESSION
# =============================================================================


class Expression:
    """Корень документа: упорядоченная последовательность top-level Component."""

    def __init__(self):
        self.components: List[Component] = []

    def add(self, component: Component, position: Optional[int] = None) -> None:
        """Вставка в позицию position (по умолчанию — в конец). Top-level: parent = None."""
        if position is None:
            position = len(self.components)
        component.parent = None
        self.components.insert(position, component)

    def remove(self, position: Optional[int] = None) -> Component:
        """Удаление компонента в позиции position (по умолчанию — последний)."""
        if position is None:
            position = len(self.components) - 1
        return self.components.pop(position)

    def index_of(self, component: Component) -> int:
        for i, c in enumerate(self.components):
            if c is component:
                return i
        raise TreeInvariantViolation(f"{component!r} is not a top-level component")

    def walk(self) -> Iterator[Component]:
        """Обход всех компонентов дерева в глубину (pre-order)."""
        stack = list(reversed(self.components))
        while stack:
            component = stack.pop()
            yield component
            for block in reversed(component.blocks):
                for child in reversed(block.children):
                    if isinstance(child, Component):
                        stack.append(child)

    def to_markup(self) -> str:
        return fold_markup(self)


# =============================================================================
# MARKUP FOLD
# =============================================================================


MarkupNode = Union[str, Block, Component, Expression]


def _markup_children(node: MarkupNode) -> Sequence[Union[str, Block, Component]]:
    if isinstance(node, Expression):
        return node.components
    if isinstance(node, Block):
        return node.children
    if isinstance(node, Component):
        # Слот может временно занимать FRAME (caret), поэтому Block или Component
        return node.blocks
    return ()


def _combine(node: MarkupNode, parts: Sequence[str]) -> str:
    if isinstance(node, Expression):
        return "".join(parts).strip()
    if isinstance(node, Block):
        if not node.children:
            return placeholder_markup(node.parent.color)
        return "".join(parts).strip()
    return node._combine_markup(parts)


def fold_markup(root: MarkupNode) -> str:
    """
    Markup узла как post-order свёртка по явному стеку.

    Каждый узел посещается дважды: при первом снятии со стека в стек кладутся
    его дети, при втором их готовый markup (последние len(children) значений
    results) собирается в markup узла.
    """
    results: List[str] = []
    stack: List[tuple] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, str):
            results.append(node)
            continue
        children = _markup_children(node)
        if not expanded:
            stack.append((node, True))
            for child in reversed(children):
                stack.append((child, False))
            continue
        start = len(results) - len(children)
        parts = results[start:]
        del results[start:]
        results.append(_combine(node, parts))
    return results[0]
