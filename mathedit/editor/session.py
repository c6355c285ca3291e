"""
Editor Session — хост-объект редактора

Связывает слой ввода (внешний), Cursor и рендерер (внешний):
1. Слой ввода вызывает intent-метод (insert_symbol, seek_left, ...)
2. Intent выполняется на Cursor синхронно
3. Display-markup (с caret, в math-разделителях) передаётся в render(markup)

Рендер — fire and forget: сессия не ждёт и не зависит от результата,
ошибка рендерера логируется и не влияет на состояние документа.

История: при clear()/commit() текущее Expression целиком уходит в history,
его место занимает новое пустое выражение.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from mathedit.core.domain.colors import ColorGenerator, CyclicColorGenerator, RandomColorGenerator
from mathedit.core.domain.tree import Component, Expression
from mathedit.cursor.caret import DEFAULT_CARET_GLYPH, render_with_caret
from mathedit.cursor.state_machine import Cursor
from mathedit.palette.registry import PaletteRegistry

logger = logging.getLogger(__name__)


RenderCallback = Callable[[str], None]
CommitCallback = Callable[[str, "EditorSession"], None]


@dataclass(frozen=True)
class EditorConfig:
    """Конфигурация сессии редактора.

    - math_delimiter: разделитель display-markup для рендерера
    - caret_glyph: глиф caret
    - color_seed: None → цвета палитры по кругу, int → случайные цвета с seed
    """
    math_delimiter: str = "$$"
    caret_glyph: str = DEFAULT_CARET_GLYPH
    color_seed: Optional[int] = None

    def make_color_generator(self) -> ColorGenerator:
        if self.color_seed is None:
            return CyclicColorGenerator()
        return RandomColorGenerator(seed=self.color_seed)


class EditorSession:
    """Сессия редактирования одного выражения с историей."""

    def __init__(
        self,
        render: Optional[RenderCallback] = None,
        on_commit: Optional[CommitCallback] = None,
        config: Optional[EditorConfig] = None,
        palette: Optional[PaletteRegistry] = None,
    ):
        self.config = config or EditorConfig()
        self.palette = palette or PaletteRegistry(colors=self.config.make_color_generator())
        self.render = render
        self.on_commit = on_commit

        self.history: List[Expression] = []
        self.expression = Expression()
        self.cursor = Cursor(self.expression)

    # =========================================================================
    # Edit intents
    # =========================================================================

    def insert_text(self, text: str) -> None:
        self.cursor.insert_text(text)
        self.update_display()

    def insert_component(self, component: Component) -> None:
        self.cursor.insert_component(component)
        self.update_display()

    def insert_symbol(self, identifier: str) -> None:
        """Символ палитры по идентификатору (например, 'alpha')."""
        self.insert_component(self.palette.symbol(identifier))

    def insert_function(self, identifier: str) -> None:
        """Функция палитры по идентификатору (например, 'sqrt', 'nsqrt')."""
        self.insert_component(self.palette.function(identifier))

    def insert_template(self, family: str, latex_data: str) -> None:
        """Шаблон из семейства (например, ('twoc', 'dfrac') или ('matrix', '2x2'))."""
        self.insert_component(self.palette.template(family, latex_data))

    def insert_matrix(self, dimensions: str) -> None:
        self.insert_component(self.palette.matrix(dimensions))

    def seek_left(self) -> bool:
        moved = self.cursor.seek_left()
        self.update_display()
        return moved

    def seek_right(self) -> bool:
        moved = self.cursor.seek_right()
        self.update_display()
        return moved

    def delete_backward(self) -> bool:
        changed = self.cursor.delete_backward()
        self.update_display()
        return changed

    # =========================================================================
    # Markup & rendering
    # =========================================================================

    def get_markup(self) -> str:
        """Markup выражения без caret."""
        return self.cursor.to_markup()

    def display_markup(self) -> str:
        """Markup для рендерера: caret + рамка текущего блока, в math-разделителях."""
        delimiter = self.config.math_delimiter
        return delimiter + render_with_caret(self.cursor, self.config.caret_glyph) + delimiter

    def update_display(self) -> None:
        if self.render is None:
            return
        markup = self.display_markup()
        try:
            self.render(markup)
        except Exception:
            logger.exception("render collaborator failed for markup %r", markup)

    # =========================================================================
    # History
    # =========================================================================

    def clear(self) -> None:
        """Текущее выражение → history, курсор в начало нового пустого выражения."""
        self.history.append(self.expression)
        self.expression = Expression()
        self.cursor.reset(self.expression)
        logger.info("expression cleared, history size=%d", len(self.history))
        self.update_display()

    def commit(self) -> str:
        """
        Сохранение выражения: on_commit(markup, session), затем clear().

        Returns:
            Markup сохранённого выражения
        """
        markup = self.get_markup()
        if self.on_commit is not None:
            self.on_commit(markup, self)
        logger.info("expression committed: %r", markup)
        self.clear()
        return markup
