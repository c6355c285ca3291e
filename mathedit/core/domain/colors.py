"""
Colors — цвета placeholder'ов пустых блоков

Цвет назначается один раз при создании многоблочного (или цветного)
Component и используется только для отрисовки пустого блока.
На логику курсора цвет не влияет.

Генератор цвета передаётся в путь построения дерева явно
(вместо общего глобального состояния палитры).
"""

import random
from typing import Final, Optional, Protocol, Sequence, Tuple


# Фиксированная палитра из 11 цветов
COLOR_PALETTE: Final[Tuple[str, ...]] = (
    "red",
    "blue",
    "green",
    "black",
    "gray",
    "brown",
    "olive",
    "orange",
    "purple",
    "teal",
    "violet",
)


def color_for(counter: int, palette: Sequence[str] = COLOR_PALETTE) -> str:
    """Чистая функция счётчика: counter → цвет палитры."""
    return palette[counter % len(palette)]


class ColorGenerator(Protocol):
    """Источник цветов для новых компонентов."""

    def next_color(self) -> str: ...


class CyclicColorGenerator:
    """Детерминированный генератор: цвета палитры по кругу."""

    def __init__(self, palette: Sequence[str] = COLOR_PALETTE):
        if not palette:
            raise ValueError("palette cannot be empty")
        self.palette = tuple(palette)
        self._counter = 0

    def next_color(self) -> str:
        color = color_for(self._counter, self.palette)
        self._counter += 1
        return color


class RandomColorGenerator:
    """Случайный выбор цвета из палитры (seed для воспроизводимости)."""

    def __init__(
        self,
        seed: Optional[int] = None,
        palette: Sequence[str] = COLOR_PALETTE,
    ):
        if not palette:
            raise ValueError("palette cannot be empty")
        self.palette = tuple(palette)
        self._rng = random.Random(seed)

    def next_color(self) -> str:
        return self._rng.choice(self.palette)
