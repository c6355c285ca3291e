"""
Address — адресация позиции курсора

Позиция курсора в последовательности (верхний уровень Expression или
children текущего Block) исторически задаётся полуцелым числом:
- целое N       → "на элементе N" (транзитное состояние при навигации)
- N - 0.5       → "в промежутке перед элементом N" (единственное устойчивое состояние)

Вместо float используются два явных типа, чтобы floor/ceil были точными:
- Gap(index)       ≡ index - 0.5
- OnElement(index) ≡ index

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. left == floor(value), right == ceil(value)
2. half_step_right(half_step_left(a)) == a
3. Gap(0) — начало последовательности (value == -0.5)
"""

import math
from dataclasses import dataclass
from typing import Union


# =============================================================================
# ADDRESS TYPES
# =============================================================================


@dataclass(frozen=True)
class Gap:
    """Промежуток перед элементом `index` (value = index - 0.5)."""

    index: int

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Gap index must be non-negative, got {self.index}")

    @property
    def value(self) -> float:
        return self.index - 0.5

    @property
    def left(self) -> int:
        """Индекс элемента слева от промежутка (-1 если слева ничего нет)."""
        return self.index - 1

    @property
    def right(self) -> int:
        """Индекс элемента справа от промежутка (позиция вставки)."""
        return self.index

    def step_left(self) -> "Gap":
        return Gap(self.index - 1)

    def step_right(self) -> "Gap":
        return Gap(self.index + 1)

    def half_step_left(self) -> "OnElement":
        return OnElement(self.index - 1)

    def half_step_right(self) -> "OnElement":
        return OnElement(self.index)


@dataclass(frozen=True)
class OnElement:
    """Позиция "на элементе" `index` (value = index)."""

    index: int

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"OnElement index must be non-negative, got {self.index}")

    @property
    def value(self) -> float:
        return float(self.index)

    @property
    def left(self) -> int:
        return self.index

    @property
    def right(self) -> int:
        return self.index

    def half_step_left(self) -> Gap:
        return Gap(self.index)

    def half_step_right(self) -> Gap:
        return Gap(self.index + 1)


Address = Union[Gap, OnElement]

# Начальный адрес: перед первым элементом
START: Gap = Gap(0)


# =============================================================================
# CONVERSION
# =============================================================================


def address_from_value(value: float) -> Address:
    """
    Конверсия полуцелого значения в типизированный адрес.

    Args:
        value: Целое (OnElement) или полуцелое (Gap) число

    Returns:
        Gap или OnElement

    Raises:
        ValueError: Если value не целое и не полуцелое

    Examples:
        >>> address_from_value(-0.5)
        Gap(index=0)
        >>> address_from_value(2)
        OnElement(index=2)
    """
    if not math.isfinite(value):
        raise ValueError(f"Address value must be finite, got {value}")
    doubled = value * 2
    if doubled != math.floor(doubled):
        raise ValueError(f"Address value must be integer or half-integer, got {value}")
    if value == math.floor(value):
        return OnElement(int(value))
    return Gap(math.ceil(value))
