"""
Templates — markup-шаблоны вариантов Component

Все шаблонные варианты отличаются только фиксированной строкой и порядком
блоков в ней, поэтому вместо иерархии классов используется один Component
с тегом варианта (ComponentKind) и небольшим дескриптором шаблона.

Синтаксис шаблона:
- #1, #2, #3 — отрендеренное содержимое блока с данным номером (как аргументы макроса LaTeX)
- @          — имя команды (только в TemplateFamily, подставляется при bind)

Пример:
    Template(name="nsqrt", arity=2, pattern="\\sqrt[#1]{#2}")
    → \\sqrt[<block 1>]{<block 2>}

Строка шаблона является частью внешнего контракта (её разбирает рендерер),
поэтому должна совпадать символ в символ.
"""

import re
from enum import Enum
from typing import Final, List, Sequence

from pydantic import BaseModel, Field, field_validator


# Placeholder блока: #1..#9
SLOT_PATTERN: Final[re.Pattern] = re.compile(r"#([1-9])")

# Placeholder команды в семействе шаблонов
COMMAND_PLACEHOLDER: Final[str] = "@"

# Максимальная арность шаблонного варианта (matrix задаётся отдельно)
TEMPLATE_MAX_ARITY: Final[int] = 3


# =============================================================================
# ENUMS
# =============================================================================


class ComponentKind(str, Enum):
    """Вариант Component."""

    TEXT = "text"
    SYMBOL = "symbol"
    TEMPLATE = "template"
    MATRIX = "matrix"
    FRAME = "frame"

    @property
    def is_leaf(self) -> bool:
        """Листовые варианты никогда не становятся контейнером курсора."""
        return self in (ComponentKind.TEXT, ComponentKind.SYMBOL)


# =============================================================================
# TEMPLATE MODELS
# =============================================================================


def _slot_numbers(pattern: str) -> List[int]:
    return sorted({int(m) for m in SLOT_PATTERN.findall(pattern)})


class Template(BaseModel):
    """
    Дескриптор шаблонного варианта: арность + markup-строка.

    Immutable модель (frozen=True).
    Каждый блок 1..arity должен встречаться в pattern, других номеров быть не должно.
    """

    name: str = Field(..., min_length=1, description="Идентификатор шаблона (например, 'sqrt')")
    arity: int = Field(..., ge=1, le=TEMPLATE_MAX_ARITY, description="Количество блоков")
    pattern: str = Field(..., min_length=1, description="Markup-строка с #1..#n")

    model_config = {"frozen": True}

    @field_validator("pattern")
    @classmethod
    def validate_slots(cls, v: str, info) -> str:
        """Набор placeholder'ов должен быть ровно {1..arity}."""
        if "arity" not in info.data:
            return v
        arity = info.data["arity"]
        expected = list(range(1, arity + 1))
        found = _slot_numbers(v)
        if found != expected:
            raise ValueError(
                f"pattern {v!r} must reference blocks {expected}, found {found}"
            )
        if COMMAND_PLACEHOLDER in v:
            raise ValueError(f"pattern {v!r} contains unbound command placeholder")
        return v

    def render(self, parts: Sequence[str]) -> str:
        """
        Подстановка отрендеренных блоков в шаблон.

        Args:
            parts: Markup каждого блока (len == arity)

        Returns:
            Markup компонента
        """
        if len(parts) != self.arity:
            raise ValueError(f"{self.name}: expected {self.arity} parts, got {len(parts)}")
        # Подстановка функцией: содержимое блоков не интерпретируется как шаблон
        return SLOT_PATTERN.sub(lambda m: parts[int(m.group(1)) - 1], self.pattern)


class TemplateFamily(BaseModel):
    """
    Семейство шаблонов с параметром-командой.

    Пример: family "one" с pattern "\\@{#1}" и командой "overrightarrow"
    даёт Template "\\overrightarrow{#1}".
    """

    name: str = Field(..., min_length=1)
    arity: int = Field(..., ge=1, le=TEMPLATE_MAX_ARITY)
    pattern: str = Field(..., min_length=1)

    model_config = {"frozen": True}

    @field_validator("pattern")
    @classmethod
    def validate_command_placeholder(cls, v: str, info) -> str:
        if v.count(COMMAND_PLACEHOLDER) != 1:
            raise ValueError(f"family pattern {v!r} must contain exactly one '{COMMAND_PLACEHOLDER}'")
        if "arity" in info.data:
            expected = list(range(1, info.data["arity"] + 1))
            found = _slot_numbers(v)
            if found != expected:
                raise ValueError(
                    f"family pattern {v!r} must reference blocks {expected}, found {found}"
                )
        return v

    def bind(self, command: str) -> Template:
        """Подстановка команды → готовый Template."""
        if not command:
            raise ValueError(f"{self.name}: command cannot be empty")
        return Template(
            name=f"{self.name}:{command}",
            arity=self.arity,
            pattern=self.pattern.replace(COMMAND_PLACEHOLDER, command),
        )
