"""
Palette Registry — таблица идентификатор → вариант Component

Registry отображает идентификатор кнопки палитры (или действия клавиатуры)
в конструктор варианта Component:
- symbols           : идентификатор → литеральный markup (SYMBOL, 0 блоков)
- functions         : идентификатор → Template (TEMPLATE, 1..3 блока)
- template_families : семейство → TemplateFamily, команда передаётся при вставке
- matrix            : "RxC" → MATRIX (rows×cols блоков)

Палитра по умолчанию поставляется как версионированный JSON документ
(data/default_palette.json), проверяемый JSON Schema контрактом palette.json.

Cursor получает уже построенный Component и с registry напрямую не работает.
"""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Final, List, Optional

from pydantic import BaseModel, Field

from mathedit.core.contracts import validate_palette
from mathedit.core.domain.colors import ColorGenerator, CyclicColorGenerator
from mathedit.core.domain.templates import Template, TemplateFamily
from mathedit.core.domain.tree import Component

logger = logging.getLogger(__name__)


DEFAULT_PALETTE_PATH: Final[Path] = Path(__file__).parent / "data" / "default_palette.json"

# Семейство для матриц: latex_data задаёт размер "<rows>x<cols>"
MATRIX_FAMILY: Final[str] = "matrix"

_MATRIX_DIMENSIONS: Final[re.Pattern] = re.compile(r"^\s*(\d+)\s*x\s*(\d+)\s*$")


# =============================================================================
# EXCEPTIONS
# =============================================================================


class UnknownPaletteEntry(KeyError):
    """Идентификатор отсутствует в палитре (ошибка слоя ввода, не курсора)."""
    pass


# =============================================================================
# PALETTE DOCUMENT
# =============================================================================


class PaletteDocument(BaseModel):
    """
    Разобранный документ палитры.

    Immutable модель (frozen=True).
    """

    schema_version: str = Field(..., description="Версия markup-контракта")
    symbols: Dict[str, str] = Field(default_factory=dict, description="Идентификатор → литерал")
    functions: Dict[str, Template] = Field(default_factory=dict, description="Шаблоны функций")
    template_families: Dict[str, TemplateFamily] = Field(
        default_factory=dict, description="Семейства шаблонов с командой"
    )

    model_config = {"frozen": True}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaletteDocument":
        """
        Валидация по JSON Schema и построение моделей.

        Raises:
            jsonschema.ValidationError: Документ не соответствует контракту
            pydantic.ValidationError: Шаблон не согласован со своей арностью
        """
        validate_palette(data)
        return cls(
            schema_version=data["schema_version"],
            symbols=data["symbols"],
            functions={
                name: Template(name=name, **entry) for name, entry in data["functions"].items()
            },
            template_families={
                name: TemplateFamily(name=name, **entry)
                for name, entry in data["template_families"].items()
            },
        )


def load_palette(path: Path = DEFAULT_PALETTE_PATH) -> PaletteDocument:
    """Загрузка и валидация документа палитры из JSON файла."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    document = PaletteDocument.from_dict(data)
    logger.debug(
        "palette loaded from %s: %d symbols, %d functions, %d families",
        path,
        len(document.symbols),
        len(document.functions),
        len(document.template_families),
    )
    return document


@lru_cache(maxsize=1)
def default_palette() -> PaletteDocument:
    """Палитра по умолчанию (загружается один раз)."""
    return load_palette(DEFAULT_PALETTE_PATH)


def parse_matrix_dimensions(dimensions: str) -> tuple[int, int]:
    """
    Разбор размера матрицы.

    Examples:
        >>> parse_matrix_dimensions("2x3")
        (2, 3)

    Raises:
        ValueError: Если строка не вида "<rows>x<cols>" с положительными числами
    """
    match = _MATRIX_DIMENSIONS.match(dimensions)
    if match is None:
        raise ValueError(f"matrix dimensions must look like '<rows>x<cols>', got {dimensions!r}")
    rows, cols = int(match.group(1)), int(match.group(2))
    if rows < 1 or cols < 1:
        raise ValueError(f"matrix dimensions must be positive, got {dimensions!r}")
    return rows, cols


# =============================================================================
# REGISTRY
# =============================================================================


class PaletteRegistry:
    """
    Lookup-таблица палитры.

    Таблицы копируются из документа: register_* меняет только этот экземпляр.
    Генератор цветов передаётся явно (по умолчанию — CyclicColorGenerator).
    """

    def __init__(
        self,
        document: Optional[PaletteDocument] = None,
        colors: Optional[ColorGenerator] = None,
    ):
        document = document or default_palette()
        self.schema_version = document.schema_version
        self.colors = colors or CyclicColorGenerator()
        self._symbols: Dict[str, str] = dict(document.symbols)
        self._functions: Dict[str, Template] = dict(document.functions)
        self._families: Dict[str, TemplateFamily] = dict(document.template_families)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def has_symbol(self, identifier: str) -> bool:
        return identifier in self._symbols

    def has_function(self, identifier: str) -> bool:
        return identifier in self._functions

    def symbol_identifiers(self) -> List[str]:
        return sorted(self._symbols)

    def function_identifiers(self) -> List[str]:
        return sorted(self._functions)

    def family_identifiers(self) -> List[str]:
        return sorted(self._families) + [MATRIX_FAMILY]

    def symbol_latex(self, identifier: str) -> str:
        try:
            return self._symbols[identifier]
        except KeyError:
            raise UnknownPaletteEntry(f"unknown symbol: {identifier!r}") from None

    def function_template(self, identifier: str) -> Template:
        try:
            return self._functions[identifier]
        except KeyError:
            raise UnknownPaletteEntry(f"unknown function: {identifier!r}") from None

    # -------------------------------------------------------------------------
    # Конструкторы компонентов
    # -------------------------------------------------------------------------

    def symbol(self, identifier: str) -> Component:
        """SYMBOL компонент по идентификатору (например, 'alpha' → '\\alpha')."""
        return Component.symbol(self.symbol_latex(identifier))

    def function(self, identifier: str) -> Component:
        """TEMPLATE компонент по идентификатору функции (например, 'sqrt')."""
        return Component.from_template(self.function_template(identifier), self.colors.next_color())

    def template(self, family: str, latex_data: str) -> Component:
        """
        Компонент из семейства шаблонов.

        Args:
            family: Имя семейства ('one', 'two', 'twoc', 'three', 'trigonometric',
                'under', 'over-under' или 'matrix')
            latex_data: Команда LaTeX без ведущего '\\' (для 'matrix' — размер "RxC")
        """
        if family == MATRIX_FAMILY:
            return self.matrix(latex_data)
        try:
            template_family = self._families[family]
        except KeyError:
            raise UnknownPaletteEntry(f"unknown template family: {family!r}") from None
        return Component.from_template(template_family.bind(latex_data), self.colors.next_color())

    def matrix(self, dimensions: str) -> Component:
        rows, cols = parse_matrix_dimensions(dimensions)
        return Component.matrix(rows, cols, self.colors.next_color())

    # -------------------------------------------------------------------------
    # Регистрация
    # -------------------------------------------------------------------------

    def register_symbol(self, identifier: str, latex: str) -> None:
        """Добавление символа, которого нет в палитре по умолчанию."""
        if not latex:
            raise ValueError(f"symbol {identifier!r} requires latex")
        if identifier in self._symbols:
            logger.debug("symbol %r overridden: %r → %r", identifier, self._symbols[identifier], latex)
        self._symbols[identifier] = latex

    def register_function(self, identifier: str, template: Template) -> None:
        """Добавление шаблона функции, которого нет в палитре по умолчанию."""
        if identifier in self._functions:
            logger.debug("function %r overridden", identifier)
        self._functions[identifier] = template
