"""
Tests for Palette Registry и JSON Schema контракта палитры

Проверяет:
- Валидность самой схемы palette.json
- Валидность палитры по умолчанию
- Детекцию нарушений контракта (required, pattern, arity, additionalProperties)
- Построение компонентов по идентификатору (symbol/function/template/matrix)
- Цвета из переданного генератора
- Регистрацию символов и функций на уровне экземпляра
"""

import copy
import json

import pytest
from jsonschema import ValidationError
from pydantic import ValidationError as ModelValidationError

from mathedit.core.contracts import PaletteValidator, SchemaLoader, validate_palette
from mathedit.core.domain import ComponentKind, CyclicColorGenerator, Template
from mathedit.palette import (
    DEFAULT_PALETTE_PATH,
    MATRIX_FAMILY,
    PaletteDocument,
    PaletteRegistry,
    UnknownPaletteEntry,
    default_palette,
    load_palette,
    parse_matrix_dimensions,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def palette_data():
    """Исходный JSON палитры по умолчанию."""
    with open(DEFAULT_PALETTE_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def minimal_palette():
    return {
        "schema_version": "1",
        "symbols": {"alpha": "\\alpha"},
        "functions": {"sqrt": {"arity": 1, "pattern": "\\sqrt{#1}"}},
        "template_families": {"one": {"arity": 1, "pattern": "\\@{#1}"}},
    }


@pytest.fixture
def registry():
    return PaletteRegistry(colors=CyclicColorGenerator())


PLACEHOLDER = "\\color{%s}{\\boxed{&#8200;}}"


# =============================================================================
# SCHEMA
# =============================================================================


class TestPaletteSchema:
    """Контракт palette.json"""

    def test_schema_loads(self) -> None:
        schema = SchemaLoader().load_schema("palette")
        assert schema["title"] == "Palette"

    def test_missing_schema(self) -> None:
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does-not-exist")

    def test_default_palette_is_valid(self, palette_data) -> None:
        validate_palette(palette_data)
        assert PaletteValidator().is_valid(palette_data)

    def test_minimal_palette_is_valid(self, minimal_palette) -> None:
        validate_palette(minimal_palette)

    @pytest.mark.parametrize("field", ["schema_version", "symbols", "functions", "template_families"])
    def test_missing_required_field(self, minimal_palette, field) -> None:
        del minimal_palette[field]
        with pytest.raises(ValidationError):
            validate_palette(minimal_palette)

    def test_wrong_schema_version(self, minimal_palette) -> None:
        minimal_palette["schema_version"] = "2"
        with pytest.raises(ValidationError):
            validate_palette(minimal_palette)

    def test_additional_top_level_field(self, minimal_palette) -> None:
        minimal_palette["extra"] = {}
        with pytest.raises(ValidationError):
            validate_palette(minimal_palette)

    def test_invalid_identifier(self, minimal_palette) -> None:
        minimal_palette["symbols"]["bad id"] = "\\beta"
        with pytest.raises(ValidationError):
            validate_palette(minimal_palette)

    @pytest.mark.parametrize("arity", [0, 4])
    def test_arity_out_of_range(self, minimal_palette, arity) -> None:
        minimal_palette["functions"]["sqrt"]["arity"] = arity
        with pytest.raises(ValidationError):
            validate_palette(minimal_palette)

    def test_family_without_command_placeholder(self, minimal_palette) -> None:
        minimal_palette["template_families"]["one"]["pattern"] = "\\sqrt{#1}"
        with pytest.raises(ValidationError):
            validate_palette(minimal_palette)

    def test_collects_all_errors(self, minimal_palette) -> None:
        minimal_palette["schema_version"] = "0"
        minimal_palette["symbols"]["alpha"] = ""
        errors = list(PaletteValidator().iter_errors(minimal_palette))
        assert len(errors) == 2


# =============================================================================
# DOCUMENT
# =============================================================================


class TestPaletteDocument:
    """Разбор документа палитры в модели"""

    def test_from_dict(self, minimal_palette) -> None:
        document = PaletteDocument.from_dict(minimal_palette)
        assert document.functions["sqrt"] == Template(name="sqrt", arity=1, pattern="\\sqrt{#1}")
        assert document.template_families["one"].bind("vec").pattern == "\\vec{#1}"

    def test_arity_mismatch_caught_by_model(self, minimal_palette) -> None:
        """Схема пропускает, модель проверяет набор #1..#n"""
        minimal_palette["functions"]["sqrt"] = {"arity": 2, "pattern": "\\sqrt{#1}"}
        validate_palette(minimal_palette)
        with pytest.raises(ModelValidationError):
            PaletteDocument.from_dict(minimal_palette)

    def test_schema_violation_raised_before_models(self, minimal_palette) -> None:
        minimal_palette["schema_version"] = "2"
        with pytest.raises(ValidationError):
            PaletteDocument.from_dict(minimal_palette)

    def test_load_palette(self, tmp_path, minimal_palette) -> None:
        path = tmp_path / "palette.json"
        path.write_text(json.dumps(minimal_palette), encoding="utf-8")
        document = load_palette(path)
        assert document.symbols == {"alpha": "\\alpha"}

    def test_default_palette_is_cached(self) -> None:
        assert default_palette() is default_palette()

    def test_default_palette_contents(self) -> None:
        document = default_palette()
        assert document.schema_version == "1"
        assert document.symbols["alpha"] == "\\alpha"
        assert document.functions["nsqrt"].pattern == "\\sqrt[#1]{#2}"
        assert set(document.template_families) == {
            "one",
            "two",
            "twoc",
            "three",
            "trigonometric",
            "under",
            "over-under",
        }


# =============================================================================
# REGISTRY
# =============================================================================


class TestMatrixDimensions:
    """Разбор размера матрицы"""

    @pytest.mark.parametrize("text,expected", [("2x3", (2, 3)), ("1x1", (1, 1)), (" 3 x 4 ", (3, 4))])
    def test_valid(self, text, expected) -> None:
        assert parse_matrix_dimensions(text) == expected

    @pytest.mark.parametrize("text", ["", "2", "2x", "x3", "0x2", "2x0", "-1x2", "2*3"])
    def test_invalid(self, text) -> None:
        with pytest.raises(ValueError):
            parse_matrix_dimensions(text)


class TestPaletteRegistry:
    """Построение компонентов по идентификатору"""

    def test_symbol(self, registry) -> None:
        component = registry.symbol("alpha")
        assert component.kind == ComponentKind.SYMBOL
        assert component.to_markup() == "\\alpha "

    def test_symbol_does_not_consume_color(self, registry) -> None:
        registry.symbol("alpha")
        assert registry.function("sqrt").color == "red"

    def test_function(self, registry) -> None:
        component = registry.function("sqrt")
        assert component.kind == ComponentKind.TEMPLATE
        assert len(component.blocks) == 1
        assert component.to_markup() == "\\sqrt{" + PLACEHOLDER % "red" + "}"

    def test_function_colors_cycle(self, registry) -> None:
        assert registry.function("sqrt").color == "red"
        assert registry.function("nsqrt").color == "blue"
        assert registry.function("lim").color == "green"

    def test_template_family(self, registry) -> None:
        component = registry.template("twoc", "dfrac")
        assert len(component.blocks) == 2
        component.blocks[0].add_child("a")
        component.blocks[1].add_child("b")
        assert component.to_markup() == "\\dfrac{a}{b}"

    def test_trigonometric_family(self, registry) -> None:
        component = registry.template("trigonometric", "sin")
        component.blocks[0].add_child("2")
        component.blocks[1].add_child("x")
        assert component.to_markup() == "\\sin^{2}{x}"

    def test_matrix_family(self, registry) -> None:
        component = registry.template(MATRIX_FAMILY, "2x2")
        assert component.kind == ComponentKind.MATRIX
        assert len(component.blocks) == 4

    def test_matrix(self, registry) -> None:
        component = registry.matrix("1x2")
        red = PLACEHOLDER % "red"
        assert component.to_markup() == "\\begin{matrix}" + red + " & " + red + "\\end{matrix}"

    def test_unknown_symbol(self, registry) -> None:
        with pytest.raises(UnknownPaletteEntry):
            registry.symbol("no-such-symbol")

    def test_unknown_function(self, registry) -> None:
        with pytest.raises(UnknownPaletteEntry):
            registry.function("no-such-function")

    def test_unknown_family(self, registry) -> None:
        with pytest.raises(UnknownPaletteEntry):
            registry.template("no-such-family", "x")

    def test_unknown_entry_is_key_error(self, registry) -> None:
        with pytest.raises(KeyError):
            registry.symbol("no-such-symbol")

    def test_identifiers(self, registry) -> None:
        assert "alpha" in registry.symbol_identifiers()
        assert "sqrt" in registry.function_identifiers()
        assert MATRIX_FAMILY in registry.family_identifiers()
        assert registry.symbol_identifiers() == sorted(registry.symbol_identifiers())

    def test_has(self, registry) -> None:
        assert registry.has_symbol("pi")
        assert not registry.has_symbol("sqrt")
        assert registry.has_function("sqrt")


class TestRegistration:
    """Регистрация записей на уровне экземпляра"""

    def test_register_symbol(self, registry) -> None:
        registry.register_symbol("planck", "\\hbar")
        assert registry.symbol("planck").to_markup() == "\\hbar "

    def test_register_symbol_requires_latex(self, registry) -> None:
        with pytest.raises(ValueError):
            registry.register_symbol("empty", "")

    def test_register_function(self, registry) -> None:
        registry.register_function("abs", Template(name="abs", arity=1, pattern="\\left|#1\\right|"))
        component = registry.function("abs")
        component.blocks[0].add_child("x")
        assert component.to_markup() == "\\left|x\\right|"

    def test_registration_is_instance_local(self, registry) -> None:
        registry.register_symbol("planck", "\\hbar")
        other = PaletteRegistry()
        assert not other.has_symbol("planck")
        assert not default_palette().symbols.get("planck")

    def test_custom_document(self, minimal_palette) -> None:
        document = PaletteDocument.from_dict(copy.deepcopy(minimal_palette))
        registry = PaletteRegistry(document=document)
        assert registry.symbol_identifiers() == ["alpha"]
        assert registry.family_identifiers() == ["one", MATRIX_FAMILY]
