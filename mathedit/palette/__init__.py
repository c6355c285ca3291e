"""Palette — таблица символов, функций и семейств шаблонов редактора."""

from .registry import (
    DEFAULT_PALETTE_PATH,
    MATRIX_FAMILY,
    PaletteDocument,
    PaletteRegistry,
    UnknownPaletteEntry,
    default_palette,
    load_palette,
    parse_matrix_dimensions,
)

__all__ = [
    "DEFAULT_PALETTE_PATH",
    "MATRIX_FAMILY",
    "PaletteDocument",
    "PaletteRegistry",
    "UnknownPaletteEntry",
    "default_palette",
    "load_palette",
    "parse_matrix_dimensions",
]
