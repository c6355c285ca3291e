"""
Contract Validation Module

Модуль для валидации JSON контрактов mathedit (документ палитры).
"""

from .validators import (
    ContractValidator,
    PaletteValidator,
    SchemaLoader,
    validate_palette,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PaletteValidator",
    # Functions
    "validate_palette",
]
