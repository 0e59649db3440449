"""
Contract Validation Module

Модуль для валидации response envelope-ов источника данных.
"""

from .validators import (
    AccountsEnvelopeValidator,
    AtomsEnvelopeValidator,
    EnvelopeValidator,
    PositionsEnvelopeValidator,
    SchemaLoader,
)

__all__ = [
    "SchemaLoader",
    "EnvelopeValidator",
    "PositionsEnvelopeValidator",
    "AccountsEnvelopeValidator",
    "AtomsEnvelopeValidator",
]
