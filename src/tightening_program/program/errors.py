from __future__ import annotations

from typing import Optional


class InvalidParameter(ValueError):
    """Parámetro de proceso inválido (clase de tornillo, pasos, geometría...)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidSpeedProfile(ValueError):
    pass
