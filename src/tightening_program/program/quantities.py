from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar, Optional, Union


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Redondeo con la mitad exacta hacia arriba sobre el valor binario exacto
    (0.125 -> 0.13, 1.25 -> 1.3), igual que toFixed. round() es bancario.
    """
    q = Decimal(1).scaleb(-decimals)
    return float(Decimal(float(value)).quantize(q, rounding=ROUND_HALF_UP))


def _fixed(value: float, decimals: int) -> str:
    return f"{round_half_up(value, decimals):.{decimals}f}"


def _plain_number(value: float) -> str:
    """90.0 -> '90', 45.5 -> '45.5' (sin ceros de relleno)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass(frozen=True)
class Torque:
    """Valor de par (N·m). Se muestra siempre con 2 decimales."""
    value: float
    unit: ClassVar[str] = "Nm"

    def __str__(self) -> str:
        return f"{_fixed(self.value, 2)} {self.unit}"


@dataclass(frozen=True)
class Angle:
    """
    Valor angular (grados).
    decimals=None -> se muestra tal cual ('90°', '45.5°');
    decimals=n    -> n decimales fijos ('9.0°').
    """
    value: float
    decimals: Optional[int] = None
    unit: ClassVar[str] = "°"

    def __str__(self) -> str:
        if self.decimals is None:
            return f"{_plain_number(self.value)}{self.unit}"
        return f"{_fixed(self.value, self.decimals)}{self.unit}"


class NotApplicable:
    _instance: ClassVar[Optional["NotApplicable"]] = None

    def __new__(cls) -> "NotApplicable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"

    def __str__(self) -> str:
        return "N/A"


NOT_APPLICABLE = NotApplicable()

Quantity = Union[Torque, Angle, NotApplicable]


def format_tolerance(q: Quantity) -> str:
    if isinstance(q, NotApplicable):
        return str(q)
    return f"±{q}"


def quantity_value(q: Quantity) -> Optional[float]:
    """Valor numérico o None si no aplica."""
    if isinstance(q, NotApplicable):
        return None
    return q.value


def quantity_unit(q: Quantity) -> Optional[str]:
    if isinstance(q, NotApplicable):
        return None
    return q.unit


# ----------------------------
# Estrategia de cierre (último paso)
# ----------------------------

@dataclass(frozen=True)
class AngleClose:
    degrees: float


@dataclass(frozen=True)
class TorqueClose:
    torque: float


ClosingStrategy = Union[AngleClose, TorqueClose]
