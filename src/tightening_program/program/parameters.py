from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

from tightening_program.program.errors import InvalidParameter
from tightening_program.program.quantities import AngleClose, ClosingStrategy, TorqueClose
from tightening_program.program.speed_profile import SpeedProfile

MIN_STEPS = 2  # rundown + paso final


@dataclass(frozen=True)
class ProcessParameters:
    """
    Parámetros de proceso de un programa de apriete.
    Longitudes en mm, pares en N·m, ángulo en grados.
    """
    step_count: int
    bolt_length: float
    pitch: float
    bolt_class: str
    part_thickness: float
    use_angle: bool = False
    angle_degrees: float = 90.0
    snug_torque: float = 0.0
    final_torque: float = 0.0

    @property
    def closing(self) -> ClosingStrategy:
        if self.use_angle:
            return AngleClose(degrees=self.angle_degrees)
        return TorqueClose(torque=self.final_torque)

    @property
    def effective_length(self) -> float:
        """Longitud de rosca libre que recorre el rundown."""
        return self.bolt_length - self.part_thickness


def _require_number(value, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidParameter(f"{field} must be a finite number, got {value!r}", field=field)
    return float(value)


def _require_positive(value, field: str) -> None:
    if _require_number(value, field) <= 0:
        raise InvalidParameter(f"{field} must be positive, got {value!r}", field=field)


def _require_non_negative(value, field: str) -> None:
    if _require_number(value, field) < 0:
        raise InvalidParameter(f"{field} cannot be negative, got {value!r}", field=field)


def validate_parameters(params: ProcessParameters, speed_profile: SpeedProfile) -> None:
    """
    Revalida las precondiciones antes de generar.
    Falla con InvalidParameter en el primer problema encontrado.
    """
    sc = params.step_count
    if isinstance(sc, bool) or not isinstance(sc, numbers.Integral):
        raise InvalidParameter(f"step_count must be an integer, got {sc!r}", field="step_count")
    if sc < MIN_STEPS:
        raise InvalidParameter("Minimum 2 steps required (rundown + final step)", field="step_count")

    _require_positive(params.bolt_length, "bolt_length")
    _require_positive(params.part_thickness, "part_thickness")
    _require_positive(params.pitch, "pitch")
    if params.part_thickness >= params.bolt_length:
        raise InvalidParameter("Part thickness must be less than bolt length", field="part_thickness")

    if params.bolt_class not in speed_profile:
        # get() construye el mensaje con las clases conocidas
        speed_profile.get(params.bolt_class)

    _require_non_negative(params.snug_torque, "snug_torque")
    _require_non_negative(params.final_torque, "final_torque")
    if params.use_angle:
        _require_positive(params.angle_degrees, "angle_degrees")
