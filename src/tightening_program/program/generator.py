from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from tightening_program.program.parameters import ProcessParameters, validate_parameters
from tightening_program.program.quantities import (
    NOT_APPLICABLE,
    Angle,
    AngleClose,
    Quantity,
    Torque,
    TorqueClose,
    round_half_up,
)
from tightening_program.program.speed_profile import DEFAULT_SPEED_PROFILE, SpeedProfile, SpeedRange

logger = logging.getLogger(__name__)

TOLERANCE_RATIO = 0.1  # banda ±10 %
DEGREES_PER_TURN = 360.0


@dataclass(frozen=True)
class TighteningStep:
    step_index: int
    target: Quantity
    angle: Quantity
    speed_rpm: int
    tolerance: Quantity
    description: str


def _round_half_up(x: float) -> int:
    """Redondeo 'de toda la vida' (2.5 -> 3), no el bancario de round()."""
    return int(np.floor(x + 0.5))


def rundown_angle(params: ProcessParameters) -> int:
    """Grados necesarios para bajar el tornillo por su longitud efectiva (1 vuelta por paso)."""
    return _round_half_up((DEGREES_PER_TURN / params.pitch) * params.effective_length)


def _rundown_step(params: ProcessParameters, rng: SpeedRange) -> TighteningStep:
    # Sin resistencia todavía: par 0 y la velocidad más alta permitida
    return TighteningStep(
        step_index=1,
        target=Torque(0.0),
        angle=Angle(rundown_angle(params)),
        speed_rpm=_round_half_up(rng.max_rpm),
        tolerance=NOT_APPLICABLE,
        description="Rundown phase (fast)",
    )


def _intermediate_steps(params: ProcessParameters, rng: SpeedRange) -> List[TighteningStep]:
    remaining = params.step_count - 2
    if remaining <= 0:
        return []

    closing = params.closing
    i = np.arange(1, remaining + 1)

    if isinstance(closing, AngleClose):
        # Aproximación plana al par de asiento
        torques = np.full(remaining, float(params.snug_torque))
    else:
        torques = closing.torque / (remaining + 1) * i

    # La velocidad baja linealmente a medida que sube la resistencia
    speeds = np.maximum(rng.min_rpm, rng.max_rpm - i * ((rng.max_rpm - rng.min_rpm) / remaining))

    steps = []
    for k, torque, speed in zip(i, torques, speeds):
        steps.append(TighteningStep(
            step_index=int(k) + 1,
            target=Torque(round_half_up(float(torque), 2)),
            angle=NOT_APPLICABLE,
            speed_rpm=_round_half_up(speed),
            tolerance=Torque(round_half_up(float(torque) * TOLERANCE_RATIO, 2)),
            description=f"Torque step {int(k)}",
        ))
    return steps


def _final_step(params: ProcessParameters, rng: SpeedRange) -> TighteningStep:
    closing = params.closing
    speed = _round_half_up(rng.min_rpm)

    if isinstance(closing, AngleClose):
        return TighteningStep(
            step_index=int(params.step_count),
            target=Angle(closing.degrees),
            angle=Angle(closing.degrees),
            speed_rpm=speed,
            tolerance=Angle(round_half_up(closing.degrees * TOLERANCE_RATIO, 1), decimals=1),
            description="Final angle tightening (slow)",
        )

    if isinstance(closing, TorqueClose):
        return TighteningStep(
            step_index=int(params.step_count),
            target=Torque(round_half_up(float(closing.torque), 2)),
            angle=NOT_APPLICABLE,
            speed_rpm=speed,
            tolerance=Torque(round_half_up(closing.torque * TOLERANCE_RATIO, 2)),
            description="Final torque (slow)",
        )

    raise TypeError(f"Unsupported closing strategy: {closing!r}")


def generate(
    params: ProcessParameters,
    speed_profile: SpeedProfile = DEFAULT_SPEED_PROFILE,
) -> List[TighteningStep]:
    """
    Genera el programa de apriete:
      1) rundown rápido (par 0, max_rpm)
      2) pasos de par intermedios (step_count - 2), velocidad decreciente
      3) paso final por ángulo o por par (min_rpm)

    Todo o nada: si algún parámetro es inválido lanza InvalidParameter
    y no devuelve pasos.
    """
    validate_parameters(params, speed_profile)
    rng = speed_profile.get(params.bolt_class)

    program = [_rundown_step(params, rng)]
    program.extend(_intermediate_steps(params, rng))
    program.append(_final_step(params, rng))

    logger.debug(
        f"Generated {len(program)} steps for class {params.bolt_class} "
        f"({type(params.closing).__name__}, rundown {program[0].angle})"
    )
    return program
