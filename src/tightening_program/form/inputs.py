from __future__ import annotations

import numbers
import re
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from tightening_program.program.errors import InvalidParameter
from tightening_program.program.parameters import MIN_STEPS, ProcessParameters
from tightening_program.program.speed_profile import DEFAULT_SPEED_PROFILE, SpeedProfile


# Valores iniciales del formulario
DEFAULT_FORM_INPUTS: Dict[str, Any] = {
    "steps": 3,
    "boltLength": 50,
    "pitch": 1.5,
    "boltClass": "8.8",
    "partThickness": 10,
    "useAngle": False,
    "angleDegrees": 90,
    "snugTorque": 50,
    "finalTorque": 100,
}

# Campo del formulario -> campo de ProcessParameters
FIELD_MAP: Dict[str, str] = {
    "steps": "step_count",
    "boltLength": "bolt_length",
    "pitch": "pitch",
    "boltClass": "bolt_class",
    "partThickness": "part_thickness",
    "useAngle": "use_angle",
    "angleDegrees": "angle_degrees",
    "snugTorque": "snug_torque",
    "finalTorque": "final_torque",
}

_NULL_LITERALS = {"", "nan", "none", "null"}
_TRUE_LITERALS = {"true", "1", "yes", "on", "si", "sí"}
_FALSE_LITERALS = {"false", "0", "no", "off"}

_num_simple = re.compile(r"^[-+]?\d+(?:[.,]\d+)?$")


# --------- parsing helpers ---------

def to_float_normal(x: Any) -> float:
    """Parsea números tipo '12.34' o '12,34'. Devuelve NaN si no se puede."""
    if x is None or isinstance(x, bool):
        return np.nan
    if isinstance(x, numbers.Real):
        return float(x)
    s = str(x).strip()
    if not s or s.lower() in _NULL_LITERALS:
        return np.nan
    if _num_simple.match(s):
        return float(s.replace(",", "."))
    return np.nan


def to_bool(x: Any) -> bool:
    if isinstance(x, bool):
        return x
    s = str(x).strip().lower()
    if s in _TRUE_LITERALS:
        return True
    if s in _FALSE_LITERALS or s in _NULL_LITERALS:
        return False
    raise InvalidParameter(f"useAngle must be true/false, got {x!r}", field="use_angle")


def _number(raw: Mapping[str, Any], key: str) -> float:
    v = to_float_normal(raw[key])
    if np.isnan(v):
        raise InvalidParameter(f"{key} must be a number, got {raw[key]!r}", field=FIELD_MAP[key])
    return v


def _optional_number(raw: Mapping[str, Any], key: str, default: float) -> float:
    v = to_float_normal(raw[key])
    return default if np.isnan(v) else v


def _integer(raw: Mapping[str, Any], key: str) -> int:
    v = _number(raw, key)
    if not v.is_integer():
        raise InvalidParameter(f"{key} must be a whole number, got {raw[key]!r}", field=FIELD_MAP[key])
    return int(v)


def bolt_class_options(speed_profile: SpeedProfile = DEFAULT_SPEED_PROFILE) -> List[str]:
    """Opciones del selector de clase de tornillo."""
    return speed_profile.classes()


def parameters_from_form(
    raw: Optional[Mapping[str, Any]] = None,
    speed_profile: SpeedProfile = DEFAULT_SPEED_PROFILE,
) -> ProcessParameters:
    """
    Formulario (texto/números sueltos) -> ProcessParameters.
    - completa con DEFAULT_FORM_INPUTS lo que no venga
    - aplica las comprobaciones previas a generar (mínimo de pasos, espesor < longitud)
    Lanza InvalidParameter con el mensaje a mostrar al usuario.
    """
    unknown = [k for k in (raw or {}) if k not in DEFAULT_FORM_INPUTS]
    if unknown:
        raise InvalidParameter(f"Unknown form fields: {sorted(unknown)}")

    data = dict(DEFAULT_FORM_INPUTS)
    data.update(raw or {})

    steps = _integer(data, "steps")
    if steps < MIN_STEPS:
        raise InvalidParameter("Minimum 2 steps required (rundown + final step)", field="step_count")

    bolt_length = _number(data, "boltLength")
    part_thickness = _number(data, "partThickness")
    if part_thickness >= bolt_length:
        raise InvalidParameter("Part thickness must be less than bolt length", field="part_thickness")

    bolt_class = str(data["boltClass"]).strip()
    if bolt_class not in speed_profile:
        speed_profile.get(bolt_class)

    # Solo se exige el campo visible para la estrategia elegida
    use_angle = to_bool(data["useAngle"])
    if use_angle:
        angle_degrees = _number(data, "angleDegrees")
        final_torque = _optional_number(data, "finalTorque", 0.0)
    else:
        angle_degrees = _optional_number(data, "angleDegrees", float(DEFAULT_FORM_INPUTS["angleDegrees"]))
        final_torque = _number(data, "finalTorque")

    return ProcessParameters(
        step_count=steps,
        bolt_length=bolt_length,
        pitch=_number(data, "pitch"),
        bolt_class=bolt_class,
        part_thickness=part_thickness,
        use_angle=use_angle,
        angle_degrees=angle_degrees,
        snug_torque=_number(data, "snugTorque"),
        final_torque=final_torque,
    )
