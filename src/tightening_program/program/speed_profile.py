from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from tightening_program.program.errors import InvalidParameter, InvalidSpeedProfile


@dataclass(frozen=True)
class SpeedRange:
    """Rango de velocidad permitido (rpm) para una clase de tornillo."""
    min_rpm: float
    max_rpm: float

    def __post_init__(self):
        for name in ("min_rpm", "max_rpm"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, numbers.Real) or not math.isfinite(v):
                raise InvalidSpeedProfile(f"{name} must be a finite number, got {v!r}")
            if v <= 0:
                raise InvalidSpeedProfile(f"{name} must be positive, got {v!r}")
        if self.min_rpm >= self.max_rpm:
            raise InvalidSpeedProfile(
                f"min_rpm ({self.min_rpm}) must be lower than max_rpm ({self.max_rpm})"
            )


# Claves aceptadas en la configuración JSON: {"8.8": {"min": 50, "max": 200}}
_MIN_KEYS = ("min", "min_rpm")
_MAX_KEYS = ("max", "max_rpm")


def _pick(entry: Mapping[str, Any], keys, bolt_class: str) -> Any:
    for k in keys:
        if k in entry:
            return entry[k]
    raise InvalidSpeedProfile(f"Bolt class '{bolt_class}' has no '{keys[0]}' value")


@dataclass(frozen=True)
class SpeedProfile:
    """
    Tabla clase de tornillo -> SpeedRange.
    Inmutable: ranges se congela en __post_init__ (MappingProxyType).
    """
    ranges: Mapping[str, SpeedRange]

    def __post_init__(self):
        frozen: Dict[str, SpeedRange] = {}
        for bolt_class, rng in dict(self.ranges).items():
            label = str(bolt_class).strip()
            if not label:
                raise InvalidSpeedProfile("Bolt class label cannot be empty")
            if not isinstance(rng, SpeedRange):
                raise InvalidSpeedProfile(f"Bolt class '{label}' must map to a SpeedRange")
            if label in frozen:
                # ' 8.8' y '8.8' son la misma clase
                raise InvalidSpeedProfile(f"Bolt class '{label}' is defined more than once")
            frozen[label] = rng
        if not frozen:
            raise InvalidSpeedProfile("Speed profile must define at least one bolt class")
        object.__setattr__(self, "ranges", MappingProxyType(frozen))

    def __contains__(self, bolt_class: object) -> bool:
        return bolt_class in self.ranges

    def __len__(self) -> int:
        return len(self.ranges)

    def classes(self) -> List[str]:
        return list(self.ranges)

    def get(self, bolt_class: str) -> SpeedRange:
        try:
            return self.ranges[bolt_class]
        except (KeyError, TypeError):
            raise InvalidParameter(
                f"Unknown bolt class: {bolt_class!r}. Known classes: {self.classes()}",
                field="bolt_class",
            ) from None

    def merged(self, other: "SpeedProfile") -> "SpeedProfile":
        """Devuelve un perfil nuevo: self + other (other pisa las clases repetidas)."""
        ranges = dict(self.ranges)
        ranges.update(other.ranges)
        return SpeedProfile(ranges)

    @staticmethod
    def from_dict(payload: Mapping[str, Any]) -> "SpeedProfile":
        if not isinstance(payload, Mapping):
            raise InvalidSpeedProfile("Speed profile must be a JSON object keyed by bolt class")

        ranges: Dict[str, SpeedRange] = {}
        for bolt_class, entry in payload.items():
            if not isinstance(entry, Mapping):
                raise InvalidSpeedProfile(f"Bolt class '{bolt_class}' must map to an object with min/max")
            ranges[str(bolt_class)] = SpeedRange(
                min_rpm=_pick(entry, _MIN_KEYS, bolt_class),
                max_rpm=_pick(entry, _MAX_KEYS, bolt_class),
            )
        return SpeedProfile(ranges)

    @staticmethod
    def from_json(text: str) -> "SpeedProfile":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidSpeedProfile(f"Speed profile is not valid JSON: {e}") from e
        return SpeedProfile.from_dict(payload)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {k: {"min": r.min_rpm, "max": r.max_rpm} for k, r in self.ranges.items()}


DEFAULT_SPEED_PROFILE = SpeedProfile({
    "8.8": SpeedRange(min_rpm=50, max_rpm=200),
    "10.9": SpeedRange(min_rpm=30, max_rpm=150),
    "12.9": SpeedRange(min_rpm=20, max_rpm=100),
})
