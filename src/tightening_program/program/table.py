from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from tightening_program.program.generator import TighteningStep
from tightening_program.program.quantities import (
    format_tolerance,
    quantity_unit,
    quantity_value,
)


# ----------------------------
# Contrato de la tabla de programa
# ----------------------------

@dataclass(frozen=True)
class ProgramTableContract:
    """
    Columnas de la tabla que se entrega a la capa de presentación.
    - display_cols: vista con textos ya formateados ("50.00 Nm", "200 rpm")
    - numeric_cols: vista tipada para cálculo / export
    """

    display_cols: List[str] = None
    numeric_cols: List[str] = None
    dtype_map: Dict[str, str] = None

    def __post_init__(self):
        object.__setattr__(self, "display_cols", [
            "Step", "Target", "Angle", "Speed", "Tolerance", "Description",
        ])
        object.__setattr__(self, "numeric_cols", [
            "Step", "Target", "Target_Unit", "Angle", "Speed_rpm", "Tolerance", "Description",
        ])
        object.__setattr__(self, "dtype_map", {
            "Step": "Int64",
            "Target": "float64",
            "Target_Unit": "string",
            "Angle": "Float64",       # NA si no aplica
            "Speed_rpm": "Int64",
            "Tolerance": "Float64",   # NA en el rundown
            "Description": "string",
        })


PROGRAM_TABLE = ProgramTableContract()


def _display_row(step: TighteningStep) -> dict:
    return {
        "Step": step.step_index,
        "Target": str(step.target),
        "Angle": str(step.angle),
        "Speed": f"{step.speed_rpm} rpm",
        "Tolerance": format_tolerance(step.tolerance),
        "Description": step.description,
    }


def _numeric_row(step: TighteningStep) -> dict:
    return {
        "Step": step.step_index,
        "Target": quantity_value(step.target),
        "Target_Unit": quantity_unit(step.target),
        "Angle": quantity_value(step.angle),
        "Speed_rpm": step.speed_rpm,
        "Tolerance": quantity_value(step.tolerance),
        "Description": step.description,
    }


def program_to_df(program: Sequence[TighteningStep], *, numeric: bool = False) -> pd.DataFrame:
    """
    Programa -> DataFrame listo para pintar (numeric=False)
    o con columnas tipadas (numeric=True).
    """
    if numeric:
        df = pd.DataFrame([_numeric_row(s) for s in program], columns=PROGRAM_TABLE.numeric_cols)
    else:
        df = pd.DataFrame([_display_row(s) for s in program], columns=PROGRAM_TABLE.display_cols)
    return finalize_program_df(df)


# ----------------------------
# Validación / Enforcements
# ----------------------------

def _is_numeric_view(df: pd.DataFrame) -> bool:
    return "Speed_rpm" in df.columns


def validate_program_df(df: pd.DataFrame) -> None:
    """
    Valida que una tabla de programa cumple el contrato:
    - columnas requeridas (según la vista)
    - Step exactamente 1..n, sin huecos ni repetidos
    - velocidades positivas (solo vista numérica)
    """
    required = PROGRAM_TABLE.numeric_cols if _is_numeric_view(df) else PROGRAM_TABLE.display_cols
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Program table is missing required columns: {missing}")

    steps = pd.to_numeric(df["Step"], errors="coerce")
    expected = list(range(1, len(df) + 1))
    if steps.isna().any() or [int(s) for s in steps] != expected:
        raise ValueError(f"Program steps must be exactly 1..{len(df)}, got {list(df['Step'])}")

    if _is_numeric_view(df):
        bad = df["Speed_rpm"].isna() | (df["Speed_rpm"] <= 0)
        if bad.any():
            raise ValueError(f"Program table has {int(bad.sum())} steps without a positive speed")


def enforce_program_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    """Alinea dtypes de la vista numérica. La vista de texto solo fija Step."""
    out = df.copy()
    if not _is_numeric_view(out):
        out["Step"] = pd.to_numeric(out["Step"], errors="coerce").astype("Int64")
        return out

    for col, dtype in PROGRAM_TABLE.dtype_map.items():
        if col not in out.columns:
            continue
        if dtype == "string":
            out[col] = out[col].astype("string")
        else:
            out[col] = pd.to_numeric(out[col], errors="coerce").astype(dtype)
    return out


def enforce_program_order(df: pd.DataFrame) -> pd.DataFrame:
    preferred = PROGRAM_TABLE.numeric_cols if _is_numeric_view(df) else PROGRAM_TABLE.display_cols
    cols = list(df.columns)
    head = [c for c in preferred if c in cols]
    tail = [c for c in cols if c not in head]
    return df[head + tail]


def finalize_program_df(df: pd.DataFrame) -> pd.DataFrame:
    """dtypes + orden + validación del contrato."""
    out = enforce_program_dtypes(df)
    out = enforce_program_order(out)
    validate_program_df(out)
    return out
