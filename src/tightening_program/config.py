from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from tightening_program.cache import CacheURL
from tightening_program.program.speed_profile import DEFAULT_SPEED_PROFILE, SpeedProfile

logger = logging.getLogger(__name__)

# Raíz del repo: .../tightening_program
PROJECT_ROOT = Path(__file__).resolve().parents[2]

CONFIG_DIR = PROJECT_ROOT / "config"
SPEED_PROFILE_ENV = "TIGHTENING_SPEED_PROFILE"
URL_PREFIXES = ("http://", "https://")


def is_url(source: Union[str, Path]) -> bool:
    return isinstance(source, str) and source.lower().startswith(URL_PREFIXES)


def resolve_profile_path(source: Union[str, Path], config_dir: Path = CONFIG_DIR) -> Path:
    """
    Ruta del JSON de velocidades. Las relativas se buscan primero en el
    directorio actual y después en config_dir.
    """
    path = Path(source).expanduser()
    if path.is_file():
        return path
    if not path.is_absolute() and (config_dir / path).is_file():
        return config_dir / path
    raise FileNotFoundError(f"Speed profile file not found: {source}")


def load_speed_profile(
    source: Optional[Union[str, Path]] = None,
    *,
    merge_default: bool = False,
    cache: Optional[CacheURL] = None,
    config_dir: Path = CONFIG_DIR,
) -> SpeedProfile:
    """
    Carga la tabla clase de tornillo -> rpm.
    Orden: source explícito -> variable TIGHTENING_SPEED_PROFILE -> tabla por defecto.
    source puede ser una URL http(s) (se cachea) o un fichero JSON.
    merge_default=True superpone la tabla cargada sobre la de por defecto.
    """
    if source is None:
        source = os.environ.get(SPEED_PROFILE_ENV) or None
    if source is None:
        return DEFAULT_SPEED_PROFILE

    if is_url(source):
        cache = cache if cache is not None else CacheURL()
        text = cache.get(source)
    else:
        text = resolve_profile_path(source, config_dir).read_text(encoding="utf-8")

    profile = SpeedProfile.from_json(text)
    logger.info(f"Loaded speed profile from {source} ({len(profile)} bolt classes)")

    if merge_default:
        return DEFAULT_SPEED_PROFILE.merged(profile)
    return profile
