from __future__ import annotations

import hashlib
import logging
import os
import time
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class CacheError(Exception):
    pass


CACHE_DIR_ENV = "TIGHTENING_CACHE_DIR"
DEFAULT_APP_NAME = "tightening_program"


def default_cache_base_dir() -> Path:
    env = os.environ.get(CACHE_DIR_ENV)
    return Path(env) if env else Path.home() / ".my_cache"


class Cache:
    """Caché de ficheros de texto en <base>/<app_name>/ con caducidad en días."""

    def __init__(self, app_name: str = DEFAULT_APP_NAME, obsolescence_days: int = 7, cache_dir: Optional[Path] = None):
        if not app_name:
            raise CacheError("app_name cannot be empty")

        self._obsolescence_days = obsolescence_days
        base_dir = cache_dir if cache_dir is not None else default_cache_base_dir()
        self._cache_dir = base_dir / app_name
        self._cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def _get_filepath(self, name: str) -> Path:
        return self.cache_dir / name

    def exists(self, name: str) -> bool:
        return self._get_filepath(name).is_file()

    def set_text(self, name: str, data: str) -> None:
        self._get_filepath(name).write_text(data, encoding="utf-8")

    def load_text(self, name: str) -> str:
        fp = self._get_filepath(name)
        if not fp.is_file():
            raise CacheError(f"Not cached: {name}")
        return fp.read_text(encoding="utf-8")

    def how_old_ms(self, name: str) -> float:
        fp = self._get_filepath(name)
        if not fp.is_file():
            raise CacheError(f"Not cached: {name}")
        return (time.time() - fp.stat().st_mtime) * 1000

    def is_obsolete(self, name: str) -> bool:
        if not self.exists(name):
            return True
        return self.how_old_ms(name) > self._obsolescence_days * 24 * 60 * 60 * 1000

    def clear(self) -> None:
        for item in self.cache_dir.iterdir():
            if item.is_file():
                item.unlink()


class CacheURL(Cache):
    """Cachea el contenido de URLs (tablas de velocidades publicadas) por hash MD5 de la URL."""

    def _name_for_url(self, url: str) -> str:
        return hashlib.md5(url.encode("utf-8")).hexdigest() + ".json"

    def get(self, url: str, timeout: int = 15, force: bool = False) -> str:
        """
        Devuelve el contenido de la URL:
        - en caché y vigente -> caché
        - si no -> descarga, guarda y devuelve
        """
        name = self._name_for_url(url)

        if not force and not self.is_obsolete(name):
            logger.debug(f"Cache hit for {url}")
            return self.load_text(name)

        logger.info(f"Downloading {url}")
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        text = resp.text
        self.set_text(name, text)
        return text
