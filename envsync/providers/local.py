"""Local file system provider (.env, JSON, YAML and INI files)."""

from __future__ import annotations

import configparser
import json
import logging
import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..core.context import Context
from ..core.flatten import flatten
from ..dotenv import read_dotenv

logger = logging.getLogger(__name__)

PROVIDER_NAME = "local"
DEFAULT_ENV_FILE = ".env"

MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_LINE_LENGTH = 8192

_INVALID_KEY_CHARS = frozenset(" \t\n\r=")


class LocalFileProvider:
    """Load configuration from files under a base directory.

    The format is chosen from the file suffix: ``.json``, ``.yaml``/``.yml``
    and ``.ini`` are flattened with dot notation; anything else is read as a
    dotenv file.
    """

    def __init__(self, base_path: Union[str, Path] = "."):
        self.name = PROVIDER_NAME
        self.base_path = Path(base_path or ".")

    def resolve(self, source: str) -> Path:
        if not source or not source.strip():
            source = DEFAULT_ENV_FILE
        path = Path(source)
        if path.is_absolute():
            return path
        return self.base_path / path

    def validate(self, source: str) -> None:
        if not source or not source.strip():
            raise ValueError("source cannot be empty")
        path = self.resolve(source)
        try:
            st = path.stat()
        except FileNotFoundError:
            raise FileNotFoundError(f"file not found: {path}") from None
        except OSError as exc:
            raise OSError(f"failed to stat file {path}: {exc}") from exc
        if not stat.S_ISREG(st.st_mode):
            raise ValueError(f"source is not a regular file: {path}")
        if st.st_size > MAX_FILE_SIZE:
            raise ValueError(f"file too large: {st.st_size} bytes > {MAX_FILE_SIZE} bytes")
        if not os.access(path, os.R_OK):
            raise PermissionError(f"file is not readable: {path}")
        if os.name == "posix" and st.st_mode & stat.S_IWOTH:
            raise PermissionError(f"file is world-writable, which is insecure: {path}")

    def load(self, ctx: Context, source: str) -> Dict[str, str]:
        path = self.resolve(source)
        if not path.exists():
            raise FileNotFoundError(f"file not found: {path}")
        size = path.stat().st_size
        if size > MAX_FILE_SIZE:
            raise ValueError(f"file too large: {size} bytes > {MAX_FILE_SIZE} bytes")

        suffix = path.suffix.lower()
        if suffix == ".json":
            config = flatten(self._read_json(path))
        elif suffix in {".yaml", ".yml"}:
            config = flatten(self._read_yaml(path))
        elif suffix == ".ini":
            config = self._read_ini(path)
        else:
            try:
                config = read_dotenv(path)
            except (OSError, UnicodeDecodeError) as exc:
                raise ValueError(f"failed to read environment file {path}: {exc}") from exc

        self._check(config)
        logger.debug("read %d keys from %s", len(config), path)
        return config

    def _read_json(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"JSON document in {path} must be an object")
        return data

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"YAML document in {path} must be a mapping")
        return data

    def _read_ini(self, path: Path) -> Dict[str, str]:
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str
        try:
            parser.read(path, encoding="utf-8")
        except configparser.Error as exc:
            raise ValueError(f"invalid INI file {path}: {exc}") from exc
        flat: Dict[str, str] = {}
        for key, value in parser.defaults().items():
            flat[key] = value
        for section in parser.sections():
            for key, value in parser.items(section):
                flat[f"{section}.{key}"] = value
        return flat

    def _check(self, config: Dict[str, str]) -> None:
        for key, value in config.items():
            if not key.strip():
                raise ValueError("empty key is not allowed")
            if len(value) > MAX_LINE_LENGTH:
                raise ValueError(f"value too long for key {key}: {len(value)} > {MAX_LINE_LENGTH}")
            if _INVALID_KEY_CHARS.intersection(key):
                raise ValueError(f"key contains invalid characters: {key}")


def create_local_provider(config: Dict[str, Any]) -> LocalFileProvider:
    base_path = config.get("base_path")
    if not isinstance(base_path, str):
        base_path = "."
    return LocalFileProvider(base_path)
