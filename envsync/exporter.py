"""Export of merged configuration to env, JSON and YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

import yaml

from .core.context import Context
from .core.errors import ExportError, SourceFormatError
from .dotenv import format_dotenv

logger = logging.getLogger(__name__)

FORMAT_ENV = "env"
FORMAT_JSON = "json"
FORMAT_YAML = "yaml"

MAX_FILE_SIZE = 10 * 1024 * 1024

ENV_HEADER = (
    "Environment configuration exported by envsync\n"
    "Generated automatically - do not edit manually"
)


def supported_formats() -> List[str]:
    return [FORMAT_ENV, FORMAT_JSON, FORMAT_YAML]


def parse_destination(destination: str) -> Tuple[str, str]:
    """Split ``format:path`` into a lower-cased format and a path.

    Raises:
        SourceFormatError: If either part is missing.
    """
    if not isinstance(destination, str) or ":" not in destination:
        raise SourceFormatError(
            f"invalid destination format, expected 'format:path', got: {destination}"
        )
    fmt, path = destination.split(":", 1)
    if not fmt.strip() or not path.strip():
        raise SourceFormatError(
            f"invalid destination format, expected 'format:path', got: {destination}"
        )
    return fmt.strip().lower(), path


class MultiFormatExporter:
    """Write configuration in one of the supported formats.

    Relative destination paths are resolved against ``output_dir``; missing
    parent directories are created.
    """

    def __init__(self, output_dir: Union[str, Path] = "."):
        self.output_dir = Path(output_dir or ".")

    def resolve(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.output_dir / p

    def render(self, config: Mapping[str, str], fmt: str) -> str:
        if fmt == FORMAT_ENV:
            try:
                return format_dotenv(config, header=ENV_HEADER)
            except ValueError as exc:
                raise ExportError(str(exc)) from exc
        document = self._document(config, fmt)
        if fmt == FORMAT_JSON:
            return json.dumps(document, indent=2, sort_keys=True) + "\n"
        if fmt == FORMAT_YAML:
            return yaml.safe_dump(document, sort_keys=True, allow_unicode=True)
        raise ExportError(f"unsupported export format: {fmt}")

    def _document(self, config: Mapping[str, str], fmt: str) -> Dict[str, Any]:
        return {
            "metadata": {"exported_by": "envsync", "format": fmt},
            "config": dict(config),
        }

    def export(self, ctx: Context, config: Mapping[str, str], destination: str) -> None:
        fmt, path = parse_destination(destination)
        if fmt not in supported_formats():
            raise ExportError(f"unsupported export format: {fmt}")

        content = self.render(config, fmt)
        data = content.encode("utf-8")
        if len(data) > MAX_FILE_SIZE:
            raise ExportError(f"export content too large: {len(data)} bytes > {MAX_FILE_SIZE} bytes")

        ctx.raise_if_done()
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise ExportError(f"failed to write file {target}: {exc}") from exc
        logger.debug("exported %d keys as %s to %s", len(config), fmt, target)
