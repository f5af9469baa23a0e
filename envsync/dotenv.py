"""Read and write .env files"""

import os
import re
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

_KEY_PATTERN = r"[^\s=#'\"][^\s=]*"
_KEY_RE = re.compile(_KEY_PATTERN)
_LINE_RE = re.compile(r"^(?:export\s+)?(" + _KEY_PATTERN + r")\s*=\s*(.*)$")
_DOUBLE_QUOTED_RE = re.compile(r"\\(.)|\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")
_UNQUOTED_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}
_NEEDS_QUOTES_RE = re.compile(r"[\s\"'\\#$=]")


def _quoted_body(value: str) -> Optional[str]:
    """Return the text between the opening quote and its closing quote.

    Only whitespace or a ``#`` comment may follow the closing quote. Inside
    double quotes a backslash escapes the next character. Returns None when
    the value is not a well-formed quoted string.
    """
    quote = value[0]
    i = 1
    while i < len(value):
        ch = value[i]
        if ch == "\\" and quote == '"':
            i += 2
            continue
        if ch == quote:
            rest = value[i + 1:].strip()
            if rest and not rest.startswith("#"):
                return None
            return value[1:i]
        i += 1
    return None


class DotEnv:
    """Parse KEY=VALUE files without touching ``os.environ``."""

    def __init__(self, dotenv_path: Union[str, Path], expand: bool = True):
        """Initialize DotEnv instance.

        Args:
            dotenv_path: Path to the .env file.
            expand: Whether to expand ``$VAR`` and ``${VAR}`` references.
        """
        self.dotenv_path = Path(dotenv_path)
        self.expand = expand
        self._values: Dict[str, str] = {}

    def _parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        """Parse a single line from .env file.

        Args:
            line: Line to parse

        Returns:
            Tuple of (key, value) or None if line should be ignored
        """
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith("#"):
            return None

        match = _LINE_RE.match(line)
        if not match:
            return None

        key, value = match.groups()

        if value[:1] in ("'", '"'):
            inner = _quoted_body(value)
            if inner is not None:
                if value[0] == '"':
                    return key, _DOUBLE_QUOTED_RE.sub(self._replace_double_quoted, inner)
                # Single-quoted values are literal
                return key, inner

        # Inline comment on an unquoted value
        if " #" in value:
            value = value.split(" #", 1)[0]
        value = value.strip()
        if self.expand:
            value = _UNQUOTED_RE.sub(self._replace_unquoted, value)
        return key, value

    def _lookup(self, name: str) -> str:
        # Earlier keys in the same file win over the process environment
        if name in self._values:
            return self._values[name]
        return os.environ.get(name, "")

    def _replace_double_quoted(self, match: "re.Match[str]") -> str:
        escaped, braced, simple = match.groups()
        if escaped is not None:
            return _ESCAPES.get(escaped, escaped)
        if not self.expand:
            return match.group(0)
        return self._lookup(braced or simple)

    def _replace_unquoted(self, match: "re.Match[str]") -> str:
        return self._lookup(match.group(1) or match.group(2))

    def read(self) -> Dict[str, str]:
        """Parse the file and return its values.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not valid UTF-8.
        """
        self._values = {}
        with open(self.dotenv_path, "r", encoding="utf-8") as f:
            for line in f:
                parsed = self._parse_line(line)
                if parsed:
                    key, value = parsed
                    self._values[key] = value
        return self.values()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def values(self) -> Dict[str, str]:
        """Get all parsed values as a dictionary."""
        return self._values.copy()


def read_dotenv(dotenv_path: Union[str, Path], expand: bool = True) -> Dict[str, str]:
    """Parse a .env file into a dictionary.

    Args:
        dotenv_path: Path to .env file
        expand: Whether to expand variable references

    Returns:
        Mapping of keys to values in file order
    """
    return DotEnv(dotenv_path, expand=expand).read()


def format_value(value: str) -> str:
    """Quote a value for a .env file when it is not a plain token.

    Quoted values escape backslashes, double quotes, dollar signs and control
    characters so that ``read_dotenv`` returns the original string.
    """
    if value and not _NEEDS_QUOTES_RE.search(value):
        return value
    if not value:
        return '""'
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def format_dotenv(values: Mapping[str, str], header: Optional[str] = None) -> str:
    """Render a mapping as .env text, keys sorted.

    Raises:
        ValueError: If a key could not be read back from a .env file.
    """
    for key in values:
        if not _KEY_RE.fullmatch(key):
            raise ValueError(f"key cannot be written to a .env file: {key!r}")
    lines = []
    if header:
        lines.extend(f"# {line}" if line else "" for line in header.splitlines())
        lines.append("")
    for key in sorted(values):
        lines.append(f"{key}={format_value(values[key])}")
    return "\n".join(lines) + "\n"
