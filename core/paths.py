"""
Path handling for copyops instructions.
Cleans operand tokens, expands environment references, and splits wildcard patterns.
"""

import os
import re
from pathlib import Path
from typing import Mapping, Optional, Tuple

WILDCARD_CHARS = ('*', '?')

# %NAME% references, as written in Windows-style instruction files
_PERCENT_VAR = re.compile(r'%([^%\s]+)%')
# $NAME and ${NAME} references
_DOLLAR_VAR = re.compile(r'\$(?:\{([^}]+)\}|([A-Za-z_][A-Za-z0-9_]*))')


class InstructionError(Exception):
    """Base class for problems with an instruction line."""
    pass


class WildcardPatternError(InstructionError):
    """Raised when a wildcard pattern cannot be split into parent and match."""
    pass


def expand_environment(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Expand environment variable references in a string.

    Both %NAME% and $NAME / ${NAME} forms are expanded. References to
    variables that are not set are left exactly as written.

    Args:
        text: String that may contain variable references
        environ: Environment mapping (default: snapshot of os.environ)

    Returns:
        String with known references replaced
    """
    env = dict(os.environ) if environ is None else environ

    def _percent(match):
        return env.get(match.group(1), match.group(0))

    def _dollar(match):
        name = match.group(1) or match.group(2)
        return env.get(name, match.group(0))

    text = _PERCENT_VAR.sub(_percent, text)
    return _DOLLAR_VAR.sub(_dollar, text)


def normalize(raw: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Clean a path token from an instruction line.

    Trims whitespace, strips one layer of surrounding double quotes and
    expands environment references. Interior quotes are not un-escaped.

    Args:
        raw: Raw operand text
        environ: Environment mapping (default: snapshot of os.environ)

    Returns:
        Cleaned path string
    """
    cleaned = raw.strip()
    if len(cleaned) >= 2 and cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1]
    return expand_environment(cleaned, environ)


def has_wildcard(path) -> bool:
    """Check if a path string contains '*' or '?'."""
    text = str(path)
    return any(char in text for char in WILDCARD_CHARS)


def split_wildcard(pattern) -> Tuple[Path, str]:
    """
    Split a wildcard pattern into its parent directory and match expression.

    Only the last path component may contain wildcards; matching is not
    recursive.

    Raises:
        WildcardPatternError: If the pattern has no usable match expression
            or the parent part itself contains wildcards
    """
    path = Path(pattern)
    match = path.name
    parent = path.parent

    if not match or not has_wildcard(match):
        raise WildcardPatternError(f"Wildcard must be in the file name part: {pattern}")
    if has_wildcard(parent):
        raise WildcardPatternError(f"Wildcard not allowed in parent directory: {pattern}")

    return parent, match


def resolve(path, working_directory) -> Path:
    """
    Resolve a path relative to the working directory.

    Absolute paths are returned unchanged; nothing is touched on disk.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return Path(working_directory) / candidate
