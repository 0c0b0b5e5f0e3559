"""
Clear, actionable error message formatting.

All error messages follow the pattern:
  ERROR: [What failed]
    Reason: [Why it failed]
    Action: [What user should do]
    Location: [Where the problem is]
"""

from pathlib import Path
from typing import Optional


def format_error(
    what_failed: str,
    reason: str,
    action: str,
    location: Optional[Path] = None,
    details: Optional[str] = None
) -> str:
    """
    Format a clear, actionable error message.

    Args:
        what_failed: What operation failed (e.g., "Failed to delete tmp/old.txt")
        reason: Why it failed (e.g., the OSError message)
        action: What user should do
        location: Where the problem occurred (file path, directory, etc.)
        details: Optional additional details

    Returns:
        Formatted error message
    """
    lines = [f"ERROR: {what_failed}"]
    lines.append(f"  Reason: {reason}")
    lines.append(f"  Action: {action}")

    if location:
        lines.append(f"  Location: {location}")

    if details:
        lines.append(f"  Details: {details}")

    return "\n".join(lines)


def _reason(error: BaseException) -> str:
    """Best description of an OS error, falling back to its type name."""
    text = getattr(error, 'strerror', None) or str(error)
    return text or type(error).__name__


def format_delete_error(target: Path, error: BaseException) -> str:
    """Format a failed delete instruction."""
    return format_error(
        what_failed=f"Failed to delete: {target}",
        reason=_reason(error),
        action="Check the target is not in use and is writable",
        location=target
    )


def format_move_error(source: Path, destination: Path, error: BaseException) -> str:
    """Format a failed move instruction, naming both paths."""
    return format_error(
        what_failed=f"Failed to rename/move: {source} to {destination}",
        reason=_reason(error),
        action="Check both paths exist and are writable",
        location=source,
        details=f"Destination: {destination}"
    )


def format_unknown_instruction(line: str, line_number: int) -> str:
    """Format an unrecognized instruction line."""
    return f"Unknown file handling instruction (line {line_number}): {line}"
