"""
File operations for copyops instructions.
Applies delete, move/merge and execute instructions to the file system.
"""

import fnmatch
import os
import shutil
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .instructions import Comment, Delete, Execute, Instruction, Move, OverwritePolicy
from .paths import has_wildcard, resolve, split_wildcard
from .structured_events import DiagnosticSink

from utils.error_messages import format_delete_error, format_move_error, format_error


CommandRunner = Callable[[str], None]


def _matching_files(parent: Path, match: str) -> List[Path]:
    """Files directly inside parent whose names match the wildcard expression."""
    with os.scandir(parent) as entries:
        names = [entry.name for entry in entries
                 if entry.is_file() and fnmatch.fnmatch(entry.name, match)]
    return [parent / name for name in sorted(names)]


def _same_path(source: Path, target: Path) -> bool:
    """True when both paths exist and name the same file or directory."""
    return source.exists() and target.exists() and os.path.samefile(source, target)


class OperationExecutor:
    """Applies parsed instructions; file system errors are logged, never raised."""

    def __init__(self, sink: DiagnosticSink, working_directory=None,
                 command_runner: Optional[CommandRunner] = None,
                 stats: Optional[Dict[str, int]] = None):
        """
        Initialize the executor.

        Args:
            sink: Diagnostic sink receiving progress and failure messages
            working_directory: Directory relative paths are resolved against
                (None = process working directory)
            command_runner: Optional callable that runs '@' command lines
            stats: Optional counters dict, updated in place
        """
        self.sink = sink
        self.working_directory = Path(working_directory) if working_directory else Path.cwd()
        self.command_runner = command_runner
        self.stats = stats if stats is not None else {}
        for key in ('deleted', 'moved', 'merged', 'skipped', 'failed', 'commands'):
            self.stats.setdefault(key, 0)

    def _count(self, key: str, value: int = 1):
        self.stats[key] = self.stats.get(key, 0) + value

    def execute(self, instruction: Instruction):
        """
        Apply one instruction.

        Raises:
            WildcardPatternError: If a wildcard pattern cannot be resolved
        """
        if isinstance(instruction, Comment):
            self.sink.info(instruction.text)
        elif isinstance(instruction, Delete):
            self.delete(instruction.target)
        elif isinstance(instruction, Move):
            self.move(instruction.source, instruction.destination, instruction.policy)
        elif isinstance(instruction, Execute):
            self.run_command(instruction.command_line)
        else:
            raise TypeError(f"Not an instruction: {instruction!r}")

    def delete(self, pattern: str):
        """
        Delete a file, a directory (recursively) or every file matching a wildcard.

        A missing target is not an error.
        """
        target = resolve(pattern, self.working_directory)
        try:
            if has_wildcard(pattern):
                parent, match = split_wildcard(pattern)
                for file in _matching_files(resolve(parent, self.working_directory), match):
                    self.sink.info(f"Delete file: {file}")
                    file.unlink()
                    self._count('deleted')
            elif target.is_dir():
                self.sink.info(f"Delete directory recursively: {target}")
                shutil.rmtree(target)
                self._count('deleted')
            elif target.is_file() or target.is_symlink():
                self.sink.info(f"Delete file: {target}")
                target.unlink()
                self._count('deleted')
        except OSError as e:
            self._count('failed')
            self.sink.warn(format_delete_error(target, e))

    def move(self, source: str, destination: str,
             policy: OverwritePolicy = OverwritePolicy.OVERWRITE):
        """
        Move a file, a directory or a wildcard set of files.

        Args:
            source: Source path or wildcard pattern
            destination: Destination file or directory
            policy: OVERWRITE replaces existing targets; NO_OVERWRITE_MERGE
                keeps existing files and merges into existing directories
        """
        source_path = resolve(source, self.working_directory)
        destination_path = resolve(destination, self.working_directory)
        if not has_wildcard(source):
            self._move_entry(source_path, destination_path, policy)
            return

        try:
            self._move_wildcard(source, destination_path, policy)
        except OSError as e:
            self._count('failed')
            self.sink.warn(format_move_error(source_path, destination_path, e))

    def _move_entry(self, source: Path, destination: Path, policy: OverwritePolicy):
        # Matched and merged entries come through here, so names are taken literally
        try:
            if source.is_dir():
                self._move_directory(source, destination, policy)
            else:
                self._move_file(source, destination, policy)
        except OSError as e:
            self._count('failed')
            self.sink.warn(format_move_error(source, destination, e))

    def _move_wildcard(self, pattern: str, destination: Path, policy: OverwritePolicy):
        parent, match = split_wildcard(pattern)
        destination.mkdir(parents=True, exist_ok=True)
        for file in _matching_files(resolve(parent, self.working_directory), match):
            self.sink.info(f"Recurse move of {file} into {destination}")
            self._move_entry(file, destination, policy)

    def _move_directory(self, source: Path, destination: Path, policy: OverwritePolicy):
        if not destination.is_dir():
            self.sink.info(f"Move/rename directory {source} to directory {destination}")
            shutil.move(str(source), str(destination))
            self._count('moved')
            return

        self.sink.info(f"Move directory {source} into existing directory {destination}")
        target = destination / source.name

        if _same_path(source, target):
            self.sink.info(f"Move directory {source} onto itself skipped")
            self._count('skipped')
            return

        if policy is OverwritePolicy.OVERWRITE or not target.exists():
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
            shutil.move(str(source), str(target))
            self._count('moved')
            return

        # Merge into the existing target, keeping what is already there
        self.sink.info(f"Merge directory {source} into {target}")
        for child in sorted(source.iterdir()):
            self._move_entry(child, target, policy)
        self._count('merged')

        if not any(source.iterdir()):
            source.rmdir()

    def _move_file(self, source: Path, destination: Path, policy: OverwritePolicy):
        if destination.is_dir():
            destination = destination / source.name

        if _same_path(source, destination):
            self.sink.info(f"Move file {source} onto itself skipped")
            self._count('skipped')
            return

        if policy is OverwritePolicy.OVERWRITE or not destination.exists():
            self.sink.info(f"Move file {source} to {destination}")
            if not source.exists():
                raise FileNotFoundError(2, "No such file or directory", str(source))
            destination.unlink(missing_ok=True)
            shutil.move(str(source), str(destination))
            self._count('moved')
        else:
            self.sink.info(f"Move file {source} overwrite skipped")
            self._count('skipped')

    def run_command(self, command_line: str):
        """Hand an execute instruction to the command runner, if one is configured."""
        command_line = command_line.strip()
        if self.command_runner is None:
            self.sink.info(f"Execute instruction not run (no command runner): {command_line}")
            return

        self.sink.info(f"Execute: {command_line}")
        try:
            self.command_runner(command_line)
            self._count('commands')
        except OSError as e:
            self._count('failed')
            self.sink.warn(format_error(
                what_failed=f"Failed to execute: {command_line}",
                reason=str(e),
                action="Check the command exists and can be started"
            ))
