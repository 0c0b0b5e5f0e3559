"""
Instruction file processing for copyops.

The instruction file (<base_path>.copies) is consumed exactly once: it is read
line by line, each instruction is applied, and the file is deleted however
the pass ends.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .config import Config
from .executor import OperationExecutor
from .instructions import Comment, Instruction, InstructionParseError, parse
from .structured_events import DiagnosticSink

from utils.error_messages import format_unknown_instruction


@dataclass
class PlannedLine:
    """One non-blank instruction line as parsed by BatchRunner.plan()."""
    line_number: int
    text: str
    instruction: Optional[Instruction] = None
    error: Optional[str] = None


class BatchRunner:
    """Runs the instruction file for a host process."""

    def __init__(self, config: Config, sink: DiagnosticSink,
                 executor: Optional[OperationExecutor] = None):
        """
        Initialize the batch runner.

        Args:
            config: Config providing base_path and working_directory
            sink: Diagnostic sink for progress and failure messages
            executor: Executor to apply instructions (default: built from config)
        """
        self.config = config
        self.sink = sink
        self.stats: Dict[str, int] = {'lines': 0, 'comments': 0, 'unrecognized': 0}
        self.executor = executor or OperationExecutor(
            sink, config.working_directory, stats=self.stats)

    @property
    def instructions_file(self) -> Optional[Path]:
        return self.config.instructions_file

    def _lines(self, handle) -> Iterator[Tuple[int, str]]:
        """Yield (line_number, text) for non-blank lines, left-trimmed."""
        for line_number, raw in enumerate(handle, start=1):
            line = raw.rstrip('\r\n').lstrip()
            if line:
                yield line_number, line

    def run(self):
        """
        Apply the instruction file, if there is one, then delete it.

        Per-line parse and file system failures are reported to the sink and
        skipped. Anything else propagates, after the file has been deleted.
        """
        path = self.instructions_file
        if path is None or not path.is_file():
            return  # nothing to handle

        try:
            with open(path, 'r', encoding='utf-8-sig', errors='replace') as handle:
                for line_number, line in self._lines(handle):
                    self.stats['lines'] += 1
                    self.sink.info(f"({line_number}) File operation: {line}")
                    self._process_line(line, line_number)
        finally:
            path.unlink(missing_ok=True)

    def _process_line(self, line: str, line_number: int):
        try:
            instruction = parse(line, line_number)
        except InstructionParseError:
            self.stats['unrecognized'] += 1
            self.sink.warn(format_unknown_instruction(line, line_number))
            return

        if isinstance(instruction, Comment):
            self.stats['comments'] += 1
        self.executor.execute(instruction)

    def plan(self) -> List[PlannedLine]:
        """
        Parse the instruction file without applying or deleting it.

        Returns:
            One PlannedLine per non-blank line (empty if there is no file)
        """
        path = self.instructions_file
        if path is None or not path.is_file():
            return []

        planned = []
        with open(path, 'r', encoding='utf-8-sig', errors='replace') as handle:
            for line_number, line in self._lines(handle):
                try:
                    planned.append(PlannedLine(line_number, line, parse(line, line_number)))
                except InstructionParseError as e:
                    planned.append(PlannedLine(line_number, line, error=str(e)))
        return planned
