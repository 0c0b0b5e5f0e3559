"""
Instruction grammar for copyops.

Each non-blank line of an instruction file is one of:

    # comment                 logged, not executed
    <target                   delete file, directory (recursive) or wildcard set
    @command args             execute command (delegated to a command runner)
    source > destination      move, replacing existing destinations
    source ) destination      move without overwrite, merging directories

Operands may be wrapped in double quotes so operator characters can appear
literally inside them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from .paths import InstructionError, normalize


class InstructionParseError(InstructionError):
    """Raised when a line matches no known instruction shape."""

    def __init__(self, line: str, line_number: int = 0):
        self.line = line
        self.line_number = line_number
        super().__init__(f"Unknown file handling instruction: {line}")


class OverwritePolicy(Enum):
    """Whether existing destinations are replaced or preserved."""
    OVERWRITE = 'overwrite'
    NO_OVERWRITE_MERGE = 'no-overwrite'


@dataclass(frozen=True)
class Comment:
    text: str
    line_number: int = 0


@dataclass(frozen=True)
class Delete:
    target: str
    line_number: int = 0


@dataclass(frozen=True)
class Execute:
    command_line: str
    line_number: int = 0


@dataclass(frozen=True)
class Move:
    source: str
    destination: str
    policy: OverwritePolicy
    line_number: int = 0

    @property
    def overwrite(self) -> bool:
        return self.policy is OverwritePolicy.OVERWRITE


Instruction = Union[Comment, Delete, Execute, Move]


@dataclass(frozen=True)
class OperatorScan:
    """Unquoted operator counts and last positions within a line."""
    gt_count: int = 0
    gt_pos: int = -1
    paren_count: int = 0
    paren_pos: int = -1


def scan_operators(line: str) -> OperatorScan:
    """
    Count '>' and ')' characters that sit outside double-quoted regions.

    Quotes toggle the quoted state; escaped quotes are not recognised.
    """
    gt_count = paren_count = 0
    gt_pos = paren_pos = -1
    in_quote = False

    for pos, char in enumerate(line):
        if char == '"':
            in_quote = not in_quote
        elif in_quote:
            continue
        elif char == '>':
            gt_count += 1
            gt_pos = pos
        elif char == ')':
            paren_count += 1
            paren_pos = pos

    return OperatorScan(gt_count, gt_pos, paren_count, paren_pos)


def parse_move(line: str, line_number: int = 0,
               environ: Optional[Mapping[str, str]] = None) -> Move:
    """
    Parse a move line.

    Exactly one unquoted '>' makes an overwriting move; failing that, exactly
    one unquoted ')' makes a non-overwriting merge. Anything else is
    ambiguous and rejected rather than guessed at.

    Raises:
        InstructionParseError: If no unambiguous operator exists or an
            operand is empty
    """
    scan = scan_operators(line)

    if scan.gt_count == 1:
        pos, policy = scan.gt_pos, OverwritePolicy.OVERWRITE
    elif scan.paren_count == 1:
        pos, policy = scan.paren_pos, OverwritePolicy.NO_OVERWRITE_MERGE
    else:
        raise InstructionParseError(line, line_number)

    source = normalize(line[:pos], environ)
    destination = normalize(line[pos + 1:], environ)
    if not source or not destination:
        raise InstructionParseError(line, line_number)

    return Move(source, destination, policy, line_number)


def parse(line: str, line_number: int = 0,
          environ: Optional[Mapping[str, str]] = None) -> Instruction:
    """
    Classify one instruction line.

    Args:
        line: Line text with leading whitespace already removed
        line_number: 1-based line number, kept for diagnostics
        environ: Environment used to expand operand references

    Returns:
        Comment, Delete, Execute or Move instruction

    Raises:
        InstructionParseError: If the line is not a recognised instruction
    """
    line = line.rstrip('\r\n').lstrip()
    if not line:
        raise InstructionParseError(line, line_number)

    marker = line[0]
    if marker == '#':
        return Comment(line, line_number)
    if marker == '<':
        target = normalize(line[1:], environ)
        if not target:
            raise InstructionParseError(line, line_number)
        return Delete(target, line_number)
    if marker == '@':
        return Execute(line[1:], line_number)

    return parse_move(line, line_number, environ)
