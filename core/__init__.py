"""
copyops Core Module
Parses and applies deferred file operation instructions.
"""

from .config import Config
from .instructions import (Comment, Delete, Execute, Move, OverwritePolicy,
                           InstructionParseError, parse)
from .paths import WildcardPatternError
from .executor import OperationExecutor
from .batch_runner import BatchRunner, PlannedLine
from .structured_events import EventEmitter
from .logger import setup_logging

__all__ = [
    'Config',
    'Comment',
    'Delete',
    'Execute',
    'Move',
    'OverwritePolicy',
    'InstructionParseError',
    'WildcardPatternError',
    'parse',
    'OperationExecutor',
    'BatchRunner',
    'PlannedLine',
    'EventEmitter',
    'setup_logging'
]
