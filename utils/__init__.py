"""
copyops Utilities
CLI bootstrap, error formatting and host process checks.
"""

from .process_wait import wait_for_process_exit

__all__ = ['wait_for_process_exit']
