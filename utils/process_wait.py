"""
Host process checks for copyops.

Instructions may only be applied once the supervised process has released
its files, so the CLI can wait for that process to exit first.
"""

import logging
import time

import psutil


def wait_for_process_exit(pid: int, timeout: float = 60, poll_interval: float = 0.5) -> bool:
    """
    Wait for a process to exit.

    Args:
        pid: Process ID of the supervised host process
        timeout: Maximum seconds to wait (0 = check once)
        poll_interval: Seconds between checks for zombie/defunct processes

    Returns:
        True if the process is gone, False if it is still running after timeout
    """
    try:
        proc = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logging.info(f"Host process {pid} is not running")
        return True

    deadline = time.monotonic() + timeout
    while True:
        try:
            if proc.status() == psutil.STATUS_ZOMBIE:
                logging.info(f"Host process {pid} has exited (zombie)")
                return True
            remaining = deadline - time.monotonic()
            proc.wait(timeout=max(min(remaining, poll_interval), 0))
            logging.info(f"Host process {pid} has exited")
            return True
        except psutil.NoSuchProcess:
            logging.info(f"Host process {pid} has exited")
            return True
        except psutil.TimeoutExpired:
            if time.monotonic() >= deadline:
                logging.warning(f"Host process {pid} still running after {timeout}s")
                return False
        except psutil.AccessDenied as e:
            logging.warning(f"Cannot inspect host process {pid}: {e}")
            return not psutil.pid_exists(pid)
