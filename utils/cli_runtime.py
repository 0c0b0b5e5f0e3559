"""CLI/runtime bootstrap helpers for copyops."""

from __future__ import annotations

import argparse
import sys
from typing import Any


def configure_windows_console_utf8() -> None:
    """Best-effort UTF-8 console setup for Windows terminals."""
    if sys.platform != "win32":
        return

    if hasattr(sys.stdout, "reconfigure"):
        stdout: Any = sys.stdout
        stderr: Any = sys.stderr
        try:
            stdout.reconfigure(encoding="utf-8")
            stderr.reconfigure(encoding="utf-8")
        except (OSError, ValueError):
            # Terminal-dependent; default encoding still works.
            pass


def build_copyops_arg_parser() -> argparse.ArgumentParser:
    """Create the copyops CLI parser."""
    parser = argparse.ArgumentParser(
        description="Apply deferred file operations from a <base>.copies instruction file.",
        epilog="Examples:\n"
        "  copyops C:\\Services\\myservice\n"
        "  copyops --base C:\\Services\\myservice --working-dir C:\\Services\n"
        "  copyops C:\\Services\\myservice --wait-pid 4242\n"
        "  copyops C:\\Services\\myservice --check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("base_pos", nargs="?", help="Host base path (positional); reads <base>.copies")
    parser.add_argument("--base", "-b", help="Host base path; reads <base>.copies")
    parser.add_argument("--working-dir", "-w", help="Directory relative paths are resolved against")
    parser.add_argument("--config", "-c", help="Path to config.json file")
    parser.add_argument("--check", action="store_true",
                        help="Parse and show the instructions without applying or deleting them")
    parser.add_argument("--wait-pid", type=int, help="Wait for this host process to exit first")
    parser.add_argument("--wait-timeout", type=int, help="Seconds to wait for --wait-pid (default: config)")
    parser.add_argument("--event-log", help="Append structured events (JSON lines) to this file")
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors and styled output.",
    )
    return parser
