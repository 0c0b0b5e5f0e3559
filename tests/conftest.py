"""
Pytest configuration and fixtures for copyops tests.
"""

import pytest
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Config
from core.structured_events import EventEmitter


@pytest.fixture
def sink():
    """In-memory diagnostic sink (no logging, no file)."""
    return EventEmitter(enable_console=False)


@pytest.fixture
def host(tmp_path):
    """Config for a host whose base path and working directory live in tmp_path."""
    config = Config()
    config.set('base_path', str(tmp_path / 'myservice'))
    config.set('working_directory', str(tmp_path))
    return config


@pytest.fixture
def write_instructions(host):
    """Write lines to the host's instruction file and return its path."""
    def _write(*lines, encoding='utf-8'):
        path = host.instructions_file
        path.write_text("\n".join(lines) + "\n", encoding=encoding)
        return path
    return _write
