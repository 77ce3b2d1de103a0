"""
Shared pytest fixtures for the StdoutChannel test suite.

This file centralizes common test setup for the channel components:
- StdoutChannel (facade)
- MessageQueue / LineBuffer (building blocks)
- StreamSink / MockStdout (sinks)
"""

import io
import shutil
import tempfile

import pytest
import yaml
from loguru import logger

from stdout_channel.channel import LineBuffer, MockStdout


# ========================================================================================
# TEMPORARY DIRECTORY FIXTURES
# ========================================================================================

@pytest.fixture
def temp_dir():
    """
    Creates a temporary folder for config files.

    - Auto-cleanup after test completes
    """
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


# ========================================================================================
# SINK FIXTURES
# ========================================================================================

@pytest.fixture
def mock_stdout():
    """Capture sink standing in for stdout."""
    return MockStdout()


@pytest.fixture
def mock_stderr():
    """Capture sink standing in for stderr."""
    return MockStdout()


@pytest.fixture
def line_buffer():
    return LineBuffer()


class BrokenStream(io.StringIO):
    """Text stream whose writes fail like a closed pipe."""

    def write(self, s):
        raise BrokenPipeError("pipe closed")


@pytest.fixture
def broken_stream():
    return BrokenStream()


@pytest.fixture
def text_stream():
    """In-memory text stream without a binary buffer underneath."""
    return io.StringIO()


# ========================================================================================
# CONFIGURATION FIXTURES
# ========================================================================================

@pytest.fixture
def write_config(temp_dir):
    """
    Write a YAML config file into temp_dir and return its path.

    Usage: def test_something(write_config):
           path = write_config({'flush': False})
    """
    def _write(conf: dict, name: str = "channel.yaml") -> str:
        path = f"{temp_dir}/{name}"
        with open(path, "w") as f:
            yaml.dump(conf, f)
        return path
    return _write


# ========================================================================================
# LOGGING FIXTURES
# ========================================================================================

@pytest.fixture
def captured_logs():
    """
    Enable the library's loguru output and collect formatted records in a list.
    """
    records = []
    logger.enable("stdout_channel")
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
    logger.disable("stdout_channel")
